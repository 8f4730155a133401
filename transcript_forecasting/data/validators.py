"""Data quality checks for transcript count series"""

from typing import Dict, List

import numpy as np

from transcript_forecasting.types import AggregatedSeries
from transcript_forecasting.utils.logging_config import get_logger
from transcript_forecasting.utils.periods import months_between, next_period_keys


logger = get_logger(__name__)


class DataQualityValidator:
    """
    Validate data quality ahead of forecasting

    Performs checks on:
    - Value ranges (negative counts)
    - Monthly completeness (gaps between observed months)
    - Variance (flat series)
    - Outliers (IQR method)

    Every check returns a report dict with a 'status' of pass, warning
    or fail; none of them raise.
    """

    def __init__(self, config: dict = None):
        """
        Initialize validator

        Args:
            config: Validation configuration (thresholds)
        """
        self.config = config if config else {}
        self.low_variance_threshold = self.config.get('low_variance_threshold', 0.01)
        self.iqr_multiplier = self.config.get('iqr_multiplier', 1.5)

    def validate_value_ranges(self, values) -> Dict:
        """
        Check that no count is negative

        Args:
            values: Raw record values

        Returns:
            Validation report dict
        """
        values = np.asarray(values, dtype=float)
        negative_count = int((values < 0).sum())

        report = {
            'status': 'fail' if negative_count else 'pass',
            'negative_count': negative_count,
            'min_actual': float(values.min()) if len(values) else 0.0
        }

        if negative_count:
            logger.warning(f"⚠️  {negative_count} records have negative counts")

        return report

    def validate_monthly_completeness(self, series: AggregatedSeries) -> Dict:
        """
        Check for missing months between the first and last period

        Args:
            series: Aggregated series

        Returns:
            Validation report dict with the missing period keys
        """
        if len(series) < 2:
            return {'status': 'pass', 'expected_months': len(series), 'missing_months': []}

        first_key = series.period_keys[0]
        span = months_between(first_key, series.last_period_key)
        expected = set([first_key] + next_period_keys(first_key, span))
        missing_months = sorted(expected - set(series.period_keys))

        report = {
            'status': 'warning' if missing_months else 'pass',
            'expected_months': len(expected),
            'missing_months': missing_months,
            'completeness_pct': (len(series) / len(expected)) * 100
        }

        if missing_months:
            logger.warning(f"⚠️  Missing {len(missing_months)} months: {missing_months[:6]}")

        return report

    def check_variance(self, values) -> Dict:
        """
        Flag series whose population variance is below the threshold

        Args:
            values: Series values

        Returns:
            Validation report dict
        """
        values = np.asarray(values, dtype=float)
        variance = float(np.var(values)) if len(values) else 0.0

        return {
            'status': 'warning' if variance < self.low_variance_threshold else 'pass',
            'variance': variance,
            'threshold': self.low_variance_threshold
        }

    def detect_outliers(self, values) -> Dict:
        """
        Detect outliers using the interquartile range

        Quartiles are taken at the floor of the 25% and 75% positions of
        the sorted values, and anything beyond 1.5 IQR from them is flagged.

        Args:
            values: Series values

        Returns:
            Validation report dict with outlier positions
        """
        values = np.asarray(values, dtype=float)

        if len(values) < 4:
            return {'status': 'pass', 'outlier_count': 0, 'outlier_positions': []}

        sorted_values = np.sort(values)
        q1 = sorted_values[int(len(values) * 0.25)]
        q3 = sorted_values[int(len(values) * 0.75)]
        iqr = q3 - q1

        lower_bound = q1 - self.iqr_multiplier * iqr
        upper_bound = q3 + self.iqr_multiplier * iqr

        positions: List[int] = [
            int(i) for i in np.where((values < lower_bound) | (values > upper_bound))[0]
        ]

        report = {
            'status': 'warning' if positions else 'pass',
            'lower_bound': float(lower_bound),
            'upper_bound': float(upper_bound),
            'outlier_count': len(positions),
            'outlier_positions': positions
        }

        if positions:
            logger.warning(
                f"⚠️  Found {len(positions)} outliers outside "
                f"[{lower_bound:,.1f}, {upper_bound:,.1f}]"
            )

        return report

    def validate_quality(self, series: AggregatedSeries) -> Dict:
        """
        Run every series-level check

        Args:
            series: Aggregated series

        Returns:
            Dict with per-check reports plus a list of human-readable issues
        """
        values = series.values
        reports = {
            'value_ranges': self.validate_value_ranges(values),
            'monthly_completeness': self.validate_monthly_completeness(series),
            'variance': self.check_variance(values),
            'outliers': self.detect_outliers(values),
        }

        issues = []
        if reports['value_ranges']['status'] == 'fail':
            issues.append('Data contains negative values')
        if reports['monthly_completeness']['missing_months']:
            issues.append(
                f"Data has {len(reports['monthly_completeness']['missing_months'])} "
                f"missing months between {series.period_keys[0]} and {series.last_period_key}"
            )
        if len(values) and reports['variance']['status'] == 'warning':
            issues.append('Data has very low variance, predictions may be less accurate')
        if reports['outliers']['outlier_count']:
            issues.append(
                f"Detected {reports['outliers']['outlier_count']} potential outliers in the data"
            )

        status = 'pass'
        if any(r['status'] == 'warning' for r in reports.values()):
            status = 'warning'
        if any(r['status'] == 'fail' for r in reports.values()):
            status = 'fail'

        return {'status': status, 'checks': reports, 'issues': issues}
