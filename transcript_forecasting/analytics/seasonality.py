"""Calendar seasonality of transcript counts"""

from typing import Dict

import numpy as np
from statsmodels.tsa.seasonal import seasonal_decompose

from transcript_forecasting.data.aggregators import Records, records_to_frame
from transcript_forecasting.exceptions import InsufficientDataError
from transcript_forecasting.types import AggregatedSeries, SeasonalDecomposition
from transcript_forecasting.utils.logging_config import get_logger
from transcript_forecasting.utils.periods import calendar_label, split_period_key


logger = get_logger(__name__)


class SeasonalityDetector:
    """
    Detect calendar patterns

    by_calendar_period averages every record sharing a calendar month
    across all years (all Januaries together, and so on).
    """

    def __init__(self, period: int = 12):
        self.period = period

    def by_calendar_period(self, records: Records) -> Dict[str, float]:
        """
        Average value per calendar month across years

        Args:
            records: Raw count records

        Returns:
            Mapping month name -> average value, ordered January..December
            and containing only months that occur in the data
        """
        df = records_to_frame(records)

        if df.empty:
            return {}

        df['month'] = df['period_key'].map(lambda key: split_period_key(key)[1])
        averages = df.groupby('month')['value'].mean().sort_index()

        return {calendar_label(int(month)): float(avg) for month, avg in averages.items()}

    def decompose(self, series: AggregatedSeries) -> SeasonalDecomposition:
        """
        Additive trend / seasonal / residual decomposition

        Trend edges are extrapolated so every component covers the full
        series.

        Args:
            series: Gap-free aggregated series

        Returns:
            SeasonalDecomposition

        Raises:
            InsufficientDataError: With fewer than two full seasonal cycles
        """
        required = 2 * self.period
        if len(series) < required:
            raise InsufficientDataError(required, len(series), model='seasonal decomposition')

        result = seasonal_decompose(
            series.values,
            model='additive',
            period=self.period,
            extrapolate_trend=self.period - 1
        )

        logger.debug(f"Decomposed {len(series)} periods with season length {self.period}")

        return SeasonalDecomposition(
            period_keys=tuple(series.period_keys),
            trend=tuple(float(v) for v in np.asarray(result.trend)),
            seasonal=tuple(float(v) for v in np.asarray(result.seasonal)),
            residual=tuple(float(v) for v in np.asarray(result.resid))
        )
