"""Period-over-period trend and growth rates"""

from typing import List

import numpy as np

from transcript_forecasting.types import (
    AggregatedSeries,
    GrowthMetrics,
    PeriodTotal,
    TrendPoint,
)


def _percent_change(current: float, previous: float) -> float:
    """Change from previous to current in percent; 0 when previous is not positive"""
    if previous <= 0:
        return 0.0
    return float((current - previous) / previous * 100)


class GrowthAnalyzer:
    """
    Trend and growth indicators over a monthly AggregatedSeries

    Every rate is expressed in percent and resolves to 0 when the history
    is too short or the base period sums to zero.
    """

    QUARTER = 3
    YEAR = 12

    def trend(self, series: AggregatedSeries) -> List[TrendPoint]:
        """
        Calculate month-over-month changes

        Args:
            series: Aggregated series sorted ascending

        Returns:
            One TrendPoint per period; the first has change 0
        """
        points = []
        previous = None

        for point in series:
            change = 0.0
            change_percent = 0.0

            if previous is not None:
                change = point.total - previous
                change_percent = _percent_change(point.total, previous)

            points.append(TrendPoint(
                period_key=point.period_key,
                count=point.total,
                change=float(change),
                change_percent=change_percent
            ))
            previous = point.total

        return points

    def growth_metrics(self, series: AggregatedSeries) -> GrowthMetrics:
        """
        Calculate growth rates

        - monthly: last period vs the one before (needs 2 periods)
        - quarterly: last 3 periods vs previous 3 (needs 6)
        - year over year: last 12 periods vs previous 12 (needs 24)
        - CAGR: first vs last period over n/12 years (needs 12)

        Args:
            series: Aggregated series sorted ascending

        Returns:
            GrowthMetrics
        """
        values = series.values

        return GrowthMetrics(
            monthly_growth_rate=self._monthly_growth(values),
            quarterly_growth_rate=self._window_growth(values, self.QUARTER),
            year_over_year_growth=self._window_growth(values, self.YEAR),
            cagr=self._cagr(values)
        )

    def moving_average(self, series: AggregatedSeries, window: int = 3) -> List[PeriodTotal]:
        """
        Trailing moving average per period

        Early periods average over however many values are available.
        Averages are rounded half up to whole transcript counts.

        Args:
            series: Aggregated series sorted ascending
            window: Number of periods to average

        Returns:
            List of PeriodTotal holding the averages
        """
        if window < 1:
            raise ValueError(f"Moving average window must be >= 1, got {window}")

        frame = series.to_frame()
        averages = np.floor(frame['total'].rolling(window, min_periods=1).mean() + 0.5)

        return [
            PeriodTotal(key, float(avg))
            for key, avg in zip(frame['period_key'], averages)
        ]

    def _monthly_growth(self, values: np.ndarray) -> float:
        if len(values) < 2:
            return 0.0
        return _percent_change(values[-1], values[-2])

    def _window_growth(self, values: np.ndarray, window: int) -> float:
        if len(values) < 2 * window:
            return 0.0

        current = values[-window:].sum()
        previous = values[-2 * window:-window].sum()
        return _percent_change(current, previous)

    def _cagr(self, values: np.ndarray) -> float:
        if len(values) < self.YEAR:
            return 0.0

        first, last = values[0], values[-1]
        years = len(values) / self.YEAR

        if first <= 0:
            return 0.0

        return float(((last / first) ** (1 / years) - 1) * 100)
