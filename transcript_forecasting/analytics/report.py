"""Combined trend analytics for a set of records"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from transcript_forecasting.analytics.growth import GrowthAnalyzer
from transcript_forecasting.analytics.seasonality import SeasonalityDetector
from transcript_forecasting.analytics.statistics import summarize
from transcript_forecasting.data.aggregators import Records, TimeSeriesAggregator, records_to_frame
from transcript_forecasting.types import (
    GrowthMetrics,
    PeriodTotal,
    SeasonalDecomposition,
    StatisticalSummary,
    TrendPoint,
)
from transcript_forecasting.utils.config import ConfigLoader


@dataclass(frozen=True)
class TrendAnalytics:
    """
    Descriptive analytics for one set of records

    decomposition is only present once the history spans two full
    seasonal cycles.
    """

    trends: Tuple[TrendPoint, ...]
    statistics: StatisticalSummary
    growth_metrics: GrowthMetrics
    moving_average: Tuple[PeriodTotal, ...]
    seasonal_patterns: Dict[str, float]
    entity_breakdown: Dict[str, float]
    period_breakdown: Dict[str, float]
    decomposition: Optional[SeasonalDecomposition] = None

    def to_dict(self) -> dict:
        return {
            'trends': [t.to_dict() for t in self.trends],
            'statistics': self.statistics.to_dict(),
            'growth_metrics': self.growth_metrics.to_dict(),
            'moving_average': [
                {'period_key': p.period_key, 'total': p.total} for p in self.moving_average
            ],
            'seasonal_patterns': dict(self.seasonal_patterns),
            'entity_breakdown': dict(self.entity_breakdown),
            'period_breakdown': dict(self.period_breakdown),
            'decomposition': self.decomposition.to_dict() if self.decomposition else None,
        }


def calculate_trend_analytics(
    records: Records,
    config: Optional[ConfigLoader] = None
) -> TrendAnalytics:
    """
    Run every descriptive analysis over one set of records

    Statistics are taken over the raw record values; trends, growth and
    moving averages over the per-period totals. The seasonal decomposition
    runs on the gap-filled totals when they cover at least two seasons.

    Args:
        records: Raw count records
        config: Configuration (moving average window, seasonal period)

    Returns:
        TrendAnalytics
    """
    config = config if config else ConfigLoader.from_dict()
    window = config.get('analytics.moving_average_window', 3)

    df = records_to_frame(records)
    aggregator = TimeSeriesAggregator()
    growth = GrowthAnalyzer()
    seasonality = SeasonalityDetector(period=config.get('analytics.seasonal_period', 12))
    series = aggregator.aggregate_by_period(df)

    decomposition = None
    continuous = aggregator.fill_missing_periods(series)
    if len(continuous) >= 2 * seasonality.period:
        decomposition = seasonality.decompose(continuous)

    return TrendAnalytics(
        trends=tuple(growth.trend(series)),
        statistics=summarize(df['value']),
        growth_metrics=growth.growth_metrics(series),
        moving_average=tuple(growth.moving_average(series, window=window)),
        seasonal_patterns=seasonality.by_calendar_period(df),
        entity_breakdown=aggregator.aggregate_by_entity(df),
        period_breakdown={p.period_key: p.total for p in series},
        decomposition=decomposition
    )
