"""Record aggregation and data quality checks"""

from .aggregators import TimeSeriesAggregator, records_to_frame
from .validators import DataQualityValidator

__all__ = [
    'TimeSeriesAggregator',
    'DataQualityValidator',
    'records_to_frame'
]
