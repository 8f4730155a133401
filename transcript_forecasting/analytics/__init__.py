"""Descriptive analytics: statistics, growth, seasonality, correlation"""

from .statistics import summarize
from .growth import GrowthAnalyzer
from .seasonality import SeasonalityDetector
from .correlation import pearson
from .report import TrendAnalytics, calculate_trend_analytics

__all__ = [
    'summarize',
    'GrowthAnalyzer',
    'SeasonalityDetector',
    'pearson',
    'TrendAnalytics',
    'calculate_trend_analytics'
]
