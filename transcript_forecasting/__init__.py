"""
Transcript Forecasting Engine

Stateless trend analytics and forecasting for per-client transcript counts.
Turns dated count records into statistics, growth indicators and
multi-model forecasts with confidence intervals.
"""

__version__ = "1.0.0"
__author__ = "Transcript Analytics Team"
