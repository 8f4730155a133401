"""
Pytest fixtures for transcript forecasting tests.
"""
import logging

import numpy as np
import pandas as pd
import pytest

from transcript_forecasting.models import NumericBackend
from transcript_forecasting.pipeline import PredictionOrchestrator
from transcript_forecasting.types import AggregatedSeries
from transcript_forecasting.utils.config import ConfigLoader
from transcript_forecasting.utils.logging_config import ROOT_LOGGER_NAME
from transcript_forecasting.utils.periods import next_period_keys


def monthly_keys(start: str, n_periods: int) -> list:
    """n consecutive period keys beginning at start"""
    return [start] + next_period_keys(start, n_periods - 1)


def make_series(values, start: str = '2022-01') -> AggregatedSeries:
    """AggregatedSeries of consecutive months holding the given totals"""
    return AggregatedSeries.from_pairs(zip(monthly_keys(start, len(values)), values))


@pytest.fixture
def three_month_records():
    """The 100 / 120 / 140 series from January to March 2024."""
    return [
        {'period_key': '2024-01', 'entity_id': 'client-1', 'value': 100},
        {'period_key': '2024-02', 'entity_id': 'client-1', 'value': 120},
        {'period_key': '2024-03', 'entity_id': 'client-1', 'value': 140},
    ]


@pytest.fixture
def seasonal_records():
    """
    36 months (2021-01 .. 2023-12) for two clients.

    client-a: upward trend with a yearly cycle; client-b: slow trend.
    Noise comes from a fixed seed so every run sees the same data.
    """
    rng = np.random.default_rng(42)
    rows = []

    for t, key in enumerate(monthly_keys('2021-01', 36)):
        season = 15 * np.sin(2 * np.pi * t / 12)
        rows.append({
            'period_key': key,
            'entity_id': 'client-a',
            'value': int(round(200 + 4 * t + season + rng.normal(0, 5)))
        })
        rows.append({
            'period_key': key,
            'entity_id': 'client-b',
            'value': int(round(80 + t + rng.normal(0, 3)))
        })

    return pd.DataFrame(rows)


@pytest.fixture
def backend():
    return NumericBackend()


@pytest.fixture
def config():
    """Built-in defaults, independent of config/config.yaml."""
    return ConfigLoader.from_dict()


@pytest.fixture
def orchestrator(config, backend):
    return PredictionOrchestrator(config, backend=backend)


@pytest.fixture
def reset_package_logging():
    """Drop handlers installed by setup_logging during a test."""
    yield
    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in package_logger.handlers:
        handler.close()
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)
