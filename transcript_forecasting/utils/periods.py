"""Helpers for "YYYY-MM" period keys"""

import calendar
import re
from typing import List, Tuple

import pandas as pd


PERIOD_KEY_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


def is_valid_period_key(key) -> bool:
    """Return True for well-formed "YYYY-MM" strings"""
    return isinstance(key, str) and bool(PERIOD_KEY_PATTERN.match(key))


def split_period_key(key: str) -> Tuple[int, int]:
    """
    Decompose a period key into (year, month)

    Args:
        key: Period key, e.g. '2024-03'

    Returns:
        Tuple of (year, month index 1-12)
    """
    if not is_valid_period_key(key):
        raise ValueError(f"Invalid period key '{key}', expected YYYY-MM")

    year, month = key.split('-')
    return int(year), int(month)


def to_period(key: str) -> pd.Period:
    """Convert a period key to a monthly pandas Period"""
    year, month = split_period_key(key)
    return pd.Period(year=year, month=month, freq='M')


def next_period_keys(last_key: str, n_periods: int) -> List[str]:
    """
    Generate the n period keys following last_key

    Args:
        last_key: Last observed period key
        n_periods: Number of future periods

    Returns:
        List of period keys, e.g. next_period_keys('2024-11', 3)
        -> ['2024-12', '2025-01', '2025-02']
    """
    start = to_period(last_key) + 1
    return [str(p) for p in pd.period_range(start=start, periods=n_periods, freq='M')]


def months_between(start_key: str, end_key: str) -> int:
    """Number of months from start_key to end_key (negative if reversed)"""
    start_year, start_month = split_period_key(start_key)
    end_year, end_month = split_period_key(end_key)
    return (end_year - start_year) * 12 + (end_month - start_month)


def calendar_label(month: int) -> str:
    """Month name for a 1-based month index"""
    return calendar.month_name[month]
