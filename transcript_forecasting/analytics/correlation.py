"""Correlation between count series"""

from typing import Sequence

import numpy as np


def pearson(x: Sequence[float], y: Sequence[float]) -> float:
    """
    Pearson correlation coefficient

    Returns 0 on length mismatch, empty input or a zero-variance
    denominator instead of raising.

    Args:
        x: First series
        y: Second series, same length as x

    Returns:
        Correlation in [-1, 1]
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)

    if len(x) != len(y) or len(x) == 0:
        return 0.0

    dx = x - x.mean()
    dy = y - y.mean()
    denominator = np.sqrt((dx * dx).sum() * (dy * dy).sum())

    if denominator == 0:
        return 0.0

    return float(np.clip((dx * dy).sum() / denominator, -1.0, 1.0))
