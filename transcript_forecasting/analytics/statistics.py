"""Descriptive statistics over count sequences"""

from typing import Iterable

import numpy as np
import pandas as pd

from transcript_forecasting.types import StatisticalSummary


def summarize(values: Iterable[float]) -> StatisticalSummary:
    """
    Calculate a statistical summary for a sequence of counts

    Mode ties are broken by the smallest value. Variance is the
    population variance (divides by n).

    Args:
        values: Non-negative numbers

    Returns:
        StatisticalSummary; all fields are 0 for empty input
    """
    values = np.asarray(list(values), dtype=float)

    if len(values) == 0:
        return StatisticalSummary()

    total = float(values.sum())
    v_min = float(values.min())
    v_max = float(values.max())

    # Rounding in sum / n can land a hair outside [min, max]
    mean = min(max(total / len(values), v_min), v_max)

    counts = pd.Series(values).value_counts()
    mode = float(counts[counts == counts.max()].index.min())

    variance = float(np.var(values))

    return StatisticalSummary(
        mean=mean,
        median=float(np.median(values)),
        mode=mode,
        variance=variance,
        standard_deviation=float(np.sqrt(variance)),
        min=v_min,
        max=v_max,
        total=total
    )
