"""Forecast accuracy metrics"""

from typing import Sequence

import numpy as np

from transcript_forecasting.types import AccuracyReport


class AccuracyEvaluator:
    """
    Compare actual values against predictions

    Degenerate inputs resolve to documented defaults instead of raising:
    - mismatched or empty inputs give an all-zero report
    - zero actuals are left out of the MAPE average
    - a constant actual series (SStot = 0) gives R² = 0
    """

    def __init__(self, tolerance: float = 0.10):
        """
        Initialize evaluator

        Args:
            tolerance: Relative tolerance for the hit rate (0.10 = within 10%)
        """
        self.tolerance = tolerance

    def evaluate(self, actual: Sequence[float], predicted: Sequence[float]) -> AccuracyReport:
        """
        Calculate MAE, MAPE, RMSE, R² and the hit rate

        Args:
            actual: Observed values
            predicted: Predicted values, same length as actual

        Returns:
            AccuracyReport
        """
        actual = np.asarray(actual, dtype=float)
        predicted = np.asarray(predicted, dtype=float)

        if len(actual) != len(predicted) or len(actual) == 0:
            return AccuracyReport()

        errors = actual - predicted

        # MAE (Mean Absolute Error)
        mae = np.mean(np.abs(errors))

        # MAPE (Mean Absolute Percentage Error), zero actuals excluded
        nonzero = actual != 0
        mape = (
            np.mean(np.abs(errors[nonzero] / actual[nonzero])) * 100
            if nonzero.any() else 0.0
        )

        # RMSE (Root Mean Squared Error)
        rmse = np.sqrt(np.mean(errors ** 2))

        # R² (Coefficient of Determination)
        ss_res = np.sum(errors ** 2)
        ss_tot = np.sum((actual - np.mean(actual)) ** 2)
        r2 = 1 - (ss_res / ss_tot) if ss_tot > 0 else 0.0

        return AccuracyReport(
            mae=float(mae),
            mape=float(mape),
            rmse=float(rmse),
            r2=float(r2),
            hit_rate=self.hit_rate(actual, predicted),
            scored_points=int(nonzero.sum())
        )

    def hit_rate(self, actual: Sequence[float], predicted: Sequence[float]) -> float:
        """
        Share of predictions within tolerance of the actual value

        A zero actual counts as a hit only when the prediction rounds to
        zero transcripts.

        Args:
            actual: Observed values
            predicted: Predicted values

        Returns:
            Fraction in [0, 1]; 0 for mismatched or empty inputs
        """
        actual = np.asarray(actual, dtype=float)
        predicted = np.asarray(predicted, dtype=float)

        if len(actual) != len(predicted) or len(actual) == 0:
            return 0.0

        nonzero = actual != 0
        hits = np.abs(predicted) < 0.5

        relative_error = np.abs((actual[nonzero] - predicted[nonzero]) / actual[nonzero])
        hits[nonzero] = relative_error <= self.tolerance

        return float(np.mean(hits))
