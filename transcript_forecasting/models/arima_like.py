"""ARIMA-like forecaster for monthly count series"""

from typing import Optional

import numpy as np

from transcript_forecasting.models.backend import NumericBackend
from transcript_forecasting.models.base import BaseForecaster, FittedModel
from transcript_forecasting.types import ModelType


# Upper bound on sum(|phi|), keeps the differenced process stationary
MAX_AR_MASS = 0.95


class ArimaLikeForecaster(BaseForecaster):
    """
    ARIMA(p, 1, 0)-style forecaster

    Features:
    - First differencing (d = 1) removes the level
    - AR(p) with intercept fitted by least squares on lagged differences
    - AR coefficients damped when sum(|phi|) would make the differences
      explode over long horizons
    - Intervals from the MA(inf) psi-weights of the integrated process
    """

    model_type = ModelType.ARIMA_LIKE

    def __init__(self, window: int = 12, lags: int = 3, backend: Optional[NumericBackend] = None):
        """
        Initialize ARIMA-like forecaster

        Args:
            window: Minimum look-back in periods
            lags: Autoregressive order on first differences
            backend: Shared numeric backend
        """
        if lags < 1:
            raise ValueError(f"lags must be >= 1, got {lags}")
        if window < lags + 3:
            raise ValueError(f"window must be at least lags + 3 ({lags + 3}), got {window}")

        super().__init__(model_name=f'ARIMA-like({lags},1,0)', backend=backend)
        self.window = window
        self.lags = lags

    @property
    def min_history(self) -> int:
        return self.window

    def _lag_matrix(self, diffs: np.ndarray) -> np.ndarray:
        """Row t holds diffs[t-1] .. diffs[t-lags] for t = lags .. len(diffs) - 1"""
        return np.column_stack([
            diffs[self.lags - k:len(diffs) - k] for k in range(1, self.lags + 1)
        ])

    def _fit(self, values: np.ndarray, last_period_key: str) -> FittedModel:
        diffs = np.diff(values)
        X = self._lag_matrix(diffs)
        y = diffs[self.lags:]

        intercept, phi = self.backend.fit_least_squares(X, y)

        ar_mass = np.sum(np.abs(phi))
        if ar_mass > MAX_AR_MASS:
            phi = phi * (MAX_AR_MASS / ar_mass)
            intercept = float(np.mean(y - X @ phi))

        fitted_diffs = intercept + X @ phi
        dof = len(y) - (self.lags + 1)

        if dof > 0:
            sigma = float(np.sqrt(np.sum((y - fitted_diffs) ** 2) / dof))
        else:
            sigma = float(np.std(diffs))

        # Level predictions for values[lags + 1:] from the previous level
        fitted_levels = values[self.lags:-1] + fitted_diffs

        return FittedModel(
            model_type=self.model_type,
            intercept=intercept,
            coefficients=tuple(float(c) for c in phi),
            sigma=sigma,
            n_obs=len(y),
            last_period_key=last_period_key,
            history=tuple(float(v) for v in values),
            fitted_values=tuple(float(v) for v in fitted_levels),
            fitted_actuals=tuple(float(v) for v in values[self.lags + 1:])
        )

    def _point_forecast(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        history = self.backend.array(fitted.history)
        phi = self.backend.array(fitted.coefficients)
        recent = list(np.diff(history)[-len(phi):])

        level = history[-1]
        forecasts = []

        for _ in range(n_periods):
            # phi[0] weights the most recent difference
            diff = fitted.intercept + float(np.dot(phi, recent[::-1][:len(phi)]))
            recent.append(diff)
            level += diff
            forecasts.append(level)

        return np.array(forecasts, dtype=float)

    def _interval_scale(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        """sqrt(sum psi_j^2, j < h), inflated for parameter uncertainty"""
        psi = self.backend.integrated_ma_weights(fitted.coefficients, n_periods)
        parameter_factor = np.sqrt(1.0 + (len(fitted.coefficients) + 1) / fitted.n_obs)
        return np.sqrt(np.cumsum(psi ** 2)) * parameter_factor
