"""Least-squares trend forecasters over the period index"""

from typing import Optional

import numpy as np

from transcript_forecasting.models.backend import NumericBackend
from transcript_forecasting.models.base import BaseForecaster, FittedModel
from transcript_forecasting.types import ModelType


def _fit_trend(backend: NumericBackend, model_type: ModelType, values: np.ndarray,
               last_period_key: str, degree: int) -> FittedModel:
    """
    Fit y = intercept + sum(beta_d * t^d) over the scaled period index

    sigma is the residual standard error with n - (degree + 1) degrees of
    freedom; without residual degrees of freedom it falls back to the
    population standard deviation of the history.
    """
    n = len(values)
    X = backend.trend_features(np.arange(n), n, degree)
    intercept, coefficients = backend.fit_least_squares(X, values)

    fitted_values = intercept + X @ coefficients
    dof = n - (degree + 1)

    if dof > 0:
        sigma = float(np.sqrt(np.sum((values - fitted_values) ** 2) / dof))
    else:
        sigma = float(np.std(values))

    return FittedModel(
        model_type=model_type,
        intercept=intercept,
        coefficients=tuple(float(c) for c in coefficients),
        sigma=sigma,
        n_obs=n,
        last_period_key=last_period_key,
        history=tuple(float(v) for v in values),
        fitted_values=tuple(float(v) for v in fitted_values),
        fitted_actuals=tuple(float(v) for v in values)
    )


def _trend_forecast(backend: NumericBackend, fitted: FittedModel, n_periods: int) -> np.ndarray:
    degree = len(fitted.coefficients)
    future = np.arange(fitted.n_obs, fitted.n_obs + n_periods)
    X_future = backend.trend_features(future, fitted.n_obs, degree)
    return fitted.intercept + X_future @ backend.array(fitted.coefficients)


def _trend_interval_scale(backend: NumericBackend, fitted: FittedModel, n_periods: int) -> np.ndarray:
    """Prediction interval factor sqrt(1 + x0' (X'X)^-1 x0)"""
    degree = len(fitted.coefficients)
    X_train = backend.trend_features(np.arange(fitted.n_obs), fitted.n_obs, degree)
    future = np.arange(fitted.n_obs, fitted.n_obs + n_periods)
    X_future = backend.trend_features(future, fitted.n_obs, degree)
    return np.sqrt(1.0 + backend.leverage(X_train, X_future))


class LinearForecaster(BaseForecaster):
    """
    Linear Trend forecaster

    Ordinary least squares of value against period index, extrapolated.
    """

    model_type = ModelType.LINEAR

    def __init__(self, backend: Optional[NumericBackend] = None):
        """Initialize Linear Trend forecaster"""
        super().__init__(model_name='Linear Trend', backend=backend)

    @property
    def min_history(self) -> int:
        return 2

    def _fit(self, values: np.ndarray, last_period_key: str) -> FittedModel:
        return _fit_trend(self.backend, self.model_type, values, last_period_key, degree=1)

    def _point_forecast(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        return _trend_forecast(self.backend, fitted, n_periods)

    def _interval_scale(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        return _trend_interval_scale(self.backend, fitted, n_periods)


class PolynomialForecaster(BaseForecaster):
    """
    Polynomial Trend forecaster

    Least-squares polynomial of configurable degree over the period index.
    Needs at least degree + 1 periods.
    """

    model_type = ModelType.POLYNOMIAL

    def __init__(self, degree: int = 2, backend: Optional[NumericBackend] = None):
        """
        Initialize Polynomial Trend forecaster

        Args:
            degree: Polynomial degree (>= 1)
            backend: Shared numeric backend
        """
        if degree < 1:
            raise ValueError(f"Polynomial degree must be >= 1, got {degree}")

        super().__init__(model_name=f'Polynomial-{degree}', backend=backend)
        self.degree = degree

    @property
    def min_history(self) -> int:
        return self.degree + 1

    def _fit(self, values: np.ndarray, last_period_key: str) -> FittedModel:
        return _fit_trend(self.backend, self.model_type, values, last_period_key, degree=self.degree)

    def _point_forecast(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        return _trend_forecast(self.backend, fitted, n_periods)

    def _interval_scale(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        return _trend_interval_scale(self.backend, fitted, n_periods)
