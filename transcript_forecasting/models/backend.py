"""Numeric backend shared by the forecasting models

A NumericBackend is created once (by the caller at start-up) and handed
to every forecaster by reference. It holds no fitted state, so a single
instance can serve any number of concurrent requests.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

import numpy as np
from scipy import stats
from sklearn.linear_model import LinearRegression
from sklearn.preprocessing import PolynomialFeatures
from statsmodels.tsa.arima_process import arma2ma


@dataclass(frozen=True)
class NumericBackend:
    """
    Least squares, interval multipliers and ARMA impulse weights

    Args:
        dtype: Floating point type used for every array
    """

    dtype: str = 'float64'

    def array(self, values: Sequence[float]) -> np.ndarray:
        return np.asarray(values, dtype=self.dtype)

    def z_score(self, confidence_level: float) -> float:
        """Two-sided normal multiplier for a confidence level, e.g. 0.95 -> 1.96"""
        return float(stats.norm.ppf(0.5 + confidence_level / 2))

    def fit_least_squares(self, X: np.ndarray, y: np.ndarray) -> Tuple[float, np.ndarray]:
        """
        Ordinary least squares with intercept

        Returns:
            Tuple of (intercept, coefficients)
        """
        model = LinearRegression()
        model.fit(X, y)
        return float(model.intercept_), np.asarray(model.coef_, dtype=self.dtype)

    def trend_features(self, positions: Sequence[float], n_obs: int, degree: int) -> np.ndarray:
        """
        Polynomial features of the period index

        The index is centred and scaled on the training range so higher
        degrees stay well conditioned; positions beyond n_obs - 1 are
        future periods.
        """
        center = (n_obs - 1) / 2
        scale = max(center, 1.0)
        x = ((self.array(positions) - center) / scale).reshape(-1, 1)
        return PolynomialFeatures(degree=degree, include_bias=False).fit_transform(x)

    def leverage(self, X_train: np.ndarray, X_new: np.ndarray) -> np.ndarray:
        """
        x0' (X'X)^-1 x0 for each row of X_new, intercept column included

        Grows as x0 moves away from the training data and shrinks as the
        training set gets larger.
        """
        design = np.column_stack([np.ones(len(X_train)), X_train])
        new = np.column_stack([np.ones(len(X_new)), X_new])
        xtx_inv = np.linalg.pinv(design.T @ design)
        return np.einsum('ij,jk,ik->i', new, xtx_inv, new)

    def integrated_ma_weights(self, ar_coefficients: Sequence[float], n_weights: int) -> np.ndarray:
        """
        MA(inf) psi-weights of an ARIMA(p, 1, 0) process

        Args:
            ar_coefficients: AR coefficients phi_1..phi_p on first differences
            n_weights: Number of weights (forecast horizon)

        Returns:
            Array psi_0..psi_{n-1}, psi_0 = 1
        """
        ar_poly = np.r_[1.0, -self.array(ar_coefficients)]
        integrated = np.convolve(ar_poly, [1.0, -1.0])
        return arma2ma(integrated, np.array([1.0]), lags=n_weights)
