"""Base forecaster class for all forecasting models"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
from sklearn.model_selection import TimeSeriesSplit

from transcript_forecasting.evaluation.accuracy import AccuracyEvaluator
from transcript_forecasting.exceptions import InsufficientDataError, ValidationError
from transcript_forecasting.models.backend import NumericBackend
from transcript_forecasting.types import (
    AggregatedSeries,
    ConfidenceInterval,
    CrossValidationResult,
    ForecastPoint,
    ModelType,
)
from transcript_forecasting.utils.logging_config import get_logger
from transcript_forecasting.utils.periods import next_period_keys


logger = get_logger(__name__)

MAX_HORIZON = 365


@dataclass(frozen=True)
class FittedModel:
    """
    Immutable fitted state returned by BaseForecaster.fit

    fitted_values / fitted_actuals are the in-sample predictions and the
    observations they line up with (models with a warm-up window score
    fewer points than they were given).
    """

    model_type: ModelType
    intercept: float
    coefficients: Tuple[float, ...]
    sigma: float
    n_obs: int
    last_period_key: str
    history: Tuple[float, ...]
    fitted_values: Tuple[float, ...]
    fitted_actuals: Tuple[float, ...]


class BaseForecaster(ABC):
    """
    Abstract base class for all forecasting models

    All forecasters must implement:
    - min_history: shortest history fit() accepts
    - _fit(): Estimate parameters from a value array
    - _point_forecast(): Raw (unclipped) forecasts for n periods
    - _interval_scale(): Per-step multiplier on sigma for the intervals

    Forecaster instances hold configuration and the numeric backend only;
    fit() returns a FittedModel and never mutates the forecaster.
    """

    model_type: ModelType = None

    def __init__(self, model_name: str, backend: Optional[NumericBackend] = None):
        """
        Initialize forecaster

        Args:
            model_name: Name of the model (for logging)
            backend: Shared numeric backend
        """
        self.model_name = model_name
        self.backend = backend if backend is not None else NumericBackend()
        self.evaluator = AccuracyEvaluator()

    @property
    @abstractmethod
    def min_history(self) -> int:
        """Minimum number of periods fit() accepts"""

    @abstractmethod
    def _fit(self, values: np.ndarray, last_period_key: str) -> FittedModel:
        pass

    @abstractmethod
    def _point_forecast(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        pass

    @abstractmethod
    def _interval_scale(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        pass

    def fit(self, series: AggregatedSeries) -> FittedModel:
        """
        Fit the model on a historical series

        Args:
            series: Aggregated series sorted ascending

        Returns:
            FittedModel

        Raises:
            InsufficientDataError: If the series is shorter than min_history
        """
        if len(series) < self.min_history:
            raise InsufficientDataError(self.min_history, len(series), model=self.model_type.value)

        logger.debug(f"Fitting {self.model_name} on {len(series)} periods")

        fitted = self._fit(self.backend.array(series.values), series.last_period_key)

        logger.debug(f"✅ {self.model_name} fitted (sigma: {fitted.sigma:,.2f})")

        return fitted

    def forecast_values(self, fitted: FittedModel, n_periods: int) -> np.ndarray:
        """Point forecasts for n periods ahead, floored at 0"""
        return np.maximum(self._point_forecast(fitted, n_periods), 0.0)

    def predict(
        self,
        fitted: FittedModel,
        horizon: int,
        confidence_level: float = 0.95
    ) -> List[ForecastPoint]:
        """
        Generate forecasts for horizon periods ahead

        The interval half-width is z(confidence) * sigma * scale(h), made
        non-decreasing over the horizon; both bounds are clipped at 0.

        Args:
            fitted: State returned by fit()
            horizon: Number of periods to forecast (1-365)
            confidence_level: Interval coverage in (0, 1)

        Returns:
            List of ForecastPoint, one per future period
        """
        if not 1 <= horizon <= MAX_HORIZON:
            raise ValidationError([f"Horizon must be between 1 and {MAX_HORIZON}, got {horizon}"])
        if not 0 < confidence_level < 1:
            raise ValidationError(
                [f"Confidence level must be between 0 and 1 (exclusive), got {confidence_level}"]
            )

        means = self._point_forecast(fitted, horizon)
        half_widths = (
            self.backend.z_score(confidence_level)
            * fitted.sigma
            * self._interval_scale(fitted, horizon)
        )
        half_widths = np.maximum.accumulate(half_widths)

        keys = next_period_keys(fitted.last_period_key, horizon)

        return [
            ForecastPoint(
                period_key=key,
                predicted_value=float(max(mean, 0.0)),
                confidence_interval=ConfidenceInterval(
                    lower=float(max(mean - half, 0.0)),
                    upper=float(max(mean + half, 0.0))
                )
            )
            for key, mean, half in zip(keys, means, half_widths)
        ]

    def cross_validate(
        self,
        series: AggregatedSeries,
        holdout_fraction: float = 0.2,
        cv_folds: int = 3
    ) -> CrossValidationResult:
        """
        Chronological train / validation evaluation

        The first floor(n * (1 - holdout_fraction)) periods train the
        model and the remaining suffix validates it; nothing is shuffled.
        The cross-validation score averages accuracy over rolling-origin
        folds and falls back to the holdout accuracy when no fold has
        enough training data.

        Args:
            series: Aggregated series sorted ascending
            holdout_fraction: Share of periods held out, in (0, 1)
            cv_folds: Number of rolling-origin folds

        Returns:
            CrossValidationResult

        Raises:
            ValidationError: If holdout_fraction is outside (0, 1)
            InsufficientDataError: If the training prefix or the holdout is too short
        """
        if not 0 < holdout_fraction < 1:
            raise ValidationError(
                [f"Holdout fraction must be between 0 and 1 (exclusive), got {holdout_fraction}"]
            )

        n = len(series)
        split = int(np.floor(n * (1 - holdout_fraction)))

        if split < self.min_history:
            raise InsufficientDataError(self.min_history, split, model=self.model_type.value)
        if split >= n:
            raise InsufficientDataError(self.min_history + 1, n, model=self.model_type.value)

        train, validation = series[:split], series[split:]

        logger.info(
            f"Cross-validating {self.model_name}: "
            f"train={len(train)} ({train.period_keys[0]}..{train.last_period_key}), "
            f"validation={len(validation)}"
        )

        fitted = self.fit(train)
        training_metrics = self.evaluator.evaluate(fitted.fitted_actuals, fitted.fitted_values)
        validation_metrics = self.evaluator.evaluate(
            validation.values,
            self.forecast_values(fitted, len(validation))
        )

        fold_scores = self._rolling_origin_scores(series, cv_folds)
        score = float(np.mean(fold_scores)) if fold_scores else validation_metrics.accuracy

        logger.info(f"  MAPE: {validation_metrics.mape:.2f}%  CV score: {score:.3f}")

        return CrossValidationResult(
            training_metrics=training_metrics,
            validation_metrics=validation_metrics,
            cross_validation_score=score,
            training_size=len(train),
            validation_size=len(validation)
        )

    def _rolling_origin_scores(self, series: AggregatedSeries, cv_folds: int) -> List[float]:
        """Accuracy per expanding-window fold whose training part meets min_history"""
        n_splits = min(cv_folds, len(series) - 1)
        if n_splits < 2:
            return []

        tscv = TimeSeriesSplit(n_splits=n_splits)
        scores = []

        for fold_idx, (train_idx, val_idx) in enumerate(tscv.split(series.values.reshape(-1, 1))):
            if len(train_idx) < self.min_history:
                continue

            fitted = self.fit(series[:len(train_idx)])
            actual = series.values[val_idx]
            predicted = self.forecast_values(fitted, len(val_idx))
            fold_accuracy = self.evaluator.evaluate(actual, predicted).accuracy

            logger.debug(
                f"  Fold {fold_idx + 1}/{n_splits}: Train={len(train_idx)}, "
                f"Val={len(val_idx)}, accuracy={fold_accuracy:.3f}"
            )
            scores.append(fold_accuracy)

        return scores

    def get_metadata(self) -> Dict:
        """
        Get model metadata

        Returns:
            Dictionary with model information
        """
        return {
            'model_name': self.model_name,
            'model_type': self.model_type.value,
            'min_history': self.min_history
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model_name='{self.model_name}')"
