"""Prediction orchestration

This module implements the PredictionOrchestrator, which validates
forecast requests and sequences aggregation, model fitting, prediction
and accuracy scoring into a single ForecastResult.

Every call is independent: the orchestrator keeps configuration and
collaborators only, and records the progress of one request in a
PredictionRun.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from numbers import Integral, Real
from typing import List, Optional, Tuple

import numpy as np

from transcript_forecasting.analytics.report import TrendAnalytics, calculate_trend_analytics
from transcript_forecasting.data import DataQualityValidator, TimeSeriesAggregator
from transcript_forecasting.data.aggregators import Records
from transcript_forecasting.evaluation import AccuracyEvaluator
from transcript_forecasting.evaluation.comparison import ModelComparator
from transcript_forecasting.exceptions import ForecastingError, ValidationError
from transcript_forecasting.models import BaseForecaster, FittedModel, NumericBackend, get_model
from transcript_forecasting.models.base import MAX_HORIZON
from transcript_forecasting.types import (
    AggregatedSeries,
    ComparisonResult,
    CrossValidationResult,
    ForecastRequest,
    ForecastResult,
    ModelType,
    ValidationResult,
)
from transcript_forecasting.utils.config import ConfigLoader
from transcript_forecasting.utils.logging_config import get_logger


logger = get_logger(__name__)


class PredictionState(str, Enum):
    RECEIVED = 'received'
    VALIDATED = 'validated'
    AGGREGATED = 'aggregated'
    FITTED = 'fitted'
    PREDICTED = 'predicted'
    DONE = 'done'
    FAILED = 'failed'


@dataclass
class PredictionRun:
    """Progress of one prediction request through the orchestrator"""

    request: ForecastRequest
    state: PredictionState = PredictionState.RECEIVED
    transitions: List[PredictionState] = field(
        default_factory=lambda: [PredictionState.RECEIVED]
    )
    validation: Optional[ValidationResult] = None
    result: Optional[ForecastResult] = None
    error: Optional[ForecastingError] = None

    def advance(self, state: PredictionState):
        self.state = state
        self.transitions.append(state)

    def fail(self, error: ForecastingError):
        self.error = error
        self.advance(PredictionState.FAILED)

    @property
    def succeeded(self) -> bool:
        return self.state == PredictionState.DONE


class PredictionOrchestrator:
    """
    Main prediction orchestrator

    Coordinates the forecasting workflow for one request:
    1. Request and data validation
    2. Aggregation of raw records (optionally for one entity)
    3. Model fitting
    4. Forecast generation
    5. Accuracy scoring (held-out window, or training fit as a fallback)
    """

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        backend: Optional[NumericBackend] = None
    ):
        """
        Initialize Prediction Orchestrator

        Args:
            config: Configuration (defaults to config/config.yaml or built-ins)
            backend: Numeric backend shared by every model
        """
        self.config = config if config else ConfigLoader()
        self.backend = backend if backend is not None else NumericBackend()

        self.aggregator = TimeSeriesAggregator()
        self.validator = DataQualityValidator(self.config.get('analytics', {}))
        self.evaluator = AccuracyEvaluator()
        self.comparator = ModelComparator(self.config, self.backend)

        self.holdout_fraction = self.config.get('forecasting.holdout_fraction', 0.2)
        self.holdout_min_periods = self.config.get('forecasting.holdout_min_periods', 8)
        self.cv_folds = self.config.get('forecasting.cv_folds', 3)
        self.fill_missing_periods = self.config.get('forecasting.fill_missing_periods', False)
        self.recommended_history = self.config.get('forecasting.recommended_history', {})

    def build_request(
        self,
        horizon: Optional[int] = None,
        model_type: Optional[str] = None,
        confidence_level: Optional[float] = None,
        entity_id: Optional[str] = None
    ) -> ForecastRequest:
        """ForecastRequest with unset fields taken from the configuration"""
        return ForecastRequest(
            horizon=horizon if horizon is not None else self.config.get('forecasting.default_horizon', 6),
            model_type=model_type or self.config.get('forecasting.default_model', 'linear'),
            confidence_level=(
                confidence_level if confidence_level is not None
                else self.config.get('forecasting.confidence_level', 0.95)
            ),
            entity_id=entity_id
        )

    def validate_request(self, records: Records, request: ForecastRequest) -> ValidationResult:
        """
        Validate a prediction request against its data

        Errors: horizon outside [1, 365], confidence outside (0, 1),
        unknown model type, empty series, no records for the entity,
        malformed or negative records.

        Warnings: history shorter than recommended for the model, very
        low variance, outliers, missing months.

        Args:
            records: Raw count records
            request: Forecast request

        Returns:
            ValidationResult
        """
        errors: List[str] = []
        warnings: List[str] = []

        horizon = request.horizon
        if (
            isinstance(horizon, bool) or not isinstance(horizon, Integral)
            or not 1 <= horizon <= MAX_HORIZON
        ):
            errors.append(f"Horizon must be an integer between 1 and {MAX_HORIZON}, got {horizon!r}.")

        confidence = request.confidence_level
        if isinstance(confidence, bool) or not isinstance(confidence, Real) or not 0 < confidence < 1:
            errors.append(
                f"Confidence level must be between 0 and 1 (exclusive), got {confidence!r}."
            )

        model_type = None
        try:
            model_type = ModelType.parse(request.model_type)
        except ValueError:
            errors.append(
                f"Unknown model type {request.model_type!r}; "
                f"expected one of {[m.value for m in ModelType]}."
            )

        try:
            df_all = self.aggregator.filter_entity(records, None)
        except ValidationError as e:
            errors.extend(e.errors)
            df_all = None

        if df_all is not None:
            df = df_all
            if request.entity_id is not None:
                df = df_all[df_all['entity_id'] == str(request.entity_id)]

            if df_all.empty:
                errors.append('Series is empty: at least one record is required to forecast.')
            elif df.empty:
                errors.append(f"No records found for entity '{request.entity_id}'.")
            else:
                if self.validator.validate_value_ranges(df['value'])['status'] == 'fail':
                    errors.append('Data contains negative transcript counts.')

                series = self.aggregator.aggregate_by_period(df)
                warnings.extend(self._quality_warnings(series))

                recommended = (
                    self.recommended_history.get(model_type.value) if model_type else None
                )
                if recommended and len(series) < recommended:
                    warnings.append(
                        f"Only {len(series)} periods of history; at least {recommended} "
                        f"are recommended for the {model_type.value} model."
                    )

        for warning in warnings:
            logger.warning(f"⚠️  {warning}")

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=tuple(errors),
            warnings=tuple(warnings)
        )

    def _quality_warnings(self, series: AggregatedSeries) -> List[str]:
        warnings = []

        if self.validator.check_variance(series.values)['status'] == 'warning':
            warnings.append('Data has very low variance, predictions may be less accurate.')

        outliers = self.validator.detect_outliers(series.values)
        if outliers['outlier_count']:
            warnings.append(f"Detected {outliers['outlier_count']} potential outliers in the data.")

        missing = self.validator.validate_monthly_completeness(series)['missing_months']
        if missing:
            warnings.append(f"Data has gaps: {len(missing)} missing months.")

        return warnings

    def run(self, records: Records, request: ForecastRequest) -> PredictionRun:
        """
        Process one request, recording every state transition

        Domain failures (validation, insufficient data) end in the FAILED
        state with the error attached instead of being raised.

        Args:
            records: Raw count records
            request: Forecast request

        Returns:
            PredictionRun
        """
        run = PredictionRun(request=request)

        try:
            run.validation = self.validate_request(records, request)
            if not run.validation.is_valid:
                raise ValidationError(run.validation.errors)
            run.advance(PredictionState.VALIDATED)

            series = self._aggregate(records, request.entity_id)
            run.advance(PredictionState.AGGREGATED)

            model = get_model(request.model_type, backend=self.backend, config=self.config)
            fitted = model.fit(series)
            run.advance(PredictionState.FITTED)

            points = model.predict(fitted, request.horizon, request.confidence_level)
            run.advance(PredictionState.PREDICTED)

            accuracy, in_sample = self._score_accuracy(model, series, fitted)

            run.result = ForecastResult(
                entity_id=request.entity_id,
                points=tuple(points),
                model_type=model.model_type,
                accuracy=accuracy,
                confidence=float(request.confidence_level),
                generated_at=datetime.now(),
                in_sample_accuracy=in_sample,
                warnings=run.validation.warnings
            )
            run.advance(PredictionState.DONE)

            logger.info(
                f"✅ {model.model_name} forecast: {request.horizon} periods "
                f"from {points[0].period_key} (accuracy: {accuracy:.2f}"
                f"{', in-sample' if in_sample else ''})"
            )

        except ForecastingError as e:
            logger.error(f"Prediction failed in state '{run.state.value}': {e}")
            run.fail(e)

        return run

    def generate_predictions(self, records: Records, request: ForecastRequest) -> ForecastResult:
        """
        Generate predictions with validation

        Args:
            records: Raw count records
            request: Forecast request

        Returns:
            ForecastResult

        Raises:
            ValidationError: If the request or records are invalid
            InsufficientDataError: If the history is too short for the model
        """
        run = self.run(records, request)

        if run.error is not None:
            raise run.error

        return run.result

    def train_model(
        self,
        records: Records,
        request: ForecastRequest,
        holdout_fraction: Optional[float] = None
    ) -> CrossValidationResult:
        """
        Cross-validate the requested model on the records

        Args:
            records: Raw count records
            request: Forecast request (model type and entity are used)
            holdout_fraction: Validation share, defaults to configuration

        Returns:
            CrossValidationResult
        """
        series = self._validated_series(records, request)
        model = get_model(request.model_type, backend=self.backend, config=self.config)

        return model.cross_validate(
            series,
            holdout_fraction if holdout_fraction is not None else self.holdout_fraction,
            cv_folds=self.cv_folds
        )

    def compare_models(self, records: Records, request: ForecastRequest) -> ComparisonResult:
        """
        Compare every model type on the records

        Args:
            records: Raw count records
            request: Forecast request (entity is used)

        Returns:
            ComparisonResult
        """
        series = self._validated_series(records, request)
        return self.comparator.compare(series, request)

    def analyze(self, records: Records, entity_id: Optional[str] = None) -> TrendAnalytics:
        """Descriptive trend analytics for all records or one entity"""
        return calculate_trend_analytics(
            self.aggregator.filter_entity(records, entity_id),
            self.config
        )

    def _validated_series(self, records: Records, request: ForecastRequest) -> AggregatedSeries:
        validation = self.validate_request(records, request)
        if not validation.is_valid:
            raise ValidationError(validation.errors)
        return self._aggregate(records, request.entity_id)

    def _aggregate(self, records: Records, entity_id: Optional[str]) -> AggregatedSeries:
        series = self.aggregator.aggregate_by_period(
            self.aggregator.filter_entity(records, entity_id)
        )

        if self.fill_missing_periods:
            series = self.aggregator.fill_missing_periods(series)

        logger.info(
            f"Aggregated {entity_id or 'all entities'}: {len(series)} periods "
            f"({series.period_keys[0]} to {series.last_period_key})"
        )

        return series

    def _score_accuracy(
        self,
        model: BaseForecaster,
        series: AggregatedSeries,
        fitted: FittedModel
    ) -> Tuple[float, bool]:
        """
        Accuracy in [0, 1] and whether it is an in-sample figure

        With enough history the model is refitted on a chronological
        training prefix and scored on the held-out suffix. Otherwise the
        training-fit R² (clipped to [0, 1]) is reported and flagged.
        """
        n = len(series)
        train_size = int(np.floor(n * (1 - self.holdout_fraction)))

        if n >= self.holdout_min_periods and model.min_history <= train_size < n:
            holdout_fit = model.fit(series[:train_size])
            report = self.evaluator.evaluate(
                series.values[train_size:],
                model.forecast_values(holdout_fit, n - train_size)
            )
            return report.accuracy, False

        report = self.evaluator.evaluate(fitted.fitted_actuals, fitted.fitted_values)
        return float(np.clip(report.r2, 0.0, 1.0)), True
