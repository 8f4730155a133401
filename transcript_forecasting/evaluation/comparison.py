"""Model comparison

Cross-validates every model variant on the same series, ranks them and
produces a short recommendation.
"""

from typing import Dict, List, Optional

from transcript_forecasting.exceptions import InsufficientDataError
from transcript_forecasting.models import NumericBackend, get_model
from transcript_forecasting.types import (
    AccuracyReport,
    AggregatedSeries,
    ComparisonResult,
    CrossValidationResult,
    ForecastRequest,
    ModelType,
)
from transcript_forecasting.utils.config import ConfigLoader
from transcript_forecasting.utils.logging_config import get_logger


logger = get_logger(__name__)

MODEL_LABELS = {
    ModelType.LINEAR: 'Linear',
    ModelType.POLYNOMIAL: 'Polynomial',
    ModelType.ARIMA_LIKE: 'ARIMA-like',
}


class ModelComparator:
    """
    Evaluate forecasting models on one series

    Steps:
    1. Cross-validate every model type on identical data
    2. Rank by cross-validation score (ties: linear, polynomial, arima_like)
    3. Build a recommendation naming the best model
    """

    MODELS = list(ModelType)

    def __init__(
        self,
        config: Optional[ConfigLoader] = None,
        backend: Optional[NumericBackend] = None
    ):
        """Initialize model comparison"""
        self.config = config if config else ConfigLoader.from_dict()
        self.backend = backend if backend is not None else NumericBackend()
        self.holdout_fraction = self.config.get('forecasting.holdout_fraction', 0.2)
        self.cv_folds = self.config.get('forecasting.cv_folds', 3)

    def compare(self, series: AggregatedSeries, request: ForecastRequest) -> ComparisonResult:
        """
        Compare all model types on the series

        The request's model type is ignored; its confidence level and
        entity are informational only.

        Args:
            series: Aggregated series sorted ascending
            request: Forecast request being answered

        Returns:
            ComparisonResult

        Raises:
            InsufficientDataError: If no model type can be evaluated
        """
        logger.info(
            f"Comparing {len(self.MODELS)} models on {len(series)} periods "
            f"({request.entity_id or 'all entities'})"
        )

        results: Dict[ModelType, CrossValidationResult] = {}
        failures: Dict[ModelType, str] = {}
        errors: List[InsufficientDataError] = []

        for model_type in self.MODELS:
            model = get_model(model_type, backend=self.backend, config=self.config)
            try:
                results[model_type] = model.cross_validate(
                    series, self.holdout_fraction, cv_folds=self.cv_folds
                )
            except InsufficientDataError as e:
                logger.warning(f"Skipping {model_type.value}: {e}")
                failures[model_type] = str(e)
                errors.append(e)

        if not results:
            raise InsufficientDataError(
                min(e.required for e in errors), len(series), model="any"
            )

        ranking = self._rank(results)
        scores = {m: results[m].cross_validation_score for m in ranking}
        per_model: Dict[ModelType, AccuracyReport] = {
            m: results[m].validation_metrics for m in ranking
        }

        recommendation = self._generate_recommendation(ranking[0], scores, len(series))

        self._log_summary(ranking, scores)

        return ComparisonResult(
            per_model=per_model,
            best_model=ranking[0],
            recommendation=recommendation,
            ranking=tuple(ranking),
            scores=scores,
            failures=failures
        )

    def _rank(self, results: Dict[ModelType, CrossValidationResult]) -> List[ModelType]:
        """Highest score first; equal scores keep ModelType order"""
        return sorted(
            results,
            key=lambda m: (-round(results[m].cross_validation_score, 12), m.order)
        )

    def _generate_recommendation(
        self,
        best_model: ModelType,
        scores: Dict[ModelType, float],
        data_size: int
    ) -> str:
        """Recommendation text based on scores and data size"""
        parts = [
            f"{MODEL_LABELS[best_model]} model is recommended "
            f"(cross-validation score {scores[best_model]:.2f})."
        ]

        if data_size < 20:
            parts.append('Consider collecting more data for better predictions.')

        linear = scores.get(ModelType.LINEAR)
        polynomial = scores.get(ModelType.POLYNOMIAL)
        if linear is not None and polynomial is not None:
            if abs(linear - polynomial) < 0.05:
                parts.append(
                    'Linear and polynomial models perform similarly; '
                    'the linear model is simpler to interpret.'
                )
            elif polynomial > linear + 0.10:
                parts.append(
                    'Polynomial model performs clearly better, suggesting non-linear patterns.'
                )

        arima_like = scores.get(ModelType.ARIMA_LIKE)
        if arima_like is not None and arima_like > 0.8:
            parts.append('ARIMA-like model performs well, indicating strong sequential patterns.')

        return ' '.join(parts)

    def _log_summary(self, ranking: List[ModelType], scores: Dict[ModelType, float]):
        """Log comparison summary"""
        logger.info("=" * 60)
        logger.info("MODEL COMPARISON SUMMARY")
        logger.info("=" * 60)

        for position, model_type in enumerate(ranking, start=1):
            logger.info(f"{position}. {MODEL_LABELS[model_type]}: score {scores[model_type]:.3f}")
