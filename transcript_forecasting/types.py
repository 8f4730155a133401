"""Value objects exchanged between the engine and its callers

Everything here is immutable and serializes to plain numbers, strings
and ISO dates through to_dict().
"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from transcript_forecasting.utils.periods import split_period_key


class ModelType(str, Enum):
    """Forecast model variants, in tie-break order"""

    LINEAR = 'linear'
    POLYNOMIAL = 'polynomial'
    ARIMA_LIKE = 'arima_like'

    @classmethod
    def parse(cls, value: Union[str, 'ModelType']) -> 'ModelType':
        """
        Parse a model type from user input

        Accepts 'linear', 'polynomial', 'arima_like', 'arimaLike' and 'arima'.
        Raises ValueError for anything else.
        """
        if isinstance(value, cls):
            return value

        normalized = str(value).strip().lower().replace('-', '_')
        aliases = {'arimalike': 'arima_like', 'arima': 'arima_like'}
        return cls(aliases.get(normalized, normalized))

    @property
    def order(self) -> int:
        return list(ModelType).index(self)


@dataclass(frozen=True)
class TimeSeriesPoint:
    """One raw record: a count for one entity in one month"""

    period_key: str
    entity_id: str
    value: int

    @property
    def year(self) -> int:
        return split_period_key(self.period_key)[0]

    @property
    def month(self) -> int:
        return split_period_key(self.period_key)[1]


@dataclass(frozen=True)
class PeriodTotal:
    period_key: str
    total: float


@dataclass(frozen=True)
class AggregatedSeries:
    """
    Per-period totals sorted ascending by period key

    Indexing with a slice returns another AggregatedSeries, which keeps
    chronological splits readable: series[:split], series[split:].
    """

    points: Tuple[PeriodTotal, ...] = ()

    def __post_init__(self):
        keys = [p.period_key for p in self.points]
        if any(a >= b for a, b in zip(keys, keys[1:])):
            raise ValueError("Period keys must be unique and sorted ascending")

    @classmethod
    def from_pairs(cls, pairs) -> 'AggregatedSeries':
        """Build a series from (period_key, total) pairs"""
        return cls(tuple(PeriodTotal(k, float(v)) for k, v in pairs))

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self):
        return iter(self.points)

    def __getitem__(self, item):
        if isinstance(item, slice):
            return AggregatedSeries(self.points[item])
        return self.points[item]

    @property
    def period_keys(self) -> List[str]:
        return [p.period_key for p in self.points]

    @property
    def values(self) -> np.ndarray:
        return np.array([p.total for p in self.points], dtype=float)

    @property
    def last_period_key(self) -> Optional[str]:
        return self.points[-1].period_key if self.points else None

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            {'period_key': self.period_keys, 'total': self.values}
        )

    def to_dict(self) -> List[dict]:
        return [asdict(p) for p in self.points]


@dataclass(frozen=True)
class StatisticalSummary:
    mean: float = 0.0
    median: float = 0.0
    mode: float = 0.0
    variance: float = 0.0
    standard_deviation: float = 0.0
    min: float = 0.0
    max: float = 0.0
    total: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class TrendPoint:
    period_key: str
    count: float
    change: float = 0.0
    change_percent: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class GrowthMetrics:
    """Growth rates in percent; 0 when history is too short for a metric"""

    monthly_growth_rate: float = 0.0
    quarterly_growth_rate: float = 0.0
    year_over_year_growth: float = 0.0
    cagr: float = 0.0

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ForecastRequest:
    """
    What to forecast

    Construction never fails; PredictionOrchestrator.validate_request
    reports out-of-range values.
    """

    horizon: int
    model_type: Union[ModelType, str] = ModelType.LINEAR
    confidence_level: float = 0.95
    entity_id: Optional[str] = None


@dataclass(frozen=True)
class ConfidenceInterval:
    lower: float
    upper: float


@dataclass(frozen=True)
class ForecastPoint:
    period_key: str
    predicted_value: float
    confidence_interval: ConfidenceInterval

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class ForecastResult:
    """
    Output of one prediction request

    in_sample_accuracy is set when the history was too short for a
    held-out window and accuracy comes from the training fit instead.
    """

    entity_id: Optional[str]
    points: Tuple[ForecastPoint, ...]
    model_type: ModelType
    accuracy: float
    confidence: float
    generated_at: datetime
    in_sample_accuracy: bool = False
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            'entity_id': self.entity_id,
            'points': [p.to_dict() for p in self.points],
            'model_type': self.model_type.value,
            'accuracy': self.accuracy,
            'confidence': self.confidence,
            'generated_at': self.generated_at.isoformat(),
            'in_sample_accuracy': self.in_sample_accuracy,
            'warnings': list(self.warnings),
        }


@dataclass(frozen=True)
class AccuracyReport:
    """
    Error metrics for one set of predictions

    scored_points counts the non-zero actuals behind mape; hit_rate is the
    share of predictions within 10% of the actual (a zero actual is hit
    only by a prediction that rounds to zero).
    """

    mae: float = 0.0
    mape: float = 0.0
    rmse: float = 0.0
    r2: float = 0.0
    hit_rate: float = 0.0
    scored_points: int = 0

    @property
    def accuracy(self) -> float:
        """
        MAPE mapped onto [0, 1], 1 meaning a perfect forecast

        When every actual is zero MAPE has nothing to score, so the hit
        rate is used instead.
        """
        if self.scored_points == 0:
            return float(min(1.0, max(0.0, self.hit_rate)))
        return float(min(1.0, max(0.0, 1.0 - self.mape / 100.0)))

    def to_dict(self) -> dict:
        return {**asdict(self), 'accuracy': self.accuracy}


@dataclass(frozen=True)
class CrossValidationResult:
    training_metrics: AccuracyReport
    validation_metrics: AccuracyReport
    cross_validation_score: float
    training_size: int
    validation_size: int

    def to_dict(self) -> dict:
        return {
            'training_metrics': self.training_metrics.to_dict(),
            'validation_metrics': self.validation_metrics.to_dict(),
            'cross_validation_score': self.cross_validation_score,
            'training_size': self.training_size,
            'validation_size': self.validation_size,
        }


@dataclass(frozen=True)
class ComparisonResult:
    per_model: Dict[ModelType, AccuracyReport]
    best_model: ModelType
    recommendation: str
    ranking: Tuple[ModelType, ...] = ()
    scores: Dict[ModelType, float] = field(default_factory=dict)
    failures: Dict[ModelType, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'per_model': {m.value: r.to_dict() for m, r in self.per_model.items()},
            'best_model': self.best_model.value,
            'recommendation': self.recommendation,
            'ranking': [m.value for m in self.ranking],
            'scores': {m.value: s for m, s in self.scores.items()},
            'failures': {m.value: msg for m, msg in self.failures.items()},
        }


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[str, ...] = ()
    warnings: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            'is_valid': self.is_valid,
            'errors': list(self.errors),
            'warnings': list(self.warnings),
        }


@dataclass(frozen=True)
class SeasonalDecomposition:
    period_keys: Tuple[str, ...]
    trend: Tuple[float, ...]
    seasonal: Tuple[float, ...]
    residual: Tuple[float, ...]

    def to_dict(self) -> dict:
        return {k: list(v) for k, v in asdict(self).items()}
