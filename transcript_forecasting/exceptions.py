"""Error types raised by the forecasting engine"""

from typing import Iterable, List, Optional


class ForecastingError(ValueError):
    """Base class for all engine errors"""


class ValidationError(ForecastingError):
    """
    Malformed request or records

    Carries every validation error found, not only the first one.
    """

    def __init__(self, errors: Iterable[str]):
        self.errors: List[str] = list(errors)
        super().__init__(f"Validation failed: {'; '.join(self.errors)}")


class InsufficientDataError(ForecastingError):
    """History is shorter than a model (or analysis) requires"""

    def __init__(self, required: int, actual: int, model: Optional[str] = None):
        self.required = required
        self.actual = actual
        self.model = model

        subject = f"{model} model" if model else "this analysis"
        super().__init__(
            f"Insufficient data for {subject}: "
            f"need at least {required} periods, got {actual}"
        )
