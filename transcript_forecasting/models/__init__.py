"""Forecasting models"""

from typing import Optional, Union

from .backend import NumericBackend
from .base import BaseForecaster, FittedModel
from .regression import LinearForecaster, PolynomialForecaster
from .arima_like import ArimaLikeForecaster
from transcript_forecasting.types import ModelType
from transcript_forecasting.utils.config import ConfigLoader


MODEL_REGISTRY = {
    ModelType.LINEAR: LinearForecaster,
    ModelType.POLYNOMIAL: PolynomialForecaster,
    ModelType.ARIMA_LIKE: ArimaLikeForecaster,
}


def get_model(
    model_type: Union[ModelType, str],
    backend: Optional[NumericBackend] = None,
    config: Optional[ConfigLoader] = None,
    **params
) -> BaseForecaster:
    """
    Build a forecaster by type

    Variant parameters come from explicit keyword arguments first, then
    from the configuration (forecasting.polynomial.*, forecasting.arima_like.*).

    Args:
        model_type: ModelType or its name
        backend: Shared numeric backend
        config: Configuration to read variant parameters from
        **params: Variant parameters (degree, window, lags)

    Returns:
        Forecaster instance
    """
    model_type = ModelType.parse(model_type)

    if config is not None:
        if model_type == ModelType.POLYNOMIAL:
            params.setdefault('degree', config.get('forecasting.polynomial.degree', 2))
        elif model_type == ModelType.ARIMA_LIKE:
            params.setdefault('window', config.get('forecasting.arima_like.window', 12))
            params.setdefault('lags', config.get('forecasting.arima_like.lags', 3))

    return MODEL_REGISTRY[model_type](backend=backend, **params)


__all__ = [
    'NumericBackend',
    'BaseForecaster',
    'FittedModel',
    'LinearForecaster',
    'PolynomialForecaster',
    'ArimaLikeForecaster',
    'MODEL_REGISTRY',
    'get_model'
]
