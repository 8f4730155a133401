"""Configuration management for the transcript forecasting engine"""

import copy
import yaml
from pathlib import Path
from typing import Any, Dict, Optional


PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_CONFIG_PATH = "config/config.yaml"

# Built-in defaults; values from YAML are merged on top of these
DEFAULTS: Dict[str, Any] = {
    'forecasting': {
        'default_model': 'linear',
        'default_horizon': 6,
        'confidence_level': 0.95,
        'holdout_fraction': 0.2,
        'holdout_min_periods': 8,
        'cv_folds': 3,
        'fill_missing_periods': False,
        'polynomial': {'degree': 2},
        'arima_like': {'window': 12, 'lags': 3},
        'recommended_history': {
            'linear': 6,
            'polynomial': 8,
            'arima_like': 24,
        },
    },
    'analytics': {
        'moving_average_window': 3,
        'seasonal_period': 12,
        'low_variance_threshold': 0.01,
        'iqr_multiplier': 1.5,
    },
    'logging': {
        'level': 'INFO',
        'file': None,
    },
}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into a copy of base"""
    merged = copy.deepcopy(base)

    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value

    return merged


class ConfigLoader:
    """
    Load and manage engine configuration from YAML files

    Supports nested configuration access using dot notation.
    Example: config.get('forecasting.confidence_level', default=0.95)

    Without an explicit path the project's config/config.yaml is used when
    present, otherwise the built-in defaults alone.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration loader

        Args:
            config_path: Path to YAML configuration file
        """
        self.explicit = config_path is not None
        self.config_path = Path(config_path or DEFAULT_CONFIG_PATH)

        if not self.config_path.exists():
            # Try relative to project root
            self.config_path = PROJECT_ROOT / (config_path or DEFAULT_CONFIG_PATH)

        self.config = self._load_config()

    @classmethod
    def from_dict(cls, overrides: Optional[dict] = None) -> 'ConfigLoader':
        """
        Build a loader from an in-memory dictionary (no file access)

        Args:
            overrides: Values merged on top of the built-in defaults

        Returns:
            ConfigLoader instance
        """
        loader = cls.__new__(cls)
        loader.explicit = False
        loader.config_path = None
        loader.config = _deep_merge(DEFAULTS, overrides or {})
        return loader

    def _load_config(self) -> dict:
        """Load configuration from YAML file"""
        if not self.config_path.exists():
            if self.explicit:
                raise FileNotFoundError(
                    f"Configuration file not found: {self.config_path}"
                )
            return copy.deepcopy(DEFAULTS)

        with open(self.config_path, 'r') as f:
            return _deep_merge(DEFAULTS, yaml.safe_load(f) or {})

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key (supports dot notation)

        Args:
            key: Configuration key (e.g., 'forecasting.polynomial.degree')
            default: Default value if key not found

        Returns:
            Configuration value or default

        Examples:
            >>> config = ConfigLoader.from_dict()
            >>> config.get('forecasting.default_model')
            'linear'
            >>> config.get('forecasting.invalid_key', default='fallback')
            'fallback'
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def reload(self):
        """Reload configuration from file"""
        if self.config_path is not None:
            self.config = self._load_config()

    def __repr__(self) -> str:
        return f"ConfigLoader(config_path='{self.config_path}')"
