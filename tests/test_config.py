"""
Tests for configuration loading and logging setup.
"""
import logging

import pytest

from transcript_forecasting.utils import ConfigLoader, get_logger, setup_logging
from transcript_forecasting.utils.logging_config import ROOT_LOGGER_NAME


class TestConfigLoader:
    """Test YAML loading, defaults and dot-notation access."""

    def test_defaults(self):
        config = ConfigLoader.from_dict()

        assert config.get('forecasting.default_model') == 'linear'
        assert config.get('forecasting.recommended_history.arima_like') == 24
        assert config.get('analytics.moving_average_window') == 3

    def test_missing_key_returns_default(self):
        config = ConfigLoader.from_dict()

        assert config.get('forecasting.invalid_key', default='fallback') == 'fallback'
        assert config.get('forecasting.default_model.deeper') is None

    def test_overrides_merge_deeply(self):
        config = ConfigLoader.from_dict({'forecasting': {'polynomial': {'degree': 3}}})

        assert config.get('forecasting.polynomial.degree') == 3
        assert config.get('forecasting.arima_like.window') == 12

    def test_loads_yaml_file(self, tmp_path):
        path = tmp_path / 'custom.yaml'
        path.write_text("forecasting:\n  holdout_fraction: 0.3\n  cv_folds: 5\n")

        config = ConfigLoader(str(path))

        assert config.get('forecasting.holdout_fraction') == 0.3
        assert config.get('forecasting.cv_folds') == 5
        assert config.get('forecasting.confidence_level') == 0.95

    def test_reload_picks_up_changes(self, tmp_path):
        path = tmp_path / 'custom.yaml'
        path.write_text("forecasting:\n  default_horizon: 3\n")
        config = ConfigLoader(str(path))

        path.write_text("forecasting:\n  default_horizon: 9\n")
        config.reload()

        assert config.get('forecasting.default_horizon') == 9

    def test_explicit_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path / 'missing.yaml'))

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")

        assert ConfigLoader(str(path)).get('forecasting.default_horizon') == 6


class TestLogging:
    """Test logger setup."""

    def test_module_loggers_live_under_package_logger(self):
        package_logger = get_logger()

        assert package_logger.name == ROOT_LOGGER_NAME
        assert get_logger('transcript_forecasting.pipeline').parent is package_logger

    def test_setup_logging_writes_file(self, tmp_path, reset_package_logging):
        log_file = tmp_path / 'logs' / 'engine.log'

        logger = setup_logging('WARNING', log_file=str(log_file), log_to_console=False)
        get_logger('transcript_forecasting.tests').warning('disk check')
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.WARNING
        assert 'disk check' in log_file.read_text()
