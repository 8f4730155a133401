"""
Tests for the transcript-forecast command line interface.
"""
import json

import pandas as pd
import pytest
from click.testing import CliRunner

from transcript_forecasting import __version__
from transcript_forecasting.cli.main import cli


pytestmark = pytest.mark.usefixtures('reset_package_logging')


@pytest.fixture
def counts_csv(tmp_path, seasonal_records):
    path = tmp_path / 'counts.csv'
    seasonal_records.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def short_csv(tmp_path, three_month_records):
    path = tmp_path / 'short.csv'
    pd.DataFrame(three_month_records).to_csv(path, index=False)
    return str(path)


def invoke(*args):
    return CliRunner().invoke(cli, ['--log-level', 'ERROR', *args])


class TestForecastCommand:
    """Test forecast output and failures."""

    def test_json_output(self, counts_csv):
        result = invoke('forecast', counts_csv, '--horizon', '3', '--json')

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert [p['period_key'] for p in payload['points']] == ['2024-01', '2024-02', '2024-03']
        assert payload['model_type'] == 'linear'
        assert payload['confidence'] == 0.95

    def test_table_output(self, counts_csv):
        result = invoke('forecast', counts_csv, '-h', '2', '-m', 'polynomial', '-e', 'client-b')

        assert result.exit_code == 0, result.output
        assert '2024-01' in result.output
        assert 'Accuracy' in result.output

    def test_insufficient_history_aborts(self, short_csv):
        result = invoke('forecast', short_csv, '--model', 'arima_like')

        assert result.exit_code == 1
        assert 'Insufficient data' in result.output

    def test_unknown_model_rejected_by_cli(self, counts_csv):
        result = invoke('forecast', counts_csv, '--model', 'prophet')
        assert result.exit_code == 2


class TestOtherCommands:
    """Test summary, compare, train and validate."""

    def test_summary_json(self, counts_csv):
        result = invoke('summary', counts_csv, '--entity', 'client-a', '--json')

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert list(payload['entity_breakdown']) == ['client-a']
        assert len(payload['trends']) == 36

    def test_summary_table(self, short_csv):
        result = invoke('summary', short_csv)

        assert result.exit_code == 0, result.output
        assert 'Monthly Trend' in result.output
        assert '2024-03' in result.output

    def test_compare_json(self, counts_csv):
        result = invoke('compare', counts_csv, '--json')

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload['best_model'] == payload['ranking'][0]
        assert sorted(payload['ranking']) == ['arima_like', 'linear', 'polynomial']

    def test_compare_table(self, counts_csv):
        result = invoke('compare', counts_csv)

        assert result.exit_code == 0, result.output
        assert 'Recommendation' in result.output

    def test_train_json(self, counts_csv):
        result = invoke('train', counts_csv, '--model', 'polynomial', '--holdout', '0.25', '--json')

        assert result.exit_code == 0, result.output
        payload = json.loads(result.stdout)
        assert payload['training_size'] == 27
        assert payload['validation_size'] == 9

    def test_validate_valid_request(self, counts_csv):
        result = invoke('validate', counts_csv, '--horizon', '12')

        assert result.exit_code == 0, result.output
        assert 'Request is valid' in result.output

    def test_validate_invalid_request(self, counts_csv):
        result = invoke('validate', counts_csv, '--horizon', '0', '--json')

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload['is_valid'] is False
        assert payload['quality'] is None

    def test_version(self):
        result = CliRunner().invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert __version__ in result.output
