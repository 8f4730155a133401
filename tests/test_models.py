"""
Tests for the forecasting models and accuracy metrics.

These tests verify:
1. Point forecasts on exactly representable trends
2. Non-negative forecasts and ordered interval bounds
3. Interval widths growing with horizon and shrinking with history
4. Minimum history enforcement
5. Chronological cross-validation
"""
import numpy as np
import pytest

from transcript_forecasting.evaluation import AccuracyEvaluator
from transcript_forecasting.exceptions import InsufficientDataError, ValidationError
from transcript_forecasting.models import (
    ArimaLikeForecaster,
    LinearForecaster,
    PolynomialForecaster,
    get_model,
)
from transcript_forecasting.types import AccuracyReport, ModelType
from transcript_forecasting.utils.config import ConfigLoader
from tests.conftest import make_series


def all_models(backend):
    return [
        LinearForecaster(backend=backend),
        PolynomialForecaster(degree=2, backend=backend),
        ArimaLikeForecaster(window=12, lags=3, backend=backend),
    ]


def widths(points):
    return np.array([p.confidence_interval.upper - p.confidence_interval.lower for p in points])


@pytest.fixture
def trending_series():
    """36 months, upward trend with a yearly cycle and fixed noise."""
    rng = np.random.default_rng(7)
    t = np.arange(36)
    values = 300 + 5 * t + 20 * np.sin(2 * np.pi * t / 12) + rng.normal(0, 6, 36)
    return make_series(np.round(values), start='2021-01')


class TestModelType:
    """Test model type parsing."""

    @pytest.mark.parametrize('raw, expected', [
        ('linear', ModelType.LINEAR),
        ('Polynomial', ModelType.POLYNOMIAL),
        ('arima_like', ModelType.ARIMA_LIKE),
        ('arimaLike', ModelType.ARIMA_LIKE),
        ('arima', ModelType.ARIMA_LIKE),
        (ModelType.LINEAR, ModelType.LINEAR),
    ])
    def test_parse(self, raw, expected):
        assert ModelType.parse(raw) is expected

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError):
            ModelType.parse('prophet')


class TestGetModel:
    """Test the model registry."""

    def test_config_supplies_variant_parameters(self):
        config = ConfigLoader.from_dict({
            'forecasting': {'polynomial': {'degree': 3}, 'arima_like': {'window': 8, 'lags': 2}}
        })

        polynomial = get_model('polynomial', config=config)
        arima_like = get_model(ModelType.ARIMA_LIKE, config=config)

        assert polynomial.degree == 3
        assert polynomial.min_history == 4
        assert (arima_like.window, arima_like.lags) == (8, 2)

    def test_explicit_parameters_win(self):
        model = get_model('polynomial', config=ConfigLoader.from_dict(), degree=4)
        assert model.degree == 4

    def test_shared_backend_is_passed_through(self, backend):
        assert get_model('linear', backend=backend).backend is backend

    def test_invalid_variant_parameters(self):
        with pytest.raises(ValueError):
            PolynomialForecaster(degree=0)
        with pytest.raises(ValueError):
            ArimaLikeForecaster(window=4, lags=3)


class TestPointForecasts:
    """Test forecasts on exactly representable series."""

    def test_linear_extends_line(self, backend):
        model = LinearForecaster(backend=backend)
        fitted = model.fit(make_series([100, 120, 140], start='2024-01'))

        points = model.predict(fitted, horizon=2, confidence_level=0.95)

        assert [p.period_key for p in points] == ['2024-04', '2024-05']
        assert [p.predicted_value for p in points] == pytest.approx([160.0, 180.0])

    def test_polynomial_extends_quadratic(self, backend):
        values = [t ** 2 + 10 for t in range(10)]
        model = PolynomialForecaster(degree=2, backend=backend)

        predicted = model.forecast_values(model.fit(make_series(values)), 2)

        assert predicted == pytest.approx([110.0, 131.0], rel=1e-6)

    def test_arima_like_extends_constant_growth(self, backend):
        values = [100 + 10 * t for t in range(24)]
        model = ArimaLikeForecaster(backend=backend)

        predicted = model.forecast_values(model.fit(make_series(values)), 3)

        assert predicted == pytest.approx([340.0, 350.0, 360.0], rel=1e-6)

    def test_fit_does_not_mutate_model(self, backend):
        model = LinearForecaster(backend=backend)
        first = model.fit(make_series([10, 20, 30]))
        before = model.forecast_values(first, 3)

        model.fit(make_series([500, 400, 300, 200]))

        assert model.forecast_values(first, 3) == pytest.approx(before)


class TestForecastBounds:
    """Test non-negativity and interval ordering."""

    def test_declining_series_is_floored_at_zero(self, backend):
        model = LinearForecaster(backend=backend)
        fitted = model.fit(make_series([100, 80, 60, 40, 20]))

        points = model.predict(fitted, horizon=6)

        for point in points:
            assert point.predicted_value >= 0
            assert 0 <= point.confidence_interval.lower <= point.confidence_interval.upper

    def test_every_model_orders_bounds(self, backend, trending_series):
        for model in all_models(backend):
            points = model.predict(model.fit(trending_series), horizon=24, confidence_level=0.9)

            for point in points:
                assert point.predicted_value >= 0
                assert point.confidence_interval.lower <= point.predicted_value
                assert point.predicted_value <= point.confidence_interval.upper

    def test_widths_non_decreasing_with_horizon(self, backend, trending_series):
        for model in all_models(backend):
            w = widths(model.predict(model.fit(trending_series), horizon=12))

            assert np.all(np.diff(w) >= -1e-9), model.model_name

    def test_higher_confidence_gives_wider_intervals(self, backend, trending_series):
        model = LinearForecaster(backend=backend)
        fitted = model.fit(trending_series)

        narrow = widths(model.predict(fitted, horizon=3, confidence_level=0.8))
        wide = widths(model.predict(fitted, horizon=3, confidence_level=0.99))

        assert np.all(wide > narrow)

    @pytest.mark.parametrize('model_type', list(ModelType))
    def test_more_history_gives_narrower_intervals(self, backend, model_type):
        """Same noise level, four times the history."""
        def alternating(n):
            return [100 + 5 * t + 3 * (-1) ** t for t in range(n)]

        model = get_model(model_type, backend=backend)
        short = widths(model.predict(model.fit(make_series(alternating(14))), horizon=1))
        long = widths(model.predict(model.fit(make_series(alternating(56))), horizon=1))

        assert long[0] < short[0]


class TestValidation:
    """Test input checks on fit, predict and cross_validate."""

    @pytest.mark.parametrize('model, n_values, required', [
        (LinearForecaster(), 1, 2),
        (PolynomialForecaster(degree=2), 2, 3),
        (ArimaLikeForecaster(window=12, lags=3), 11, 12),
    ])
    def test_insufficient_history(self, model, n_values, required):
        with pytest.raises(InsufficientDataError) as exc_info:
            model.fit(make_series(list(range(1, n_values + 1))))

        assert exc_info.value.required == required
        assert f"at least {required}" in str(exc_info.value)

    @pytest.mark.parametrize('horizon, confidence', [(0, 0.95), (366, 0.95), (3, 1.0), (3, 0.0)])
    def test_predict_rejects_bad_arguments(self, backend, horizon, confidence):
        model = LinearForecaster(backend=backend)
        fitted = model.fit(make_series([1, 2, 3]))

        with pytest.raises(ValidationError):
            model.predict(fitted, horizon=horizon, confidence_level=confidence)

    def test_cross_validate_rejects_bad_fraction(self, backend):
        with pytest.raises(ValidationError):
            LinearForecaster(backend=backend).cross_validate(make_series(range(1, 11)), 1.0)


class TestCrossValidation:
    """Test chronological train / validation splits."""

    def test_split_sizes(self, backend, trending_series):
        result = LinearForecaster(backend=backend).cross_validate(trending_series, 0.2)

        assert result.training_size == 28
        assert result.validation_size == 8

    def test_validation_uses_chronological_prefix(self, backend, trending_series):
        """Validation metrics equal a fit on the first 80% scored on the rest."""
        model = PolynomialForecaster(degree=2, backend=backend)

        result = model.cross_validate(trending_series, 0.2)

        fitted = model.fit(trending_series[:28])
        expected = AccuracyEvaluator().evaluate(
            trending_series.values[28:], model.forecast_values(fitted, 8)
        )
        assert result.validation_metrics == expected

    def test_score_is_an_accuracy(self, backend, trending_series):
        for model in all_models(backend):
            score = model.cross_validate(trending_series, 0.2).cross_validation_score
            assert 0.0 <= score <= 1.0

    def test_too_short_training_prefix(self, backend):
        with pytest.raises(InsufficientDataError):
            ArimaLikeForecaster(backend=backend).cross_validate(make_series(range(1, 15)), 0.2)

    def test_collapse_to_zero_scores_low(self, backend):
        """A validation window of zeros is not scored as a perfect forecast."""
        series = make_series(list(range(100, 260, 20)) + [0, 0])

        result = LinearForecaster(backend=backend).cross_validate(series, 0.2)

        assert result.validation_size == 2
        assert result.validation_metrics.accuracy == 0.0
        # Two clean folds, then the collapse fold scoring zero
        assert result.cross_validation_score == pytest.approx(2 / 3)


class TestAccuracyEvaluator:
    """Test MAE, MAPE, RMSE and R²."""

    @pytest.fixture
    def evaluator(self):
        return AccuracyEvaluator()

    def test_perfect_prediction(self, evaluator):
        actual = [10, 20, 15, 30]
        assert evaluator.evaluate(actual, actual) == AccuracyReport(
            mae=0, mape=0, rmse=0, r2=1, hit_rate=1, scored_points=4
        )

    def test_known_errors(self, evaluator):
        report = evaluator.evaluate([100, 200], [110, 180])

        assert report.mae == pytest.approx(15.0)
        assert report.mape == pytest.approx(10.0)
        assert report.rmse == pytest.approx(np.sqrt(250.0))
        assert report.accuracy == pytest.approx(0.9)

    def test_zero_actuals_excluded_from_mape(self, evaluator):
        report = evaluator.evaluate([0, 100], [10, 110])

        assert report.mape == pytest.approx(10.0)
        assert report.mae == pytest.approx(10.0)

    def test_constant_actuals_give_zero_r2(self, evaluator):
        assert evaluator.evaluate([5, 5, 5], [4, 5, 6]).r2 == 0.0

    def test_mismatched_lengths_give_zero_report(self, evaluator):
        assert evaluator.evaluate([1, 2, 3], [1, 2]) == AccuracyReport()
        assert evaluator.evaluate([], []) == AccuracyReport()

    def test_accuracy_is_clipped(self):
        assert AccuracyReport(mape=150, scored_points=2).accuracy == 0.0

    def test_hit_rate(self, evaluator):
        assert evaluator.hit_rate([100, 100, 100, 0], [105, 120, 91, 5]) == pytest.approx(0.5)

    def test_zero_actual_hit_only_by_zero_prediction(self, evaluator):
        assert evaluator.hit_rate([0, 0, 50], [0.3, 2, 50]) == pytest.approx(2 / 3)

    def test_all_zero_actuals_are_not_a_perfect_score(self, evaluator):
        report = evaluator.evaluate([0, 0], [260, 280])

        assert report.mape == 0.0
        assert report.scored_points == 0
        assert report.accuracy == 0.0

    def test_all_zero_actuals_matched_by_zero_predictions(self, evaluator):
        assert evaluator.evaluate([0, 0], [0, 0.2]).accuracy == 1.0

    def test_hit_rate_is_reported(self, evaluator):
        report = evaluator.evaluate([100, 200], [105, 260])

        assert report.to_dict()['hit_rate'] == pytest.approx(0.5)
