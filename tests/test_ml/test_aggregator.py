"""
Tests for crypto_forecaster/ml/aggregator.py.

What we test
------------
aggregate():
  - All-zero scores -> flat targets, confidence 90, zero trend/volatility.
  - All-one scores -> +20% / +50% / +80% targets.
  - Widely disagreeing scores -> confidence clamped at 60.
  - Model scores stored x100, rounded to 1 dp.
  - Non-finite scores -> ValueError.
variance(): population variance.
rule_based_forecast(): multipliers per trend label, confidence 60.
"""

from __future__ import annotations

import math

import pytest

from crypto_forecaster.ml.aggregator import (
    aggregate,
    ensemble_strength,
    rule_based_forecast,
    variance,
)
from crypto_forecaster.models.forecast import ModelScoreSet
from crypto_forecaster.models.market import MarketSentiment, TechnicalIndicatorSet


def _scores(values: tuple[float, float, float, float, float]) -> ModelScoreSet:
    names = ("lstm", "arima", "random_forest", "linear_regression", "sentiment")
    return ModelScoreSet(**dict(zip(names, values)))


@pytest.fixture
def indicators() -> TechnicalIndicatorSet:
    return TechnicalIndicatorSet(
        sma_20=1.0, sma_50=1.0, ema_12=1.0, ema_26=1.0, rsi=50.0,
        macd=0.0, macd_signal=0.0, macd_histogram=0.0,
        bb_upper=1.0, bb_middle=1.0, bb_lower=1.0,
        stochastic_k=50.0, stochastic_d=50.0, williams_r=-50.0,
        momentum=0.0, roc=0.0,
    )


@pytest.fixture
def sentiment() -> MarketSentiment:
    return MarketSentiment(
        social_sentiment=0.0, news_sentiment=0.0, fear_greed_index=50.0,
        volume_sentiment=0.0, whale_activity=0.0,
    )


class TestAggregate:
    def test_neutral_scores(self, indicators, sentiment):
        f = aggregate(100.0, _scores((0, 0, 0, 0, 0)), indicators, sentiment)
        assert f.kind == "ensemble"
        assert (f.short_term, f.medium_term, f.long_term) == (100.0, 100.0, 100.0)
        assert f.confidence == 90.0
        assert f.trend_strength == 0.0
        assert f.volatility_forecast == 0.0

    def test_unanimous_bullish(self, indicators, sentiment):
        f = aggregate(100.0, _scores((1, 1, 1, 1, 1)), indicators, sentiment)
        assert f.short_term == pytest.approx(120.0)
        assert f.medium_term == pytest.approx(150.0)
        assert f.long_term == pytest.approx(180.0)
        assert f.confidence == 90.0
        assert f.trend_strength == pytest.approx(100.0)

    def test_unanimous_bearish_targets_shrink(self, indicators, sentiment):
        f = aggregate(100.0, _scores((-1, -1, -1, -1, -1)), indicators, sentiment)
        assert f.short_term == pytest.approx(80.0)
        assert f.long_term == pytest.approx(20.0)

    def test_disagreement_floors_confidence(self, indicators, sentiment):
        f = aggregate(100.0, _scores((1, -1, 1, -1, 1)), indicators, sentiment)
        assert f.confidence == 60.0
        assert f.volatility_forecast == pytest.approx(96.0)

    def test_confidence_between_floor_and_base(self, indicators, sentiment):
        f = aggregate(100.0, _scores((0.2, -0.2, 0.2, -0.2, 0.0)), indicators, sentiment)
        assert 60.0 < f.confidence < 90.0

    def test_model_scores_scaled(self, indicators, sentiment):
        f = aggregate(1.0, _scores((0.12345, 0, 0, 0, -0.5)), indicators, sentiment)
        assert f.model_scores.lstm == 12.3
        assert f.model_scores.sentiment == -50.0

    def test_non_finite_rejected(self, indicators, sentiment):
        with pytest.raises(ValueError):
            aggregate(1.0, _scores((math.nan, 0, 0, 0, 0)), indicators, sentiment)

    def test_custom_weights(self, indicators, sentiment):
        scores = _scores((1, 0, 0, 0, 0))
        assert ensemble_strength(scores, {"lstm": 1.0}) == 1.0
        f = aggregate(10.0, scores, indicators, sentiment, weights={"lstm": 0.5})
        assert f.short_term == pytest.approx(11.0)


class TestVariance:
    def test_population_variance(self):
        assert variance([1.0, -1.0, 1.0, -1.0, 1.0]) == pytest.approx(0.96)

    def test_constant(self):
        assert variance([0.3] * 5) == pytest.approx(0.0)


class TestRuleBased:
    @pytest.mark.parametrize(
        "trend, expected",
        [
            ("Bullish", (105.0, 115.0, 125.0)),
            ("Bearish", (95.0, 85.0, 75.0)),
            ("Neutral", (100.0, 100.0, 100.0)),
        ],
    )
    def test_multipliers(self, trend, expected):
        f = rule_based_forecast(100.0, trend, "short history")
        assert (f.short_term, f.medium_term, f.long_term) == pytest.approx(expected)
        assert f.confidence == 60.0
        assert f.trend == trend
        assert f.reason == "short history"
