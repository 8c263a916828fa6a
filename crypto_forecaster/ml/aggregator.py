"""
Ensemble aggregation: model scores -> price targets.

Ensemble forecast
-----------------
    strength   = sum(weight[m] * score[m])          # in [-1, 1]
    base       = strength * 0.2
    short      = price * (1 + base)                 # ~1 week
    medium     = price * (1 + 2.5 * base)           # ~1 month
    long       = price * (1 + 4 * base)             # ~3 months
    variance   = population variance of the five scores
    confidence = clamp(90 - 100 * variance, 60, 95)
    trend      = |strength| * 100
    volatility = variance * 100

Low variance means the models agree, which raises confidence.

Rule-based forecast
-------------------
Used when the ensemble cannot produce a forecast. Targets come from the
snapshot's trend label alone:

    Bullish  -> x1.05 / x1.15 / x1.25
    Bearish  -> x0.95 / x0.85 / x0.75
    Neutral  -> flat
"""

from __future__ import annotations

import math
from typing import Mapping

from crypto_forecaster.ml.ensemble import model_weights
from crypto_forecaster.models.forecast import (
    MAX_CONFIDENCE,
    MIN_CONFIDENCE,
    EnsembleForecast,
    ModelScoreSet,
    RuleBasedForecast,
    TrendLabel,
)
from crypto_forecaster.models.market import MarketSentiment, TechnicalIndicatorSet

_CHANGE_SCALE = 0.2
_MEDIUM_MULTIPLIER = 2.5
_LONG_MULTIPLIER = 4.0
_BASE_CONFIDENCE = 90.0

_RULE_MULTIPLIERS: dict[str, tuple[float, float, float]] = {
    "Bullish": (1.05, 1.15, 1.25),
    "Bearish": (0.95, 0.85, 0.75),
    "Neutral": (1.0, 1.0, 1.0),
}


def ensemble_strength(
    scores: ModelScoreSet,
    weights: Mapping[str, float] | None = None,
) -> float:
    """Weighted sum of raw model scores."""
    weights = weights if weights is not None else model_weights()
    values = scores.as_dict()
    return sum(weight * values[name] for name, weight in weights.items())


def variance(values: list[float]) -> float:
    """Population variance."""
    mean = sum(values) / len(values)
    return sum((v - mean) ** 2 for v in values) / len(values)


def aggregate(
    price: float,
    scores: ModelScoreSet,
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
    weights: Mapping[str, float] | None = None,
) -> EnsembleForecast:
    """Blend raw model scores into an ``EnsembleForecast``.

    Args:
        price:      Current price the targets are scaled from.
        scores:     Raw model scores in [-1, 1].
        indicators: Indicator set the models consumed (carried on the result).
        sentiment:  Sentiment the models consumed (carried on the result).
        weights:    Model name -> weight; defaults to the registry weights.

    Raises:
        ValueError: If any score is not finite.
    """
    values = list(scores.as_dict().values())
    if not all(math.isfinite(v) for v in values):
        raise ValueError(f"Model scores must be finite, got {scores.as_dict()}.")

    strength = ensemble_strength(scores, weights)
    base_change = strength * _CHANGE_SCALE
    spread = variance(values)

    confidence = max(MIN_CONFIDENCE, min(MAX_CONFIDENCE, _BASE_CONFIDENCE - spread * 100))
    trend_strength = min(100.0, abs(strength) * 100)

    return EnsembleForecast(
        short_term=_round_price(price * (1 + base_change)),
        medium_term=_round_price(price * (1 + base_change * _MEDIUM_MULTIPLIER)),
        long_term=_round_price(price * (1 + base_change * _LONG_MULTIPLIER)),
        confidence=round(confidence, 1),
        trend_strength=round(trend_strength, 1),
        volatility_forecast=round(spread * 100, 1),
        ensemble_strength=strength,
        model_scores=scores.scaled(),
        indicators=indicators,
        sentiment=sentiment,
    )


def rule_based_forecast(price: float, trend: TrendLabel, reason: str) -> RuleBasedForecast:
    """Trend-driven fallback targets at floor confidence."""
    short_mult, medium_mult, long_mult = _RULE_MULTIPLIERS[trend]
    return RuleBasedForecast(
        short_term=price * short_mult,
        medium_term=price * medium_mult,
        long_term=price * long_mult,
        trend=trend,
        reason=reason,
    )


def _round_price(value: float) -> float:
    # 6 dp, except sub-micro prices which would otherwise round to 0.
    return round(value, 6) or value
