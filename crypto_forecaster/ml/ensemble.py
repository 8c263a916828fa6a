"""
Five scoring models behind one interface.

Interface contract
------------------
Every model is a plain function::

    score(series, indicators, sentiment) -> float in [-1, 1]

Positive means bullish, negative bearish. No model is trained: each is a fixed
formula over the synthetic history, the indicator set, and the sentiment
signals. The names echo the model families the formulas imitate.

  lstm               Sequence model: price/volume slope over the last 30 days
                     blended with RSI, MACD and Bollinger position, then tanh.
  arima              Autoregressive model: AR(1) + MA(5) on daily returns.
  random_forest      Vote model: mean of five fixed rule votes.
  linear_regression  Fixed-coefficient dot product over five indicators, tanh.
  sentiment          Mean of social and news sentiment.

``DEFAULT_MODELS`` is the ordered registry the aggregator weights. Adding or
removing a model means editing the registry only; weights must sum to 1.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Sequence

from crypto_forecaster.errors import InsufficientHistory
from crypto_forecaster.models.forecast import ModelScoreSet
from crypto_forecaster.models.market import (
    HistoricalPoint,
    MarketSentiment,
    TechnicalIndicatorSet,
)

Scorer = Callable[
    [Sequence[HistoricalPoint], TechnicalIndicatorSet, MarketSentiment], float
]

_SEQUENCE_WINDOW = 30
_AR_WINDOW = 21
_MA_WINDOW = 5


@dataclass(frozen=True)
class EnsembleMember:
    """One registry entry: model name, ensemble weight, scoring function."""

    name:   str
    weight: float
    score:  Scorer


# ── Models ────────────────────────────────────────────────────────────────────


def lstm_score(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
) -> float:
    """Sequence model over the last 30 days."""
    if len(series) < 2:
        raise InsufficientHistory("lstm", 2, len(series))
    window = series[-_SEQUENCE_WINDOW:]
    prices = [p.price for p in window]
    volumes = [p.volume for p in window]

    price_trend = _normalized_slope(prices)
    volume_trend = _normalized_slope(volumes)
    rsi_signal = (indicators.rsi - 50) / 50
    macd_signal = 1.0 if indicators.macd_histogram > 0 else -1.0

    band_width = indicators.bb_upper - indicators.bb_lower
    if band_width > 0:
        bb_position = (prices[-1] - indicators.bb_lower) / band_width - 0.5
    else:
        bb_position = 0.0

    output = (
        price_trend    * 0.4
        + volume_trend * 0.2
        + rsi_signal   * 0.15
        + macd_signal  * 0.15
        + bb_position  * 0.1
    )
    return math.tanh(output)


def arima_score(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
) -> float:
    """AR(1) + MA(5) over daily returns of the last 21 prices."""
    prices = [p.price for p in series[-_AR_WINDOW:]]
    if len(prices) < _MA_WINDOW + 1:
        raise InsufficientHistory("arima", _MA_WINDOW + 1, len(prices))
    returns = [(curr - prev) / prev for prev, curr in zip(prices, prices[1:])]

    ar1 = returns[-1] * 0.3
    ma1 = sum(returns[-_MA_WINDOW:]) / _MA_WINDOW * 0.2
    return math.tanh((ar1 + ma1) * 10)


def random_forest_score(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
) -> float:
    """Mean of five rule votes."""
    if indicators.rsi > 70:
        rsi_vote = -0.2
    elif indicators.rsi < 30:
        rsi_vote = 0.3
    else:
        rsi_vote = 0.0

    votes = [
        rsi_vote,
        0.2 if indicators.macd > indicators.macd_signal else -0.1,
        0.1 if indicators.bb_upper > indicators.bb_middle * 1.1 else -0.05,
        sentiment.social_sentiment * 0.3,
        sentiment.volume_sentiment * 0.2,
    ]
    return sum(votes) / len(votes)


_LINEAR_COEFFICIENTS = (0.15, 0.25, 0.2, 0.3, 0.1)
_LINEAR_INTERCEPT = 0.02


def linear_regression_score(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
) -> float:
    """Fixed-coefficient linear model, squashed with tanh."""
    features = (
        indicators.rsi / 100,
        indicators.macd_histogram,
        indicators.momentum,
        indicators.roc / 100,
        indicators.stochastic_k / 100,
    )
    prediction = _LINEAR_INTERCEPT + sum(
        f * c for f, c in zip(features, _LINEAR_COEFFICIENTS)
    )
    return math.tanh(prediction)


def sentiment_score(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
) -> float:
    return (sentiment.social_sentiment + sentiment.news_sentiment) / 2


DEFAULT_MODELS: tuple[EnsembleMember, ...] = (
    EnsembleMember("lstm",              0.30, lstm_score),
    EnsembleMember("arima",             0.20, arima_score),
    EnsembleMember("random_forest",     0.25, random_forest_score),
    EnsembleMember("linear_regression", 0.15, linear_regression_score),
    EnsembleMember("sentiment",         0.10, sentiment_score),
)


def run_ensemble(
    series: Sequence[HistoricalPoint],
    indicators: TechnicalIndicatorSet,
    sentiment: MarketSentiment,
    models: Sequence[EnsembleMember] = DEFAULT_MODELS,
) -> ModelScoreSet:
    """Score every registered model, in registry order.

    Each output is clamped to [-1, 1].

    Raises:
        InsufficientHistory: If a model's window is longer than ``series``.
    """
    scores = {
        m.name: _clamp(m.score(series, indicators, sentiment), -1.0, 1.0)
        for m in models
    }
    return ModelScoreSet(**scores)


def model_weights(models: Sequence[EnsembleMember] = DEFAULT_MODELS) -> dict[str, float]:
    return {m.name: m.weight for m in models}


# ── Helpers ───────────────────────────────────────────────────────────────────


def _normalized_slope(values: Sequence[float]) -> float:
    """Slope of ``values`` scaled by their max: ``(v[-1] - v[0]) / max / len``."""
    peak = max(values)
    if peak <= 0:
        return 0.0
    return (values[-1] / peak - values[0] / peak) / len(values)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
