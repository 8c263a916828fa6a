"""
Technical indicators over a chronological price series.

Every function takes prices ordered oldest to newest and looks at the most
recent values. Each one needs a minimum number of points and raises
``InsufficientHistory`` below it.

Windows used by ``compute_indicators()``
----------------------------------------
  SMA 20 / 50, EMA 12 / 26, RSI 14, Bollinger 20 (+/-2 stddev),
  Stochastic 14, Williams %R 14, Momentum 10, Rate of Change 10.
  The full set therefore needs at least 50 points.

Zero-division policy
--------------------
Degenerate inputs never raise; each guard returns a fixed neutral value:
  - RSI with no losses in the window            -> 100
  - Stochastic %K with a flat window (max==min) -> 50
  - Williams %R with a flat window              -> -50
  - Rate of Change with a zero base price       -> 0.0

Simplifications
---------------
  - ``macd_signal`` is the 9-period EMA of the single current MACD value,
    which is that value. ``macd_histogram`` is therefore 0.
  - ``stochastic_d`` is not smoothed; it equals ``stochastic_k``.
The ensemble scorers consume these exact values.
"""

from __future__ import annotations

import math
from typing import Sequence

from crypto_forecaster.errors import InsufficientHistory
from crypto_forecaster.models.market import HistoricalPoint, TechnicalIndicatorSet

MIN_HISTORY_POINTS = 50


def _require(name: str, values: Sequence[float], required: int) -> None:
    if len(values) < required:
        raise InsufficientHistory(name, required, len(values))


def sma(prices: Sequence[float], period: int) -> float:
    """Arithmetic mean of the last ``period`` prices."""
    _require(f"sma_{period}", prices, period)
    window = prices[-period:]
    return sum(window) / len(window)


def ema(prices: Sequence[float], period: int) -> float:
    """Exponential moving average over ``prices``.

    Seeded with the first value; each later value is blended in with
    multiplier ``2 / (period + 1)``.
    """
    _require(f"ema_{period}", prices, period)
    return _ema(prices, period)


def _ema(values: Sequence[float], period: int) -> float:
    multiplier = 2 / (period + 1)
    result = values[0]
    for value in values[1:]:
        result = value * multiplier + result * (1 - multiplier)
    return result


def macd(prices: Sequence[float]) -> tuple[float, float, float]:
    """Return ``(macd, macd_signal, macd_histogram)``.

    The signal line is the 9-period EMA applied to the one MACD value
    available, so it degenerates to that value.
    """
    line = ema(prices, 12) - ema(prices, 26)
    signal = _ema([line], 9)
    return line, signal, line - signal


def rsi(prices: Sequence[float], period: int = 14) -> float:
    """Relative Strength Index over the last ``period`` one-step deltas.

    Returns 100 when the window holds no losses.
    """
    _require(f"rsi_{period}", prices, period + 1)
    window = prices[-(period + 1):]
    gains = 0.0
    losses = 0.0
    for prev, curr in zip(window, window[1:]):
        change = curr - prev
        if change > 0:
            gains += change
        else:
            losses -= change

    avg_gain = gains / period
    avg_loss = losses / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return 100 - 100 / (1 + rs)


def std_dev(values: Sequence[float]) -> float:
    """Population standard deviation."""
    mean = sum(values) / len(values)
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance)


def bollinger_bands(
    prices: Sequence[float],
    period: int = 20,
    num_std: float = 2.0,
) -> tuple[float, float, float]:
    """Return ``(upper, middle, lower)`` bands around SMA(``period``)."""
    _require(f"bollinger_{period}", prices, period)
    middle = sma(prices, period)
    spread = std_dev(prices[-period:]) * num_std
    return middle + spread, middle, middle - spread


def stochastic(prices: Sequence[float], period: int = 14) -> tuple[float, float]:
    """Return ``(%K, %D)``; ``%D`` equals ``%K``. A flat window gives 50."""
    _require(f"stochastic_{period}", prices, period)
    window = prices[-period:]
    highest, lowest = max(window), min(window)
    if highest == lowest:
        return 50.0, 50.0
    k = (prices[-1] - lowest) / (highest - lowest) * 100
    return k, k


def williams_r(prices: Sequence[float], period: int = 14) -> float:
    """Williams %R in [-100, 0]. A flat window gives -50."""
    _require(f"williams_r_{period}", prices, period)
    window = prices[-period:]
    highest, lowest = max(window), min(window)
    if highest == lowest:
        return -50.0
    return (highest - prices[-1]) / (highest - lowest) * -100


def momentum(prices: Sequence[float], period: int = 10) -> float:
    """``price[t] - price[t - period]``."""
    _require(f"momentum_{period}", prices, period + 1)
    return prices[-1] - prices[-1 - period]


def rate_of_change(prices: Sequence[float], period: int = 10) -> float:
    """Percent change over ``period`` steps; 0.0 when the base price is 0."""
    _require(f"roc_{period}", prices, period + 1)
    previous = prices[-1 - period]
    if previous == 0:
        return 0.0
    return (prices[-1] - previous) / previous * 100


def compute_indicators(series: Sequence[HistoricalPoint]) -> TechnicalIndicatorSet:
    """Compute the full indicator set from a chronological series.

    Raises:
        InsufficientHistory: If ``series`` has fewer than 50 points.
    """
    prices = [p.price for p in series]
    _require("indicator_set", prices, MIN_HISTORY_POINTS)

    macd_line, macd_signal, macd_hist = macd(prices)
    bb_upper, bb_middle, bb_lower = bollinger_bands(prices, 20, 2.0)
    stoch_k, stoch_d = stochastic(prices, 14)

    return TechnicalIndicatorSet(
        sma_20=sma(prices, 20),
        sma_50=sma(prices, 50),
        ema_12=ema(prices, 12),
        ema_26=ema(prices, 26),
        rsi=rsi(prices, 14),
        macd=macd_line,
        macd_signal=macd_signal,
        macd_histogram=macd_hist,
        bb_upper=bb_upper,
        bb_middle=bb_middle,
        bb_lower=bb_lower,
        stochastic_k=stoch_k,
        stochastic_d=stoch_d,
        williams_r=williams_r(prices, 14),
        momentum=momentum(prices, 10),
        roc=rate_of_change(prices, 10),
    )
