"""
Market sentiment signals derived from a snapshot and its synthetic history.

Only two of the five signals are modelled from data:

  social_sentiment  = tanh(2 * pct_change_24h / 100)
  volume_sentiment  = tanh((volume_24h - avg7) / avg7)   # avg7 = mean of last 7 volumes
  fear_greed_index  = clamp(50 + 2 * pct_change_7d, 0, 100)

``news_sentiment`` and ``whale_activity`` stand in for external feeds that
are not available here; they are drawn from the injected random source
(news first, then whale) so they stay reproducible under a fixed seed.
"""

from __future__ import annotations

import math
import random
from typing import Sequence

from crypto_forecaster.models.asset import AssetSnapshot
from crypto_forecaster.models.market import HistoricalPoint, MarketSentiment

_VOLUME_WINDOW = 7
_NEWS_BOUND = 0.2
_WHALE_BOUND = 0.3


def estimate_sentiment(
    snapshot: AssetSnapshot,
    series: Sequence[HistoricalPoint],
    rng: random.Random,
) -> MarketSentiment:
    """Build the ``MarketSentiment`` for one snapshot.

    Args:
        snapshot: Source snapshot.
        series:   Chronological history; the last 7 volumes form the baseline.
        rng:      Random source for the unmodelled signals.
    """
    recent = [p.volume for p in series[-_VOLUME_WINDOW:]]
    avg_volume = sum(recent) / len(recent) if recent else 0.0
    if avg_volume > 0:
        volume_sentiment = math.tanh((snapshot.volume_24h - avg_volume) / avg_volume)
    else:
        volume_sentiment = 0.0

    news = rng.uniform(-_NEWS_BOUND, _NEWS_BOUND)
    whale = rng.uniform(-_WHALE_BOUND, _WHALE_BOUND)

    return MarketSentiment(
        social_sentiment=math.tanh(snapshot.percent_change_24h / 100 * 2),
        news_sentiment=news,
        fear_greed_index=_clamp(50 + snapshot.percent_change_7d * 2, 0.0, 100.0),
        volume_sentiment=volume_sentiment,
        whale_activity=whale,
    )


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
