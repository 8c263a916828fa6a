"""
Series and signal models derived from a single ``AssetSnapshot``.

``HistoricalPoint``        -- one day of the synthetic price/volume history.
``TechnicalIndicatorSet``  -- the indicator values computed from that history.
``MarketSentiment``        -- bounded sentiment signals for the ensemble.

All models are frozen; they are recomputed for every evaluation and never
mutated after construction.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator


class HistoricalPoint(BaseModel):
    """One daily observation in a synthetic history series.

    Attributes:
        timestamp: UTC timestamp of the observation.
        price: Price in USD; always positive.
        volume: Traded volume for the day.
        market_cap: ``price * circulating_supply`` (0 when supply is unknown).
        price_change_24h: Percent change versus the previous point.
    """

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    price: float
    volume: float
    market_cap: float
    price_change_24h: float

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"price must be positive, got {v}.")
        return v

    @field_validator("volume", "market_cap")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}.")
        return v


class TechnicalIndicatorSet(BaseModel):
    """Full set of technical indicators for one history series.

    ``macd_signal`` equals ``macd`` and ``stochastic_d`` equals
    ``stochastic_k``; see ``features.indicators`` for why.
    """

    model_config = ConfigDict(frozen=True)

    sma_20: float
    sma_50: float
    ema_12: float
    ema_26: float
    rsi: float
    macd: float
    macd_signal: float
    macd_histogram: float
    bb_upper: float
    bb_middle: float
    bb_lower: float
    stochastic_k: float
    stochastic_d: float
    williams_r: float
    momentum: float
    roc: float


class MarketSentiment(BaseModel):
    """Bounded sentiment signals.

    Attributes:
        social_sentiment: ``tanh`` of the 24h move, in (-1, 1).
        news_sentiment: Unmodelled external signal, noise in [-0.2, 0.2].
        fear_greed_index: 0 (fear) to 100 (greed), driven by the 7d move.
        volume_sentiment: Current volume versus the 7-day average, in (-1, 1).
        whale_activity: Unmodelled, noise in [-0.3, 0.3].
    """

    model_config = ConfigDict(frozen=True)

    social_sentiment: float
    news_sentiment: float
    fear_greed_index: float
    volume_sentiment: float
    whale_activity: float

    @field_validator("social_sentiment", "volume_sentiment")
    @classmethod
    def validate_unit_range(cls, v: float) -> float:
        if not -1.0 <= v <= 1.0:
            raise ValueError(f"must be in [-1, 1], got {v}.")
        return v

    @field_validator("news_sentiment")
    @classmethod
    def validate_news_range(cls, v: float) -> float:
        if not -0.2 <= v <= 0.2:
            raise ValueError(f"news_sentiment must be in [-0.2, 0.2], got {v}.")
        return v

    @field_validator("fear_greed_index")
    @classmethod
    def validate_fear_greed(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"fear_greed_index must be in [0, 100], got {v}.")
        return v

    @field_validator("whale_activity")
    @classmethod
    def validate_whale_range(cls, v: float) -> float:
        if not -0.3 <= v <= 0.3:
            raise ValueError(f"whale_activity must be in [-0.3, 0.3], got {v}.")
        return v
