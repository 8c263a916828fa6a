"""
Asset snapshot model -- the sole input to the forecasting core.

An ``AssetSnapshot`` is a single point-in-time record of an asset's market
data as produced by an upstream data provider. It is frozen: the engine
reads it but never mutates it.

Validation happens at construction. Use ``validate_snapshot()`` to build a
snapshot from keyword data and receive an ``InvalidSnapshot`` (rather than a
raw pydantic ``ValidationError``) on failure.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from crypto_forecaster.errors import InvalidSnapshot

_NON_NEGATIVE_FIELDS = ("volume_24h", "market_cap", "circulating_supply", "total_supply")

# Upper bound on the factors the history synthesizer applies to price and
# volume (volume draw up to 1.2x; noise and weekly cycle up to 1.071x).
_SYNTHETIC_HEADROOM = 1.2
# Volumes summed for the sentiment baseline.
_VOLUME_WINDOW = 7
# Longest window of squared price deviations (SMA 50 series).
_INDICATOR_WINDOW = 50


class AssetSnapshot(BaseModel):
    """Point-in-time market data for one asset.

    Attributes:
        id: Provider identifier (integer for CoinMarketCap, slug for CoinGecko).
        symbol: Ticker symbol, e.g. ``"BTC"``.
        name: Display name.
        slug: Optional URL-friendly name.
        rank: Market-cap rank (1 = largest).
        price: Current price in USD.
        volume_24h: Traded volume over the last 24 hours (USD).
        market_cap: Market capitalisation (USD).
        circulating_supply: Units currently in circulation.
        total_supply: Units in existence.
        max_supply: Hard cap, or ``None`` when uncapped.
        infinite_supply: ``True`` if the protocol has no supply limit.
        percent_change_1h: 1-hour change in percent (``5.0`` = +5%).
        percent_change_24h: 24-hour change in percent.
        percent_change_7d: 7-day change in percent.
        last_updated: Provider timestamp of the quote, if known.
    """

    model_config = ConfigDict(frozen=True)

    id: int | str
    symbol: str
    name: str
    slug: Optional[str] = None
    rank: int
    price: float
    volume_24h: float
    market_cap: float
    circulating_supply: float = 0.0
    total_supply: float = 0.0
    max_supply: Optional[float] = None
    infinite_supply: bool = False
    percent_change_1h: float = 0.0
    percent_change_24h: float = 0.0
    percent_change_7d: float = 0.0
    last_updated: Optional[datetime] = None

    @field_validator(
        "price", "volume_24h", "market_cap", "circulating_supply", "total_supply",
        "max_supply", "percent_change_1h", "percent_change_24h", "percent_change_7d",
    )
    @classmethod
    def validate_finite(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError(f"must be finite, got {v}.")
        return v

    @field_validator("price")
    @classmethod
    def validate_price_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"price must be positive, got {v}.")
        return v

    @field_validator(*_NON_NEGATIVE_FIELDS)
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"must be non-negative, got {v}.")
        return v

    @field_validator("percent_change_1h", "percent_change_24h", "percent_change_7d")
    @classmethod
    def validate_change_above_total_loss(cls, v: float) -> float:
        # A positive current price rules out a loss of 100% or more.
        if v <= -100.0:
            raise ValueError(f"percent change must be > -100, got {v}.")
        return v

    @field_validator("max_supply")
    @classmethod
    def validate_max_supply(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 0:
            raise ValueError(f"max_supply must be non-negative, got {v}.")
        return v

    @model_validator(mode="after")
    def validate_derived_magnitudes(self) -> "AssetSnapshot":
        """Reject values that are finite but overflow once the engine scales them.

        The synthetic series can reach ``peak_price``; indicators square price
        deviations, market cap is ``price * circulating_supply``, and the
        sentiment baseline sums a week of volumes.
        """
        growth = max(1.0, 1 + self.percent_change_7d / 100)
        peak_price = self.price * growth * _SYNTHETIC_HEADROOM
        derived = {
            "squared price deviations": peak_price * peak_price * _INDICATOR_WINDOW,
            "price * circulating_supply": peak_price * self.circulating_supply,
            "weekly volume": self.volume_24h * _SYNTHETIC_HEADROOM * _VOLUME_WINDOW,
        }
        for label, value in derived.items():
            if not math.isfinite(value):
                raise ValueError(f"{label} overflows a float; values are too large.")
        return self


def validate_snapshot(data: dict[str, Any]) -> AssetSnapshot:
    """Build an ``AssetSnapshot`` from keyword data.

    Raises:
        InvalidSnapshot: If any field fails validation. The message lists
            every failing field.
    """
    try:
        return AssetSnapshot(**data)
    except ValidationError as exc:
        label = data.get("symbol") or data.get("id") or "<unknown>"
        raise InvalidSnapshot(f"Invalid snapshot '{label}': {_summarize(exc)}") from exc


def check_snapshot(snapshot: AssetSnapshot) -> AssetSnapshot:
    """Re-validate a snapshot that may have bypassed construction checks.

    ``model_construct()`` and ``model_copy(update=...)`` skip validators, so
    the engine re-checks every snapshot before the pipeline starts.

    Raises:
        InvalidSnapshot: If the snapshot's values are not valid.
    """
    try:
        AssetSnapshot.model_validate(snapshot.model_dump())
    except ValidationError as exc:
        raise InvalidSnapshot(
            f"Invalid snapshot '{snapshot.symbol}': {_summarize(exc)}"
        ) from exc
    return snapshot


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
