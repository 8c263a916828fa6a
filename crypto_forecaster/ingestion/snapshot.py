"""
Snapshot loading: raw provider records -> ``AssetSnapshot``.

Nothing here touches the network. Upstream fetchers save provider responses
to disk; this module reads them back and maps each record onto the engine's
input model.

Accepted record shapes
----------------------
CoinMarketCap listing (``/v1/cryptocurrency/listings/latest``)::

    {"id": 1, "symbol": "BTC", "name": "Bitcoin", "cmc_rank": 1,
     "circulating_supply": ..., "max_supply": ..., "infinite_supply": false,
     "quote": {"USD": {"price": ..., "volume_24h": ..., "market_cap": ...,
                       "percent_change_1h": ..., "percent_change_24h": ...,
                       "percent_change_7d": ..., "last_updated": "..."}}}

CoinGecko markets (``/api/v3/coins/markets``)::

    {"id": "bitcoin", "symbol": "btc", "current_price": ..., "total_volume": ...,
     "market_cap": ..., "market_cap_rank": 1,
     "price_change_percentage_24h": ...,
     "price_change_percentage_1h_in_currency": ...,
     "price_change_percentage_7d_in_currency": ...}

    Missing numeric fields default to 0 and the rank falls back to the
    record's 1-based position in the file. CoinGecko has no infinite-supply
    flag; it is always ``False``.

Flat records using ``AssetSnapshot`` field names are accepted as-is.

File layout
-----------
A JSON array of records, or an object whose ``"data"`` key holds the array
(both the ``{"_meta": ..., "data": [...]}`` snapshot envelope and the raw
CoinMarketCap response use this shape).
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from crypto_forecaster.errors import InvalidSnapshot
from crypto_forecaster.models.asset import AssetSnapshot, validate_snapshot

logger = logging.getLogger(__name__)


def detect_format(raw: dict[str, Any]) -> str:
    """Return ``"cmc"``, ``"coingecko"``, or ``"flat"`` for a raw record."""
    if isinstance(raw.get("quote"), dict):
        return "cmc"
    if "current_price" in raw:
        return "coingecko"
    return "flat"


def parse_snapshot(raw: dict[str, Any], position: int = 1) -> AssetSnapshot:
    """Map one raw provider record to an ``AssetSnapshot``.

    Args:
        raw:      Provider record (CoinMarketCap, CoinGecko, or flat).
        position: 1-based position in the source list; CoinGecko rank fallback.

    Raises:
        InvalidSnapshot: If the record is malformed or fails validation.
    """
    if not isinstance(raw, dict):
        raise InvalidSnapshot(f"Snapshot record must be an object, got {type(raw).__name__}.")

    fmt = detect_format(raw)
    if fmt == "cmc":
        data = _from_cmc(raw)
    elif fmt == "coingecko":
        data = _from_coingecko(raw, position)
    else:
        data = dict(raw)
    return validate_snapshot(data)


def load_snapshots(path: Path) -> list[AssetSnapshot]:
    """Load and validate every snapshot record in a JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        InvalidSnapshot: If the layout is wrong or any record is invalid;
            the message names the failing record index.
    """
    with open(path, encoding="utf-8") as f:
        payload = json.load(f)

    records = payload.get("data") if isinstance(payload, dict) else payload
    if not isinstance(records, list):
        raise InvalidSnapshot(
            f"{path}: expected a JSON array or an object with a 'data' array."
        )

    snapshots: list[AssetSnapshot] = []
    for idx, raw in enumerate(records):
        try:
            snapshots.append(parse_snapshot(raw, position=idx + 1))
        except InvalidSnapshot as exc:
            raise InvalidSnapshot(f"{path} record #{idx}: {exc}") from exc

    logger.info("Loaded %d snapshot(s) from %s", len(snapshots), path)
    return snapshots


# ── Provider mappings ─────────────────────────────────────────────────────────


def _from_cmc(raw: dict[str, Any]) -> dict[str, Any]:
    usd = raw.get("quote", {}).get("USD")
    if not isinstance(usd, dict):
        raise InvalidSnapshot(
            f"CoinMarketCap record '{raw.get('symbol', '?')}' has no USD quote."
        )
    return {
        "id":                 raw.get("id"),
        "symbol":             raw.get("symbol"),
        "name":               raw.get("name"),
        "slug":               raw.get("slug"),
        "rank":               raw.get("cmc_rank"),
        "price":              usd.get("price"),
        "volume_24h":         usd.get("volume_24h"),
        "market_cap":         usd.get("market_cap"),
        "circulating_supply": raw.get("circulating_supply") or 0.0,
        "total_supply":       raw.get("total_supply") or 0.0,
        "max_supply":         raw.get("max_supply"),
        "infinite_supply":    bool(raw.get("infinite_supply", False)),
        "percent_change_1h":  usd.get("percent_change_1h") or 0.0,
        "percent_change_24h": usd.get("percent_change_24h") or 0.0,
        "percent_change_7d":  usd.get("percent_change_7d") or 0.0,
        "last_updated":       usd.get("last_updated") or raw.get("last_updated"),
    }


def _from_coingecko(raw: dict[str, Any], position: int) -> dict[str, Any]:
    symbol = raw.get("symbol")
    return {
        "id":                 raw.get("id"),
        "symbol":             symbol.upper() if isinstance(symbol, str) else symbol,
        "name":               raw.get("name"),
        "slug":               raw.get("id"),
        "rank":               raw.get("market_cap_rank") or position,
        "price":              raw.get("current_price"),
        "volume_24h":         raw.get("total_volume") or 0.0,
        "market_cap":         raw.get("market_cap") or 0.0,
        "circulating_supply": raw.get("circulating_supply") or 0.0,
        "total_supply":       raw.get("total_supply") or 0.0,
        "max_supply":         raw.get("max_supply"),
        "infinite_supply":    False,
        "percent_change_1h":  raw.get("price_change_percentage_1h_in_currency") or 0.0,
        "percent_change_24h": raw.get("price_change_percentage_24h") or 0.0,
        "percent_change_7d":  raw.get("price_change_percentage_7d_in_currency") or 0.0,
        "last_updated":       raw.get("last_updated"),
    }
