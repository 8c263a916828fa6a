"""
Shared pytest fixtures for the Crypto Forecaster test suite.

Provides:
  - ``make_snapshot``: factory for ``AssetSnapshot`` with sensible defaults.
  - ``btc_like`` / ``risky_alt``: two reference snapshots, one strongly
    bullish large cap and one collapsing micro cap.
  - ``rng``: a seeded ``random.Random``.
  - ``as_of``: a fixed UTC timestamp so synthetic series are reproducible.
"""

from __future__ import annotations

import random
from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from crypto_forecaster.models.asset import AssetSnapshot


def _snapshot(**overrides: Any) -> AssetSnapshot:
    data: dict[str, Any] = {
        "id": 1,
        "symbol": "TST",
        "name": "Testcoin",
        "rank": 100,
        "price": 10.0,
        "volume_24h": 5_000_000.0,
        "market_cap": 500_000_000.0,
        "circulating_supply": 50_000_000.0,
        "total_supply": 60_000_000.0,
        "max_supply": None,
        "infinite_supply": False,
        "percent_change_1h": 0.0,
        "percent_change_24h": 0.0,
        "percent_change_7d": 0.0,
    }
    data.update(overrides)
    return AssetSnapshot(**data)


@pytest.fixture
def make_snapshot() -> Callable[..., AssetSnapshot]:
    """Factory fixture: ``make_snapshot(price=1.0, rank=3, ...)``."""
    return _snapshot


@pytest.fixture
def btc_like() -> AssetSnapshot:
    """Top-10 asset with strong gains and heavy volume (labels as ``Buy``)."""
    return _snapshot(
        id=1,
        symbol="BTC",
        name="Bitcoin",
        rank=5,
        price=100.0,
        volume_24h=2e9,
        market_cap=5e10,
        circulating_supply=5e8,
        percent_change_24h=8.0,
        percent_change_7d=18.0,
    )


@pytest.fixture
def risky_alt() -> AssetSnapshot:
    """Micro cap in free fall (labels as ``Sell``)."""
    return _snapshot(
        id=800,
        symbol="RUG",
        name="Rugcoin",
        rank=800,
        price=0.5,
        volume_24h=1e6,
        market_cap=5e7,
        circulating_supply=1e8,
        percent_change_24h=-25.0,
        percent_change_7d=-30.0,
    )


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def as_of() -> datetime:
    return datetime(2025, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
