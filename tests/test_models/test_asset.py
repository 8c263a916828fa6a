"""
Tests for crypto_forecaster/models/asset.py.

What we test
------------
AssetSnapshot:
  - Valid construction; defaults for optional fields.
  - Frozen: attribute assignment raises.
  - price must be > 0 and finite.
  - volume / market cap / supplies must be non-negative.
  - percent changes must be > -100.
  - Integer and string ids are both accepted.
  - Finite values whose derived magnitudes overflow are rejected; large
    realistic values are accepted.

validate_snapshot():
  - Returns an AssetSnapshot for valid data.
  - Wraps pydantic errors in InvalidSnapshot naming the symbol and field.

check_snapshot():
  - Passes valid snapshots through unchanged.
  - Catches values smuggled in via model_construct().
"""

from __future__ import annotations

import math

import pytest
from pydantic import ValidationError

from crypto_forecaster.errors import ForecasterError, InvalidSnapshot
from crypto_forecaster.models.asset import AssetSnapshot, check_snapshot, validate_snapshot


_VALID = {
    "id": 1,
    "symbol": "BTC",
    "name": "Bitcoin",
    "rank": 1,
    "price": 64_000.0,
    "volume_24h": 3e10,
    "market_cap": 1.2e12,
}


class TestAssetSnapshot:
    def test_valid_construction(self):
        snap = AssetSnapshot(**_VALID)
        assert snap.symbol == "BTC"
        assert snap.max_supply is None
        assert snap.infinite_supply is False
        assert snap.percent_change_1h == 0.0
        assert snap.last_updated is None

    def test_frozen(self):
        snap = AssetSnapshot(**_VALID)
        with pytest.raises(ValidationError):
            snap.price = 1.0  # type: ignore[misc]

    def test_string_id_accepted(self):
        snap = AssetSnapshot(**{**_VALID, "id": "bitcoin"})
        assert snap.id == "bitcoin"

    @pytest.mark.parametrize("price", [0.0, -1.0])
    def test_non_positive_price_rejected(self, price):
        with pytest.raises(ValidationError):
            AssetSnapshot(**{**_VALID, "price": price})

    @pytest.mark.parametrize("price", [math.inf, math.nan])
    def test_non_finite_price_rejected(self, price):
        with pytest.raises(ValidationError):
            AssetSnapshot(**{**_VALID, "price": price})

    @pytest.mark.parametrize(
        "field", ["volume_24h", "market_cap", "circulating_supply", "total_supply"]
    )
    def test_negative_amounts_rejected(self, field):
        with pytest.raises(ValidationError):
            AssetSnapshot(**{**_VALID, field: -1.0})

    def test_negative_max_supply_rejected(self):
        with pytest.raises(ValidationError):
            AssetSnapshot(**{**_VALID, "max_supply": -5.0})

    def test_total_loss_change_rejected(self):
        with pytest.raises(ValidationError):
            AssetSnapshot(**{**_VALID, "percent_change_7d": -100.0})

    def test_large_gain_accepted(self):
        snap = AssetSnapshot(**{**_VALID, "percent_change_24h": 450.0})
        assert snap.percent_change_24h == 450.0

    @pytest.mark.parametrize(
        "update",
        [
            {"price": 1e200, "circulating_supply": 1e200},
            {"volume_24h": 1e308},
            {"price": 1e160},
        ],
    )
    def test_overflowing_magnitudes_rejected(self, update):
        with pytest.raises(ValidationError, match="overflows"):
            AssetSnapshot(**{**_VALID, **update})

    def test_huge_supply_accepted(self):
        snap = AssetSnapshot(**{**_VALID, "price": 1e-8, "circulating_supply": 1e20})
        assert snap.circulating_supply == 1e20


class TestValidateSnapshot:
    def test_returns_snapshot(self):
        assert validate_snapshot(dict(_VALID)).rank == 1

    def test_invalid_raises_invalid_snapshot(self):
        with pytest.raises(InvalidSnapshot, match="BTC") as exc_info:
            validate_snapshot({**_VALID, "price": -3.0})
        assert "price" in str(exc_info.value)

    def test_invalid_snapshot_is_value_error_and_forecaster_error(self):
        with pytest.raises(ValueError):
            validate_snapshot({**_VALID, "price": 0})
        with pytest.raises(ForecasterError):
            validate_snapshot({**_VALID, "price": 0})

    def test_overflow_raises_invalid_snapshot(self):
        with pytest.raises(InvalidSnapshot, match="BTC"):
            validate_snapshot({**_VALID, "volume_24h": 1e308})

    def test_missing_field_reported(self):
        data = dict(_VALID)
        del data["rank"]
        with pytest.raises(InvalidSnapshot, match="rank"):
            validate_snapshot(data)


class TestCheckSnapshot:
    def test_valid_passes_through(self):
        snap = AssetSnapshot(**_VALID)
        assert check_snapshot(snap) is snap

    def test_constructed_bypass_is_caught(self):
        bad = AssetSnapshot.model_construct(**{**_VALID, "price": -1.0})
        with pytest.raises(InvalidSnapshot, match="price"):
            check_snapshot(bad)
