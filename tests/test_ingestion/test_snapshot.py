"""
Tests for crypto_forecaster/ingestion/snapshot.py.

What we test
------------
detect_format(): cmc (has quote dict), coingecko (current_price), flat.
parse_snapshot():
  - CoinMarketCap record -> fields mapped from quote.USD; rank from cmc_rank;
    null percent changes default to 0.
  - CoinGecko record -> upper-cased symbol, rank from market_cap_rank or
    position fallback, missing numerics default to 0, infinite_supply False.
  - Flat record passes through.
  - Non-dict record / missing USD quote / invalid values -> InvalidSnapshot.
load_snapshots():
  - Accepts a bare array and a {"data": [...]} envelope.
  - Error message names the failing record index.
  - Wrong top-level layout -> InvalidSnapshot.
  - Missing file -> FileNotFoundError; bad JSON -> JSONDecodeError.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from crypto_forecaster.errors import InvalidSnapshot
from crypto_forecaster.ingestion.snapshot import detect_format, load_snapshots, parse_snapshot


# ── Fixtures ──────────────────────────────────────────────────────────────────

def _cmc_record(**overrides) -> dict:
    record = {
        "id": 1027,
        "name": "Ethereum",
        "symbol": "ETH",
        "slug": "ethereum",
        "cmc_rank": 2,
        "circulating_supply": 120_000_000,
        "total_supply": 120_000_000,
        "max_supply": None,
        "infinite_supply": True,
        "quote": {
            "USD": {
                "price": 3_100.5,
                "volume_24h": 1.5e10,
                "market_cap": 3.72e11,
                "percent_change_1h": None,
                "percent_change_24h": 2.5,
                "percent_change_7d": -4.0,
                "last_updated": "2025-01-15T12:00:00.000Z",
            }
        },
    }
    record.update(overrides)
    return record


def _gecko_record(**overrides) -> dict:
    record = {
        "id": "solana",
        "symbol": "sol",
        "name": "Solana",
        "current_price": 180.25,
        "market_cap": 8.5e10,
        "market_cap_rank": 5,
        "total_volume": 3.2e9,
        "circulating_supply": 470_000_000,
        "total_supply": 580_000_000,
        "max_supply": None,
        "price_change_percentage_24h": 6.1,
        "price_change_percentage_7d_in_currency": 12.0,
    }
    record.update(overrides)
    return record


def _flat_record(**overrides) -> dict:
    record = {
        "id": 7,
        "symbol": "FLT",
        "name": "Flatcoin",
        "rank": 40,
        "price": 1.25,
        "volume_24h": 2e7,
        "market_cap": 1e9,
    }
    record.update(overrides)
    return record


def _write(tmp_path, payload, name: str = "snapshots.json"):
    path = tmp_path / name
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class TestDetectFormat:
    def test_formats(self):
        assert detect_format(_cmc_record()) == "cmc"
        assert detect_format(_gecko_record()) == "coingecko"
        assert detect_format(_flat_record()) == "flat"


class TestParseSnapshot:
    def test_cmc(self):
        snap = parse_snapshot(_cmc_record())
        assert snap.id == 1027
        assert snap.symbol == "ETH"
        assert snap.rank == 2
        assert snap.price == 3_100.5
        assert snap.volume_24h == 1.5e10
        assert snap.infinite_supply is True
        assert snap.percent_change_1h == 0.0
        assert snap.percent_change_7d == -4.0
        assert snap.last_updated == datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc)

    def test_cmc_without_usd_quote(self):
        with pytest.raises(InvalidSnapshot, match="USD"):
            parse_snapshot(_cmc_record(quote={"EUR": {"price": 1.0}}))

    def test_coingecko(self):
        snap = parse_snapshot(_gecko_record())
        assert snap.id == "solana"
        assert snap.symbol == "SOL"
        assert snap.slug == "solana"
        assert snap.rank == 5
        assert snap.volume_24h == 3.2e9
        assert snap.percent_change_1h == 0.0
        assert snap.percent_change_24h == 6.1
        assert snap.percent_change_7d == 12.0
        assert snap.infinite_supply is False

    def test_coingecko_rank_falls_back_to_position(self):
        snap = parse_snapshot(_gecko_record(market_cap_rank=None), position=17)
        assert snap.rank == 17

    def test_coingecko_missing_numerics_default_to_zero(self):
        record = _gecko_record()
        del record["total_volume"]
        record["market_cap"] = None
        snap = parse_snapshot(record)
        assert snap.volume_24h == 0.0
        assert snap.market_cap == 0.0

    def test_flat(self):
        snap = parse_snapshot(_flat_record(percent_change_24h=3.0))
        assert snap.symbol == "FLT"
        assert snap.percent_change_24h == 3.0

    def test_invalid_values(self):
        with pytest.raises(InvalidSnapshot, match="price"):
            parse_snapshot(_flat_record(price=0))

    def test_non_dict(self):
        with pytest.raises(InvalidSnapshot, match="object"):
            parse_snapshot(["not", "a", "record"])  # type: ignore[arg-type]


class TestLoadSnapshots:
    def test_bare_array(self, tmp_path):
        path = _write(tmp_path, [_cmc_record(), _gecko_record(), _flat_record()])
        snaps = load_snapshots(path)
        assert [s.symbol for s in snaps] == ["ETH", "SOL", "FLT"]

    def test_data_envelope(self, tmp_path):
        payload = {"_meta": {"source": "cmc"}, "data": [_cmc_record()]}
        assert len(load_snapshots(_write(tmp_path, payload))) == 1

    def test_empty_array(self, tmp_path):
        assert load_snapshots(_write(tmp_path, [])) == []

    def test_error_names_record_index(self, tmp_path):
        path = _write(tmp_path, [_flat_record(), _flat_record(price=-2.0)])
        with pytest.raises(InvalidSnapshot, match="record #1"):
            load_snapshots(path)

    def test_wrong_layout(self, tmp_path):
        with pytest.raises(InvalidSnapshot, match="array"):
            load_snapshots(_write(tmp_path, {"status": "ok"}))

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshots(tmp_path / "missing.json")

    def test_bad_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_snapshots(path)
