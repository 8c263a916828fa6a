"""
Tests for crypto_forecaster/reporting/export.py.

What we test
------------
recommendations_payload(): generated_at format, count, serialised results
  including the forecast discriminator.
write_recommendations_json(): creates parent dirs, writes valid JSON,
  returns the path.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from crypto_forecaster.config import EngineConfig
from crypto_forecaster.pipeline.evaluate import ForecastEngine
from crypto_forecaster.reporting.export import (
    recommendations_payload,
    write_recommendations_json,
)

_GENERATED = datetime(2025, 1, 15, 12, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def results(btc_like, risky_alt, as_of):
    engine = ForecastEngine(EngineConfig(max_workers=1))
    return engine.evaluate_many([btc_like, risky_alt], seed=2, as_of=as_of)


class TestPayload:
    def test_shape(self, results):
        payload = recommendations_payload(results, generated_at=_GENERATED)
        assert payload["generated_at"] == "2025-01-15T12:30:00Z"
        assert payload["count"] == 2
        first = payload["recommendations"][0]
        assert first["snapshot"]["symbol"] == "BTC"
        assert first["recommendation"] == "Buy"
        assert first["forecast"]["kind"] == "ensemble"

    def test_empty(self):
        payload = recommendations_payload([], generated_at=_GENERATED)
        assert payload["count"] == 0
        assert payload["recommendations"] == []


class TestWriteJson:
    def test_writes_file(self, results, tmp_path):
        path = tmp_path / "out" / "recs.json"
        written = write_recommendations_json(results, path, generated_at=_GENERATED)
        assert written == path
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["count"] == 2
        assert [r["snapshot"]["symbol"] for r in data["recommendations"]] == ["BTC", "RUG"]
