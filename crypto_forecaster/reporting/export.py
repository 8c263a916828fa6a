"""
JSON export of evaluated recommendations.

The written file mirrors the in-memory models::

    {
      "generated_at": "2026-02-24T15:00:00Z",
      "count": 5,
      "recommendations": [ RecommendationResult.model_dump(mode="json"), ... ]
    }
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Sequence

from crypto_forecaster.models.forecast import RecommendationResult
from crypto_forecaster.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


def recommendations_payload(
    results: Sequence[RecommendationResult],
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON-serialisable report dict for ``results``."""
    ts = generated_at or utcnow()
    return {
        "generated_at": ts.strftime("%Y-%m-%dT%H:%M:%SZ"),
        "count": len(results),
        "recommendations": [r.model_dump(mode="json") for r in results],
    }


def write_recommendations_json(
    results: Sequence[RecommendationResult],
    path: Path,
    generated_at: datetime | None = None,
) -> Path:
    """Write ``results`` to a pretty-printed JSON file.

    Parent directories are created if missing.

    Returns:
        ``path`` as written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = recommendations_payload(results, generated_at)
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendations JSON written: %s (%d rows)", path, len(results))
    return path
