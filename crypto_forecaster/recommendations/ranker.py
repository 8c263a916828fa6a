"""
Recommendation ranker: orders evaluated snapshots for display.

Ordering
--------
    1. recommendation_score descending
    2. trend_score descending
    3. input order (the sort is stable)

The top ``n`` (default 5) are returned. Optional ``labels`` filtering keeps
only the requested recommendation labels, e.g. ``["Buy", "Strong Buy"]``.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from crypto_forecaster.models.forecast import RecommendationResult

DEFAULT_TOP_N = 5


def rank_recommendations(
    results: Iterable[RecommendationResult],
    n: int = DEFAULT_TOP_N,
    labels: Sequence[str] | None = None,
) -> list[RecommendationResult]:
    """Return the top-``n`` results in display order.

    Args:
        results: Evaluated snapshots, in input order.
        n:       Max results returned. ``0`` returns an empty list.
        labels:  Optional filter on the recommendation label.

    Returns:
        At most ``n`` results sorted by recommendation then trend score.
    """
    pool = [r for r in results if labels is None or r.recommendation in labels]
    ordered = sorted(
        pool,
        key=lambda r: (-r.recommendation_score, -r.trend_score),
    )
    return ordered[: max(n, 0)]
