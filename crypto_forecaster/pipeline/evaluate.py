"""
Forecast engine: runs the full per-snapshot pipeline.

Per snapshot::

    check_snapshot ─┬─> synthesize_history ─> compute_indicators ─┐
                    │                      └─> estimate_sentiment ─┴─> run_ensemble ─> aggregate
                    └─> compute_scores ─> determine_recommendation / narratives / technical_analysis

The engine holds only immutable configuration. All randomness comes from the
``random.Random`` passed to ``evaluate()``, so a seeded generator reproduces
the same ``RecommendationResult`` exactly.

Forecast variant
----------------
The ensemble forecast is used whenever it can be computed. When the history
window is too short for the indicators (``InsufficientHistory``) or the
ensemble yields an unusable target (non-finite or non-positive price), the
engine logs a warning and returns a ``RuleBasedForecast`` instead. Invalid
snapshots raise ``InvalidSnapshot`` before any work starts.

Batch evaluation
----------------
``evaluate_many()`` fans snapshots out over a thread pool. Each snapshot gets
its own generator seeded from ``"{seed}:{snapshot.id}"``, so results do not
depend on scheduling order or on which other snapshots are in the batch.
"""

from __future__ import annotations

import logging
import math
import random
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional, Sequence

from crypto_forecaster.config import EngineConfig, RankingConfig
from crypto_forecaster.errors import InsufficientHistory
from crypto_forecaster.features.history import synthesize_history
from crypto_forecaster.features.indicators import compute_indicators
from crypto_forecaster.features.sentiment import estimate_sentiment
from crypto_forecaster.ml.aggregator import aggregate, rule_based_forecast
from crypto_forecaster.ml.ensemble import DEFAULT_MODELS, EnsembleMember, run_ensemble
from crypto_forecaster.models.asset import AssetSnapshot, check_snapshot
from crypto_forecaster.models.forecast import (
    EnsembleForecast,
    RecommendationResult,
    RuleBasedForecast,
    TechnicalAnalysis,
)
from crypto_forecaster.recommendations.ranker import rank_recommendations
from crypto_forecaster.recommendations.scorer import (
    build_reasoning,
    build_risk_factors,
    compute_scores,
    determine_recommendation,
    technical_analysis,
)

logger = logging.getLogger(__name__)


class ForecastEngine:
    """Stateless evaluator for asset snapshots.

    Attributes:
        config: Engine parameters (history window, seed, worker count).
        models: Ordered ensemble registry.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        models: Sequence[EnsembleMember] = DEFAULT_MODELS,
    ) -> None:
        self.config = config or EngineConfig()
        self.models = tuple(models)

    def evaluate(
        self,
        snapshot: AssetSnapshot,
        rng: random.Random,
        as_of: Optional[datetime] = None,
    ) -> RecommendationResult:
        """Evaluate one snapshot.

        Args:
            snapshot: Asset to evaluate.
            rng:      Random source for the synthetic history and sentiment.
            as_of:    Timestamp of the newest synthetic point; see
                      ``synthesize_history``.

        Raises:
            InvalidSnapshot: If the snapshot fails validation.
        """
        check_snapshot(snapshot)

        scores = compute_scores(snapshot)
        analysis = technical_analysis(snapshot)
        forecast = self._forecast(snapshot, analysis, rng, as_of)

        result = RecommendationResult(
            snapshot=snapshot,
            recommendation_score=scores.recommendation_score,
            trend_score=scores.trend_score,
            momentum_score=scores.momentum_score,
            risk_score=scores.risk_score,
            recommendation=determine_recommendation(scores),
            reasoning=build_reasoning(snapshot, scores),
            risk_factors=build_risk_factors(snapshot, scores),
            technical_analysis=analysis,
            forecast=forecast,
        )
        logger.debug(
            "Evaluated %s | recommendation=%s | score=%.1f | forecast=%s",
            snapshot.symbol, result.recommendation,
            result.recommendation_score, forecast.kind,
            extra={"symbol": snapshot.symbol},
        )
        return result

    def evaluate_many(
        self,
        snapshots: Sequence[AssetSnapshot],
        seed: Optional[int] = None,
        as_of: Optional[datetime] = None,
    ) -> list[RecommendationResult]:
        """Evaluate a batch concurrently; results keep input order.

        Args:
            snapshots: Assets to evaluate.
            seed:      Base seed; defaults to ``config.seed``. ``None`` means
                       fresh entropy per snapshot.
            as_of:     Shared timestamp for the newest synthetic point.

        Raises:
            InvalidSnapshot: If any snapshot fails validation (checked for
                the whole batch before evaluation starts).
        """
        for snapshot in snapshots:
            check_snapshot(snapshot)

        base_seed = seed if seed is not None else self.config.seed

        def _run(snapshot: AssetSnapshot) -> RecommendationResult:
            return self.evaluate(snapshot, snapshot_rng(base_seed, snapshot), as_of)

        if len(snapshots) <= 1 or self.config.max_workers == 1:
            return [_run(s) for s in snapshots]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
            return list(pool.map(_run, snapshots))

    def recommend(
        self,
        snapshots: Sequence[AssetSnapshot],
        ranking: RankingConfig | None = None,
        seed: Optional[int] = None,
        as_of: Optional[datetime] = None,
    ) -> list[RecommendationResult]:
        """Evaluate ``snapshots`` and return the top-N in display order."""
        ranking = ranking or RankingConfig()
        results = self.evaluate_many(snapshots, seed=seed, as_of=as_of)
        top = rank_recommendations(results, n=ranking.top_n)
        logger.info(
            "Ranked %d snapshot(s); returning top %d", len(results), len(top)
        )
        return top

    # ── Internals ─────────────────────────────────────────────────────────────

    def _forecast(
        self,
        snapshot: AssetSnapshot,
        analysis: TechnicalAnalysis,
        rng: random.Random,
        as_of: Optional[datetime],
    ) -> EnsembleForecast | RuleBasedForecast:
        series = synthesize_history(
            snapshot, rng, days=self.config.history_days, as_of=as_of
        )
        try:
            indicators = compute_indicators(series)
            sentiment = estimate_sentiment(snapshot, series, rng)
            scores = run_ensemble(series, indicators, sentiment, self.models)
            forecast = aggregate(
                snapshot.price,
                scores,
                indicators,
                sentiment,
                weights={m.name: m.weight for m in self.models},
            )
        except InsufficientHistory as exc:
            logger.warning(
                "Ensemble unavailable for %s (%s); using rule-based forecast.",
                snapshot.symbol, exc,
                extra={"symbol": snapshot.symbol},
            )
            return rule_based_forecast(snapshot.price, analysis.trend, str(exc))

        targets = (forecast.short_term, forecast.medium_term, forecast.long_term)
        if not all(math.isfinite(t) and t > 0 for t in targets):
            reason = f"Ensemble produced unusable targets {targets}."
            logger.warning(
                "%s: %s Using rule-based forecast.", snapshot.symbol, reason,
                extra={"symbol": snapshot.symbol},
            )
            return rule_based_forecast(snapshot.price, analysis.trend, reason)

        return forecast


def snapshot_rng(seed: Optional[int], snapshot: AssetSnapshot) -> random.Random:
    """Per-snapshot generator; deterministic for a given ``seed`` and id."""
    if seed is None:
        return random.Random()
    return random.Random(f"{seed}:{snapshot.id}")
