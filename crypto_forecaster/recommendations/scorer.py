"""
Recommendation scoring: snapshot -> four scores, a label, and narratives.

Scores (each starts at 50, clamped to 0-100)
--------------------------------------------
recommendation_score : momentum direction, rank tier, volume tier, scarcity.
trend_score          : 1h / 24h / 7d direction plus strong-move bonuses.
momentum_score       : volume tier plus large 24h / 7d moves.
risk_score           : 24h volatility tier, market-cap tier, infinite supply.

Each score is an ordered table of ``ScoreRule`` entries. Tiered rules
(rank, volume, volatility, market cap) use mutually exclusive predicates so
at most one tier fires.

Label
-----
    avg = (recommendation + trend + momentum + (100 - risk)) / 4
    >= 80 Strong Buy | >= 65 Buy | >= 45 Hold | >= 30 Sell | else Strong Sell

Narratives
----------
``REASONING_RULES`` and ``RISK_FACTOR_RULES`` are ordered ``NarrativeRule`` tables.
They are evaluated in table order and every matching rule contributes one
message; no match, no message.

Technical analysis
------------------
A display-facing summary computed from the snapshot alone:
    rsi        = clamp(50 + 2 * pct_24h + 0.5 * pct_7d, 0, 100)
    trend      = Bullish if 24h > 5 and 7d > 10; Bearish if 24h < -5 and
                 7d < -10; else Neutral
    support    = price * 0.85;  resistance = price * 1.15
    volatility = |pct_24h| + |pct_7d| / 7
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Sequence

from crypto_forecaster.models.asset import AssetSnapshot
from crypto_forecaster.models.forecast import (
    RecommendationLabel,
    TechnicalAnalysis,
    TrendLabel,
)

_BASE_SCORE = 50.0


@dataclass(frozen=True)
class ScoreRule:
    """Adds ``points`` to a score when ``predicate(snapshot)`` holds."""

    name:      str
    predicate: Callable[[AssetSnapshot], bool]
    points:    float


@dataclass(frozen=True)
class ScoreCard:
    """The four scores for one snapshot."""

    recommendation_score: float
    trend_score:          float
    momentum_score:       float
    risk_score:           float


@dataclass(frozen=True)
class NarrativeContext:
    """Inputs visible to narrative rules: the snapshot and its scores."""

    snapshot: AssetSnapshot
    scores:   ScoreCard


@dataclass(frozen=True)
class NarrativeRule:
    """Emits ``message(ctx)`` when ``predicate(ctx)`` holds."""

    name:      str
    predicate: Callable[[NarrativeContext], bool]
    message:   Callable[[NarrativeContext], str]


def _has_scarcity(s: AssetSnapshot) -> bool:
    return bool(s.max_supply) and s.circulating_supply < s.max_supply * 0.8


# ── Score tables ──────────────────────────────────────────────────────────────

RECOMMENDATION_SCORE_RULES: tuple[ScoreRule, ...] = (
    ScoreRule("positive_24h",    lambda s: s.percent_change_24h > 0,    10),
    ScoreRule("positive_7d",     lambda s: s.percent_change_7d > 0,     15),
    ScoreRule("strong_24h",      lambda s: s.percent_change_24h > 5,     5),
    ScoreRule("strong_7d",       lambda s: s.percent_change_7d > 10,    10),
    ScoreRule("rank_top_10",     lambda s: s.rank <= 10,                15),
    ScoreRule("rank_top_25",     lambda s: 10 < s.rank <= 25,           10),
    ScoreRule("rank_top_50",     lambda s: 25 < s.rank <= 50,            5),
    ScoreRule("volume_high",     lambda s: s.volume_24h > 1e9,          10),
    ScoreRule("volume_medium",   lambda s: 1e8 < s.volume_24h <= 1e9,    5),
    ScoreRule("supply_scarcity", _has_scarcity,                          5),
)

TREND_SCORE_RULES: tuple[ScoreRule, ...] = (
    ScoreRule("positive_1h",  lambda s: s.percent_change_1h > 0,   5),
    ScoreRule("positive_24h", lambda s: s.percent_change_24h > 0, 10),
    ScoreRule("positive_7d",  lambda s: s.percent_change_7d > 0,  15),
    ScoreRule("strong_24h",   lambda s: s.percent_change_24h > 5, 10),
    ScoreRule("strong_7d",    lambda s: s.percent_change_7d > 15, 10),
)

MOMENTUM_SCORE_RULES: tuple[ScoreRule, ...] = (
    ScoreRule("volume_very_high", lambda s: s.volume_24h > 5e9,         20),
    ScoreRule("volume_high",      lambda s: 1e9 < s.volume_24h <= 5e9,  15),
    ScoreRule("volume_medium",    lambda s: 1e8 < s.volume_24h <= 1e9,  10),
    ScoreRule("surge_24h",        lambda s: s.percent_change_24h > 10,  15),
    ScoreRule("surge_7d",         lambda s: s.percent_change_7d > 20,   15),
)

RISK_SCORE_RULES: tuple[ScoreRule, ...] = (
    ScoreRule("volatility_high",   lambda s: abs(s.percent_change_24h) > 20,       20),
    ScoreRule("volatility_medium", lambda s: 10 < abs(s.percent_change_24h) <= 20, 10),
    ScoreRule("small_cap",         lambda s: s.market_cap < 1e9,                   15),
    ScoreRule("mid_cap",           lambda s: 1e9 <= s.market_cap < 1e10,           10),
    ScoreRule("infinite_supply",   lambda s: s.infinite_supply,                    10),
)


def apply_rules(snapshot: AssetSnapshot, rules: Sequence[ScoreRule]) -> float:
    """Base 50 plus the points of every matching rule, clamped to 0-100."""
    score = _BASE_SCORE + sum(r.points for r in rules if r.predicate(snapshot))
    return _clamp(score, 0.0, 100.0)


def compute_scores(snapshot: AssetSnapshot) -> ScoreCard:
    """Compute all four scores for ``snapshot``."""
    return ScoreCard(
        recommendation_score=apply_rules(snapshot, RECOMMENDATION_SCORE_RULES),
        trend_score=apply_rules(snapshot, TREND_SCORE_RULES),
        momentum_score=apply_rules(snapshot, MOMENTUM_SCORE_RULES),
        risk_score=apply_rules(snapshot, RISK_SCORE_RULES),
    )


def determine_recommendation(scores: ScoreCard) -> RecommendationLabel:
    """Map the four scores to a discrete label.

    Thresholds on the blended average (risk inverted):
        >= 80 Strong Buy, >= 65 Buy, >= 45 Hold, >= 30 Sell, else Strong Sell.
    """
    avg = (
        scores.recommendation_score
        + scores.trend_score
        + scores.momentum_score
        + (100 - scores.risk_score)
    ) / 4
    if avg >= 80:
        return "Strong Buy"
    if avg >= 65:
        return "Buy"
    if avg >= 45:
        return "Hold"
    if avg >= 30:
        return "Sell"
    return "Strong Sell"


# ── Narrative tables ──────────────────────────────────────────────────────────

REASONING_RULES: tuple[NarrativeRule, ...] = (
    # Performance
    NarrativeRule(
        "positive_24h",
        lambda c: c.snapshot.percent_change_24h > 0,
        lambda c: (
            f"Strong 24h performance with "
            f"{c.snapshot.percent_change_24h:.2f}% gain"
        ),
    ),
    NarrativeRule(
        "positive_7d",
        lambda c: c.snapshot.percent_change_7d > 0,
        lambda c: (
            f"Positive weekly momentum with "
            f"{c.snapshot.percent_change_7d:.2f}% growth"
        ),
    ),
    # Market position
    NarrativeRule(
        "rank_top_10",
        lambda c: c.snapshot.rank <= 10,
        lambda c: "Top 10 asset by market cap - established market leader",
    ),
    NarrativeRule(
        "rank_top_25",
        lambda c: 10 < c.snapshot.rank <= 25,
        lambda c: "Top 25 asset - strong market presence",
    ),
    # Volume
    NarrativeRule(
        "volume_high",
        lambda c: c.snapshot.volume_24h > 1e9,
        lambda c: "High trading volume indicates strong market interest",
    ),
    # Supply
    NarrativeRule(
        "supply_scarcity",
        lambda c: _has_scarcity(c.snapshot),
        lambda c: "Limited circulating supply relative to max supply - scarcity factor",
    ),
    # Score thresholds
    NarrativeRule(
        "high_recommendation_score",
        lambda c: c.scores.recommendation_score > 70,
        lambda c: "High overall recommendation score based on multiple factors",
    ),
    NarrativeRule(
        "high_trend_score",
        lambda c: c.scores.trend_score > 70,
        lambda c: "Strong positive trend indicators",
    ),
    NarrativeRule(
        "high_momentum_score",
        lambda c: c.scores.momentum_score > 70,
        lambda c: "High momentum with strong volume and price action",
    ),
)

RISK_FACTOR_RULES: tuple[NarrativeRule, ...] = (
    NarrativeRule(
        "high_volatility",
        lambda c: abs(c.snapshot.percent_change_24h) > 15,
        lambda c: (
            f"High volatility - 24h change of "
            f"{c.snapshot.percent_change_24h:.2f}%"
        ),
    ),
    NarrativeRule(
        "small_cap",
        lambda c: c.snapshot.market_cap < 1e9,
        lambda c: "Small market cap - higher risk of price manipulation",
    ),
    NarrativeRule(
        "infinite_supply",
        lambda c: c.snapshot.infinite_supply,
        lambda c: "Infinite supply - potential for inflation over time",
    ),
    NarrativeRule(
        "recent_decline",
        lambda c: c.snapshot.percent_change_24h < -10,
        lambda c: "Recent significant decline - potential bearish momentum",
    ),
    NarrativeRule(
        "high_risk_score",
        lambda c: c.scores.risk_score > 70,
        lambda c: "High overall risk score - consider position sizing carefully",
    ),
)


def collect_narratives(
    ctx: NarrativeContext,
    rules: Sequence[NarrativeRule],
) -> list[str]:
    """Messages of every matching rule, in table order."""
    return [r.message(ctx) for r in rules if r.predicate(ctx)]


def build_reasoning(snapshot: AssetSnapshot, scores: ScoreCard) -> list[str]:
    return collect_narratives(NarrativeContext(snapshot, scores), REASONING_RULES)


def build_risk_factors(snapshot: AssetSnapshot, scores: ScoreCard) -> list[str]:
    return collect_narratives(NarrativeContext(snapshot, scores), RISK_FACTOR_RULES)


# ── Technical analysis ────────────────────────────────────────────────────────


def classify_trend(snapshot: AssetSnapshot) -> TrendLabel:
    if snapshot.percent_change_24h > 5 and snapshot.percent_change_7d > 10:
        return "Bullish"
    if snapshot.percent_change_24h < -5 and snapshot.percent_change_7d < -10:
        return "Bearish"
    return "Neutral"


def technical_analysis(snapshot: AssetSnapshot) -> TechnicalAnalysis:
    """Snapshot-only technical summary (see module docstring)."""
    rsi = 50 + snapshot.percent_change_24h * 2 + snapshot.percent_change_7d * 0.5
    return TechnicalAnalysis(
        rsi=_clamp(rsi, 0.0, 100.0),
        trend=classify_trend(snapshot),
        support_level=snapshot.price * 0.85,
        resistance_level=snapshot.price * 1.15,
        volatility=abs(snapshot.percent_change_24h) + abs(snapshot.percent_change_7d) / 7,
    )


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))
