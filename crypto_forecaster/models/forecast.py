"""
Forecast and recommendation output models.

``ModelScoreSet``        -- per-model signed strengths from the ensemble.
``EnsembleForecast``     -- forecast produced by the five-model ensemble.
``RuleBasedForecast``    -- trend-driven fallback when the ensemble cannot run.
``ForecastResult``       -- tagged union of the two (discriminator ``kind``).
``TechnicalAnalysis``    -- display-facing summary derived from the snapshot.
``RecommendationResult`` -- everything produced for one snapshot.

All models are frozen. A ``ForecastResult`` is always exactly one of the two
variants, never a partially-filled structure.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from crypto_forecaster.models.asset import AssetSnapshot
from crypto_forecaster.models.market import MarketSentiment, TechnicalIndicatorSet

RecommendationLabel = Literal["Strong Buy", "Buy", "Hold", "Sell", "Strong Sell"]
TrendLabel = Literal["Bullish", "Bearish", "Neutral"]

MIN_CONFIDENCE = 60.0
MAX_CONFIDENCE = 95.0


class ModelScoreSet(BaseModel):
    """Signed strength per ensemble member.

    Raw values lie in [-1, 1]; ``scaled()`` produces the x100 display form
    stored on ``EnsembleForecast``.
    """

    model_config = ConfigDict(frozen=True)

    lstm: float
    arima: float
    random_forest: float
    linear_regression: float
    sentiment: float

    def as_dict(self) -> dict[str, float]:
        return {
            "lstm":              self.lstm,
            "arima":             self.arima,
            "random_forest":     self.random_forest,
            "linear_regression": self.linear_regression,
            "sentiment":         self.sentiment,
        }

    def scaled(self, factor: float = 100.0, ndigits: int = 1) -> "ModelScoreSet":
        return ModelScoreSet(
            **{k: round(v * factor, ndigits) for k, v in self.as_dict().items()}
        )


class EnsembleForecast(BaseModel):
    """Price targets from the weighted model ensemble.

    Attributes:
        short_term: ~1 week price target.
        medium_term: ~1 month price target.
        long_term: ~3 month price target.
        confidence: 60-95; higher when the models agree.
        trend_strength: ``|ensemble_strength| * 100``, 0-100.
        volatility_forecast: Variance of the model scores x100.
        ensemble_strength: Weighted sum of raw model scores, in [-1, 1].
        model_scores: Per-model scores scaled x100.
        indicators: Technical indicators the models consumed.
        sentiment: Sentiment signals the models consumed.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["ensemble"] = "ensemble"
    short_term: float
    medium_term: float
    long_term: float
    confidence: float
    trend_strength: float
    volatility_forecast: float
    ensemble_strength: float
    model_scores: ModelScoreSet
    indicators: TechnicalIndicatorSet
    sentiment: MarketSentiment

    @field_validator("confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not MIN_CONFIDENCE <= v <= MAX_CONFIDENCE:
            raise ValueError(
                f"confidence must be in [{MIN_CONFIDENCE}, {MAX_CONFIDENCE}], got {v}."
            )
        return v

    @field_validator("trend_strength")
    @classmethod
    def validate_trend_strength(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"trend_strength must be in [0, 100], got {v}.")
        return v

    @field_validator("volatility_forecast")
    @classmethod
    def validate_volatility(cls, v: float) -> float:
        if v < 0:
            raise ValueError(f"volatility_forecast must be non-negative, got {v}.")
        return v


class RuleBasedForecast(BaseModel):
    """Fallback price targets derived from the snapshot's trend label.

    Attributes:
        short_term / medium_term / long_term: Price targets.
        confidence: Always the floor confidence (60).
        trend: Trend label the targets were derived from.
        reason: Why the ensemble forecast was not used.
    """

    model_config = ConfigDict(frozen=True)

    kind: Literal["rule_based"] = "rule_based"
    short_term: float
    medium_term: float
    long_term: float
    confidence: float = MIN_CONFIDENCE
    trend: TrendLabel
    reason: str


ForecastResult = Annotated[
    Union[EnsembleForecast, RuleBasedForecast],
    Field(discriminator="kind"),
]


class TechnicalAnalysis(BaseModel):
    """Snapshot-level technical summary shown alongside the recommendation.

    ``rsi`` here is a display approximation from the 24h/7d changes, not the
    14-period RSI in ``TechnicalIndicatorSet``.
    """

    model_config = ConfigDict(frozen=True)

    rsi: float
    trend: TrendLabel
    support_level: float
    resistance_level: float
    volatility: float


class RecommendationResult(BaseModel):
    """Complete evaluation output for one snapshot."""

    model_config = ConfigDict(frozen=True)

    snapshot: AssetSnapshot
    recommendation_score: float
    trend_score: float
    momentum_score: float
    risk_score: float
    recommendation: RecommendationLabel
    reasoning: list[str]
    risk_factors: list[str]
    technical_analysis: TechnicalAnalysis
    forecast: ForecastResult

    @field_validator("recommendation_score", "trend_score", "momentum_score", "risk_score")
    @classmethod
    def validate_score_range(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"scores must be in [0, 100], got {v}.")
        return v
