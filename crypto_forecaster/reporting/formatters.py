"""
ASCII terminal formatters for CLI reporting commands.

All formatters accept in-memory models and return plain multi-line strings
suitable for ``typer.echo()``. No third-party dependencies.

Recommendations table
---------------------
One row per ranked result::

    Rank  Symbol      Price  Rec        Score  Trend  Mom.  Risk   1w Target  Conf.
    -------------------------------------------------------------------------------
       1  BTC    $64.20K    Buy         100.0   95.0  65.0  50.0     $65.10K   88.4

followed, per asset, by its reasoning and risk-factor lines.
"""

from __future__ import annotations

from typing import Sequence

from crypto_forecaster.models.forecast import RecommendationResult
from crypto_forecaster.reporting.summary import MarketSummary

_CURRENCY_TIERS: tuple[tuple[float, str], ...] = (
    (1e12, "T"),
    (1e9,  "B"),
    (1e6,  "M"),
    (1e3,  "K"),
)


def format_currency(value: float) -> str:
    """Compact USD string: ``$1.23T``, ``$4.56B``, ``$7.89M``, ``$1.00K``, ``$12.34``.

    Sub-dollar values use 6 decimals (``$0.012345``); sub-micro values switch
    to scientific notation (``$1.20e-07``).
    """
    for threshold, suffix in _CURRENCY_TIERS:
        if value >= threshold:
            return f"${value / threshold:.2f}{suffix}"
    if 0 < value < 1e-6:
        return f"${value:.2e}"
    if 0 < value < 1:
        return f"${value:.6f}"
    return f"${value:.2f}"


def format_percent(value: float) -> str:
    return f"{value:+.2f}%"


# ── Recommendations ───────────────────────────────────────────────────────────


def format_recommendations_table(
    results: Sequence[RecommendationResult],
    show_details: bool = True,
) -> str:
    """Format ranked recommendations as an ASCII table.

    Args:
        results:      Ranked results (already in display order).
        show_details: Append reasoning / risk lines under each asset.

    Returns:
        Multi-line string.
    """
    lines: list[str] = []
    lines.append("")
    lines.append("=== Top Recommendations ===")

    if not results:
        lines.append("")
        lines.append("  (no recommendations -- no snapshots were evaluated)")
        return "\n".join(lines)

    header = (
        f"  {'Rank':>4}  {'Symbol':<8}  {'Price':>11}  {'Rec':<11}  "
        f"{'Score':>5}  {'Trend':>5}  {'Mom.':>5}  {'Risk':>5}  "
        f"{'1w Target':>11}  {'Conf.':>5}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    for rank, r in enumerate(results, start=1):
        lines.append(
            f"  {rank:>4}  {r.snapshot.symbol[:8]:<8}  "
            f"{format_currency(r.snapshot.price):>11}  {r.recommendation:<11}  "
            f"{r.recommendation_score:>5.1f}  {r.trend_score:>5.1f}  "
            f"{r.momentum_score:>5.1f}  {r.risk_score:>5.1f}  "
            f"{format_currency(r.forecast.short_term):>11}  "
            f"{r.forecast.confidence:>5.1f}"
        )

    if show_details:
        for r in results:
            lines.append("")
            lines.append(f"  {r.snapshot.symbol} ({r.snapshot.name})")
            ta = r.technical_analysis
            lines.append(
                f"    Trend {ta.trend} | RSI {ta.rsi:.1f} | "
                f"Support {format_currency(ta.support_level)} | "
                f"Resistance {format_currency(ta.resistance_level)}"
            )
            if r.forecast.kind == "rule_based":
                lines.append(f"    Forecast: rule-based ({r.forecast.reason})")
            else:
                lines.append(
                    f"    Forecast: 1w {format_currency(r.forecast.short_term)} | "
                    f"1m {format_currency(r.forecast.medium_term)} | "
                    f"3m {format_currency(r.forecast.long_term)} | "
                    f"trend strength {r.forecast.trend_strength:.1f}"
                )
            for reason in r.reasoning:
                lines.append(f"    + {reason}")
            for risk in r.risk_factors:
                lines.append(f"    ! {risk}")

    return "\n".join(lines)


# ── Market summary ────────────────────────────────────────────────────────────


def format_market_summary(summary: MarketSummary) -> str:
    """Format totals and top movers."""
    lines: list[str] = []
    lines.append("")
    lines.append("=== Market Summary ===")
    lines.append(f"  Assets:           {summary.asset_count}")
    lines.append(f"  Total market cap: {format_currency(summary.total_market_cap)}")
    lines.append(f"  Total 24h volume: {format_currency(summary.total_volume_24h)}")

    for title, movers in (
        ("Top gainers (24h)", summary.top_gainers),
        ("Top losers (24h)", summary.top_losers),
    ):
        lines.append("")
        lines.append(f"  {title}:")
        if not movers:
            lines.append("    (none)")
        for s in movers:
            lines.append(
                f"    {s.symbol:<8}  {format_currency(s.price):>11}  "
                f"{format_percent(s.percent_change_24h):>9}"
            )

    return "\n".join(lines)
