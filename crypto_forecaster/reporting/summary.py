"""
Market-wide summary across a batch of snapshots.

``summarize_market()`` totals market cap and 24h volume and picks the largest
24h gainers and losers. It reads snapshots only; no forecasting is involved.
"""

from __future__ import annotations

from typing import Sequence

from pydantic import BaseModel, ConfigDict

from crypto_forecaster.models.asset import AssetSnapshot


class MarketSummary(BaseModel):
    """Totals and 24h movers for a batch of snapshots."""

    model_config = ConfigDict(frozen=True)

    asset_count: int
    total_market_cap: float
    total_volume_24h: float
    top_gainers: list[AssetSnapshot]
    top_losers: list[AssetSnapshot]


def summarize_market(snapshots: Sequence[AssetSnapshot], n: int = 3) -> MarketSummary:
    """Summarize ``snapshots``.

    Gainers are sorted by ``percent_change_24h`` descending, losers ascending;
    ties keep input order. An empty batch yields zero totals and no movers.
    """
    gainers = sorted(snapshots, key=lambda s: -s.percent_change_24h)
    losers = sorted(snapshots, key=lambda s: s.percent_change_24h)
    return MarketSummary(
        asset_count=len(snapshots),
        total_market_cap=sum(s.market_cap for s in snapshots),
        total_volume_24h=sum(s.volume_24h for s in snapshots),
        top_gainers=gainers[:n],
        top_losers=losers[:n],
    )
