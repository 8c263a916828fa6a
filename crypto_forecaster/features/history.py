"""
Synthetic daily history from a single snapshot.

Only a point-in-time snapshot is available, but the indicators need a price
series. ``synthesize_history()`` fabricates one: a ``days + 1`` point daily
series ending at ``as_of`` whose shape is anchored on the snapshot's own 7-day
change, plus bounded noise and a weekly cycle.

Per point, for day offset ``i`` (``days`` = oldest, ``0`` = newest)::

    trend    = 1 + (pct_7d / 100) * (7 - min(i, 7)) / 7
    noise    = 1 + (u1 - 0.5) * 0.1          # +/-5%
    seasonal = 1 + sin(i / 7) * 0.02         # +/-2%
    price    = current_price * trend * noise * seasonal
    volume   = current_volume * (0.8 + u2 * 0.4)
    mcap     = price * circulating_supply

``u1`` and ``u2`` are drawn from the injected ``random.Random`` in that order,
oldest point first, so a seeded generator always yields the same series.

Values are rounded to display precision: price 6 dp (sub-micro prices keep
full precision so they never round to 0), volume and market cap 0 dp,
percent change 2 dp.
"""

from __future__ import annotations

import logging
import math
import random
from datetime import datetime
from typing import Optional

from crypto_forecaster.models.asset import AssetSnapshot
from crypto_forecaster.models.market import HistoricalPoint
from crypto_forecaster.utils.time_utils import days_before, ensure_utc, utcnow

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_DAYS = 90

_NOISE_AMPLITUDE = 0.1
_SEASONAL_AMPLITUDE = 0.02
_SEASONAL_PERIOD = 7.0
_TREND_WINDOW = 7
_VOLUME_FLOOR = 0.8
_VOLUME_SPAN = 0.4


def synthesize_history(
    snapshot: AssetSnapshot,
    rng: random.Random,
    days: int = DEFAULT_HISTORY_DAYS,
    as_of: Optional[datetime] = None,
) -> list[HistoricalPoint]:
    """Fabricate a chronological daily series for ``snapshot``.

    Args:
        snapshot: Source snapshot (not mutated).
        rng:      Random source for the noise and volume draws.
        days:     Look-back window; the series has ``days + 1`` points.
        as_of:    Timestamp of the newest point. Defaults to
                  ``snapshot.last_updated``, else the current UTC time.
                  Prices and volumes depend only on ``rng``; pass ``as_of``
                  (or set ``last_updated``) when timestamps must repeat too.

    Returns:
        ``days + 1`` points ordered oldest to newest.

    Raises:
        ValueError: If ``days < 1``.
    """
    if days < 1:
        raise ValueError(f"days must be >= 1, got {days}.")

    end = ensure_utc(as_of or snapshot.last_updated or utcnow())

    supply = snapshot.circulating_supply
    if supply <= 0:
        logger.warning(
            "Snapshot %s has non-positive circulating_supply (%s); "
            "synthetic market_cap set to 0.",
            snapshot.symbol, supply,
            extra={"symbol": snapshot.symbol},
        )

    points: list[HistoricalPoint] = []
    prev_price: float | None = None

    for i in range(days, -1, -1):
        trend_factor = (
            1 + (snapshot.percent_change_7d / 100)
            * (_TREND_WINDOW - min(i, _TREND_WINDOW)) / _TREND_WINDOW
        )
        noise_factor = 1 + (rng.random() - 0.5) * _NOISE_AMPLITUDE
        seasonal_factor = 1 + math.sin(i / _SEASONAL_PERIOD) * _SEASONAL_AMPLITUDE

        price = snapshot.price * trend_factor * noise_factor * seasonal_factor
        volume = snapshot.volume_24h * (_VOLUME_FLOOR + rng.random() * _VOLUME_SPAN)
        market_cap = price * supply if supply > 0 else 0.0

        if prev_price is None:
            change = snapshot.percent_change_24h
        else:
            change = (price - prev_price) / prev_price * 100

        points.append(
            HistoricalPoint(
                timestamp=days_before(end, i),
                price=round(price, 6) or price,
                volume=round(volume),
                market_cap=round(market_cap),
                price_change_24h=round(change, 2),
            )
        )
        prev_price = price

    logger.debug(
        "Synthesized %d points for %s (last price %.6f)",
        len(points), snapshot.symbol, points[-1].price,
    )
    return points
