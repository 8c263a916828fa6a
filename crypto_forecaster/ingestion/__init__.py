"""
Snapshot ingestion -- maps saved provider records onto ``AssetSnapshot``.

Modules
-------
snapshot : parse_snapshot() / load_snapshots() for CoinMarketCap, CoinGecko,
           and flat JSON records.
"""
