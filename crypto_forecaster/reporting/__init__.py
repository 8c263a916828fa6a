"""
crypto_forecaster.reporting -- Summaries, terminal formatting, and export.

Modules:
  summary    -- MarketSummary: totals and top 24h movers.
  formatters -- ASCII terminal formatters for Typer CLI commands.
  export     -- JSON export of ranked recommendations.
"""
