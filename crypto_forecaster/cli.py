"""
Crypto Forecaster -- CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action.
  5. Report result to stdout.

Install and run::

    pip install -e .
    crypto-forecaster --help
    crypto-forecaster validate-config
    crypto-forecaster evaluate --file data/listings.json --seed 42
    crypto-forecaster evaluate --file data/listings.json --json --output out.json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="crypto-forecaster",
    help="Crypto asset forecaster -- technical indicators, model ensemble, recommendations.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from pydantic import ValidationError

    from crypto_forecaster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    """Install log handlers; ``config.debug`` forces DEBUG."""
    from crypto_forecaster.utils.logging import configure_logging
    configure_logging(config.logging, debug=config.debug)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Also lists the ensemble members and their weights. Exits with code 1 if
    the config fails validation.
    """
    from crypto_forecaster.ml.ensemble import DEFAULT_MODELS

    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  History days:     {config.engine.history_days}")
    typer.echo(f"  Seed:             {config.engine.seed}")
    typer.echo(f"  Max workers:      {config.engine.max_workers}")
    typer.echo(f"  Top N:            {config.ranking.top_n}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")
    typer.echo("")
    typer.echo("  Ensemble models:")
    for member in DEFAULT_MODELS:
        typer.echo(f"    {member.name:<18} weight {member.weight:.2f}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("evaluate")
def evaluate(
    snapshots_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="JSON file of snapshot records (CoinMarketCap, CoinGecko, or flat).",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Random seed for reproducible output. Overrides config.engine.seed.",
    ),
    top_n: Optional[int] = typer.Option(
        None,
        "--top-n",
        min=1,
        help="Number of recommendations to show. Overrides config.ranking.top_n.",
    ),
    days: Optional[int] = typer.Option(
        None,
        "--days",
        min=1,
        help="Synthetic history window in days. Overrides config.engine.history_days.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the ranked recommendations as JSON instead of a table.",
    ),
    output: Optional[str] = typer.Option(
        None,
        "--output",
        "-o",
        help="Also write the ranked recommendations to this JSON file.",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Evaluate every snapshot in a file and print the top recommendations.

    \b
    Steps:
      1. Load and validate snapshot records.
      2. Synthesize history, compute indicators, run the model ensemble.
      3. Score, label, and rank; print the top N plus a market summary.
    """
    from crypto_forecaster.errors import InvalidSnapshot
    from crypto_forecaster.ingestion.snapshot import load_snapshots
    from crypto_forecaster.pipeline.evaluate import ForecastEngine
    from crypto_forecaster.reporting.export import (
        recommendations_payload,
        write_recommendations_json,
    )
    from crypto_forecaster.reporting.formatters import (
        format_market_summary,
        format_recommendations_table,
    )
    from crypto_forecaster.reporting.summary import summarize_market

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(snapshots_file)
    if not path.exists():
        typer.echo(f"[ERROR] Snapshots file not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        snapshots = load_snapshots(path)
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)
    except InvalidSnapshot as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    engine_cfg = config.engine
    if days is not None:
        engine_cfg = engine_cfg.model_copy(update={"history_days": days})
    ranking_cfg = config.ranking
    if top_n is not None:
        ranking_cfg = ranking_cfg.model_copy(update={"top_n": top_n})

    engine = ForecastEngine(engine_cfg)
    top = engine.recommend(snapshots, ranking=ranking_cfg, seed=seed)

    if output:
        write_recommendations_json(top, Path(output))

    if as_json:
        typer.echo(json.dumps(recommendations_payload(top), indent=2, default=str))
        return

    typer.echo(format_recommendations_table(top))
    typer.echo(format_market_summary(summarize_market(snapshots, ranking_cfg.market_movers)))
    typer.echo("")
    typer.echo(f"[OK] Evaluated {len(snapshots)} snapshot(s).")


if __name__ == "__main__":
    app()
