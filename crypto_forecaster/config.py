"""
Configuration for the crypto forecaster.

Sources, lowest precedence first:
  1. ``config/default.toml``   -- committed defaults
  2. ``config/local.toml``     -- optional, deep-merged over (1); gitignored
  3. ``.env`` in the project root, loaded into the environment
  4. ``CRYPTO_FORECASTER_*`` environment variables (see ``ENV_OVERRIDES``)

The config file itself can be relocated with ``CRYPTO_FORECASTER_CONFIG``;
an explicit ``--config`` path wins over that.

Entry point: ``load_config(config_path=None) -> AppConfig``. The engine and
the CLI take ``AppConfig`` (or one of its sections); nothing else reads
environment variables.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

# ── Sections ──────────────────────────────────────────────────────────────────


class EngineConfig(BaseModel):
    """Forecast engine parameters.

    ``seed`` fixes the random source so repeated runs are reproducible;
    ``None`` draws fresh entropy on every run.
    """

    model_config = ConfigDict(frozen=True)

    history_days: int = 90
    seed: Optional[int] = None
    max_workers: int = 4

    @field_validator("history_days", "max_workers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v


class RankingConfig(BaseModel):
    """How many recommendations and market movers to report."""

    model_config = ConfigDict(frozen=True)

    top_n: int = 5
    market_movers: int = 3

    @field_validator("top_n", "market_movers")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be >= 1, got {v}.")
        return v


_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = ""
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        if v.upper() not in _LOG_LEVELS:
            raise ValueError(f"log level must be one of {list(_LOG_LEVELS)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Merged configuration. ``debug`` forces DEBUG logging in the CLI."""

    model_config = ConfigDict(frozen=True)

    engine: EngineConfig = EngineConfig()
    ranking: RankingConfig = RankingConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Environment overrides ─────────────────────────────────────────────────────


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# env var -> (path into the raw config dict, converter)
ENV_OVERRIDES: dict[str, tuple[tuple[str, ...], Callable[[str], Any]]] = {
    "CRYPTO_FORECASTER_HISTORY_DAYS": (("engine", "history_days"), int),
    "CRYPTO_FORECASTER_SEED":         (("engine", "seed"), int),
    "CRYPTO_FORECASTER_MAX_WORKERS":  (("engine", "max_workers"), int),
    "CRYPTO_FORECASTER_TOP_N":        (("ranking", "top_n"), int),
    "CRYPTO_FORECASTER_LOG_LEVEL":    (("logging", "level"), str),
    "CRYPTO_FORECASTER_DEBUG":        (("debug",), _as_bool),
}

CONFIG_PATH_ENV = "CRYPTO_FORECASTER_CONFIG"


# ── Loader ────────────────────────────────────────────────────────────────────


def _find_project_root() -> Path:
    """Nearest ancestor of this package holding ``pyproject.toml``."""
    here = Path(__file__).resolve().parent
    for candidate in (here, *here.parents):
        if (candidate / "pyproject.toml").exists():
            return candidate
    return here.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load, merge and validate the application configuration.

    Args:
        config_path: TOML file to load. Falls back to ``$CRYPTO_FORECASTER_CONFIG``,
            then ``<project_root>/config/default.toml``.

    Raises:
        FileNotFoundError: If the resolved config file does not exist.
        pydantic.ValidationError: If a merged value fails validation.
        ValueError: If an environment override cannot be converted.
    """
    root = _find_project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(
        config_path
        or os.environ.get(CONFIG_PATH_ENV)
        or root / "config" / "default.toml"
    )
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    raw = _read_toml(path)
    local = path.parent / "local.toml"
    if local.exists() and local != path:
        raw = _deep_merge(raw, _read_toml(local))

    return _build_app_config(_apply_env_overrides(raw))


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return ``base`` with ``override`` merged in; nested tables merge key by key."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = value
    return merged


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Write every set ``ENV_OVERRIDES`` variable into ``raw``.

    Empty values are ignored.
    """
    for name, (keys, convert) in ENV_OVERRIDES.items():
        value = os.environ.get(name)
        if not value:
            continue
        try:
            converted = convert(value)
        except ValueError as exc:
            raise ValueError(f"{name}={value!r} is not valid: {exc}") from exc

        table = raw
        for key in keys[:-1]:
            table = table.setdefault(key, {})
        table[keys[-1]] = converted
    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map the merged TOML tables onto ``AppConfig``.

    ``[project] debug`` is accepted as the file-level home of ``debug``; a
    top-level ``debug`` key (set by the env override) wins.
    """
    project = raw.get("project", {})
    return AppConfig(
        engine=EngineConfig(**raw.get("engine", {})),
        ranking=RankingConfig(**raw.get("ranking", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
