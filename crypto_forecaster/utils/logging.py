"""
Logging setup for the crypto forecaster.

Library modules only ever do ``logger = logging.getLogger(__name__)``. The CLI
calls ``configure_logging()`` once, before any engine work, and that is the
only place handlers are installed.

Output goes to stderr (and optionally a file) so stdout carries nothing but
command output. Timestamps are UTC.

Text format::

    2025-01-15T12:00:00Z [WARNING] crypto_forecaster.pipeline.evaluate: ...

JSON format (``[logging] json_format = true``), one object per line::

    {"ts": "2025-01-15T12:00:00Z", "level": "WARNING",
     "logger": "crypto_forecaster.pipeline.evaluate", "msg": "...", "symbol": "BTC"}

Fields passed with ``extra=`` (the engine sets ``symbol``) appear at the top
level of the JSON object.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from crypto_forecaster.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Attributes every LogRecord carries; anything else came in via extra=.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime"}


class _UtcFormatter(logging.Formatter):
    converter = time.gmtime


class _JsonFormatter(_UtcFormatter):
    """One JSON object per record: ``ts``, ``level``, ``logger``, ``msg``,
    ``exc`` when an exception is attached, then any ``extra=`` fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record, LOG_DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        entry.update(_extra_fields(record))
        return json.dumps(entry, default=str)


def _extra_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in vars(record).items()
        if key not in _RESERVED_ATTRS and not key.startswith("_")
    }


def _make_formatter(json_format: bool) -> logging.Formatter:
    if json_format:
        return _JsonFormatter()
    return _UtcFormatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)


def configure_logging(config: "LoggingConfig", debug: bool = False) -> None:
    """Install root handlers from a ``LoggingConfig``.

    Args:
        config: Level, optional log file, and text/JSON choice.
        debug:  Force DEBUG regardless of ``config.level`` (``AppConfig.debug``).

    Replaces any handlers already on the root logger.
    """
    level = logging.DEBUG if debug else logging.getLevelName(config.level)
    formatter = _make_formatter(config.json_format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
