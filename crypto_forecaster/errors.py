"""
Exception hierarchy for the crypto forecaster.

``InvalidSnapshot`` is raised before any computation starts; the pipeline
never partially executes on bad input. ``InsufficientHistory`` is raised by
indicator functions when a series is shorter than the indicator's window.

Division-by-zero situations are not errors: they are guarded inline with
documented fallback values (see ``features.indicators``).
"""

from __future__ import annotations


class ForecasterError(Exception):
    """Base class for all errors raised by ``crypto_forecaster``."""


class InvalidSnapshot(ForecasterError, ValueError):
    """An ``AssetSnapshot`` (or the raw record it came from) failed validation."""


class InsufficientHistory(ForecasterError):
    """A series is shorter than the window an indicator requires.

    Attributes:
        indicator: Name of the indicator that was being computed.
        required:  Minimum number of points needed.
        available: Number of points actually supplied.
    """

    def __init__(self, indicator: str, required: int, available: int) -> None:
        self.indicator = indicator
        self.required = required
        self.available = available
        super().__init__(
            f"{indicator} needs at least {required} points, got {available}."
        )
