"""Fetch-cycle errors.

Only PrimaryFetchFailure is meant to reach the user. StaleCycleDiscarded is
raised and absorbed inside ChartSession.
"""

from __future__ import annotations

from chart_signals.series.types import NamedSeries


class CycleError(Exception):
    """Base exception for fetch-cycle errors."""


class PrimaryFetchFailure(CycleError):
    """The primary series could not be obtained; no frame for this cycle."""

    def __init__(self, series: NamedSeries, reason: str) -> None:
        self.series = series
        self.reason = reason
        super().__init__(f"No data for this window ({series.label}: {reason})")


class StaleCycleDiscarded(CycleError):
    """A cycle settled after a newer cycle was requested."""

    def __init__(self, sequence: int, latest: int) -> None:
        self.sequence = sequence
        self.latest = latest
        super().__init__(f"Cycle {sequence} superseded by cycle {latest}")
