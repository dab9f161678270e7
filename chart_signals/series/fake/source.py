"""FakeSeriesSource: in-memory series data for testing.

Lightweight implementation of SeriesSource for unit testing the
orchestrator, aligner and chart session without a network.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from dataclasses import dataclass

from chart_signals.series.errors import SeriesUnavailableError
from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    TimeSeriesPoint,
    TimeWindow,
)
from chart_signals.series.utils import normalize_points


@dataclass(frozen=True)
class FetchCall:
    """One recorded fetch_series invocation."""

    symbol: str
    series: NamedSeries
    resolution: Resolution
    window: TimeWindow


class FakeSeriesSource:
    """In-memory SeriesSource for testing.

    Supply canned series at construction, or set them during tests via
    set_series(). Failures and per-series delays can be injected to
    exercise partial-failure and ordering behavior. ``calls`` records each
    fetch as it starts, ``completed`` each series once its fetch has finished.
    """

    def __init__(
        self,
        series: dict[NamedSeries, Iterable[tuple[int, float | None]]] | None = None,
        failures: dict[NamedSeries, Exception] | None = None,
        delays: dict[NamedSeries, float] | None = None,
    ) -> None:
        self._series: dict[NamedSeries, list[TimeSeriesPoint]] = {}
        for named, pairs in (series or {}).items():
            self.set_series(named, pairs)
        self._failures: dict[NamedSeries, Exception] = dict(failures or {})
        self._delays: dict[NamedSeries, float] = dict(delays or {})
        self.calls: list[FetchCall] = []
        self.completed: list[NamedSeries] = []

    def set_series(
        self,
        named: NamedSeries,
        pairs: Iterable[tuple[int, float | None]],
    ) -> None:
        """Replace the canned points for a series.

        Price pairs without a usable value keep their timestamp.
        """
        self._series[named] = normalize_points(pairs, keep_gaps=named.is_primary)

    def fail(self, named: NamedSeries, error: Exception) -> None:
        """Make every fetch of ``named`` raise ``error``."""
        self._failures[named] = error

    def delay(self, named: NamedSeries, seconds: float) -> None:
        """Make every fetch of ``named`` sleep before answering."""
        self._delays[named] = seconds

    def fetched(self) -> list[NamedSeries]:
        """Series requested so far, in call order."""
        return [call.series for call in self.calls]

    async def fetch_series(
        self,
        symbol: str,
        series: NamedSeries,
        resolution: Resolution,
        window: TimeWindow,
    ) -> list[TimeSeriesPoint]:
        self.calls.append(FetchCall(symbol, series, resolution, window))
        delay = self._delays.get(series)
        if delay:
            await asyncio.sleep(delay)
        self.completed.append(series)
        error = self._failures.get(series)
        if error is not None:
            raise error
        if series not in self._series:
            raise SeriesUnavailableError(f"No data for {symbol} {series.label}")
        return list(self._series[series])
