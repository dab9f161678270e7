"""Fetch cycles: toggle state to requests, requests to frame, frame to signals.

Each cycle builds a fresh, immutable request set from the current toggle
state and is tagged with a monotonically increasing sequence number. A
cycle whose sequence is no longer the latest requested when it settles is
discarded, so an older cycle can never overwrite a newer frame.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

import structlog

from chart_signals.config import ChartConfig, SignalConfig
from chart_signals.engine.aligner import AlignedFrame, align_series
from chart_signals.engine.errors import PrimaryFetchFailure, StaleCycleDiscarded
from chart_signals.engine.orchestrator import SeriesFetchOrchestrator
from chart_signals.engine.signals import SignalReport, derive_signals
from chart_signals.engine.window import resolve_window
from chart_signals.series.source import SeriesSource
from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    SeriesRequest,
    TimeWindow,
)
from chart_signals.utils.logging import cycle_context
from chart_signals.utils.time import utc_now

log = structlog.get_logger()


class IndicatorToggles:
    """Which indicator series the user has switched on.

    The set of selectable series is fixed at construction; only the
    enabled subset changes between cycles.
    """

    def __init__(
        self,
        available: Iterable[NamedSeries],
        enabled: Iterable[NamedSeries] = (),
    ) -> None:
        self._available: tuple[NamedSeries, ...] = tuple(dict.fromkeys(available))
        if any(named.is_primary for named in self._available):
            raise ValueError("Price is always fetched and cannot be toggled")
        self._enabled: set[NamedSeries] = set()
        for named in enabled:
            self.enable(named)

    @classmethod
    def from_config(
        cls,
        config: ChartConfig,
        enabled: Iterable[NamedSeries] = (),
    ) -> IndicatorToggles:
        available = [NamedSeries.sma(p) for p in config.sma_periods]
        available += [NamedSeries.rsi(p) for p in config.rsi_periods]
        return cls(available, enabled)

    @property
    def available(self) -> tuple[NamedSeries, ...]:
        return self._available

    @property
    def enabled(self) -> frozenset[NamedSeries]:
        return frozenset(self._enabled)

    def _check(self, named: NamedSeries) -> None:
        if named not in self._available:
            raise ValueError(f"Unknown indicator: {named.label}")

    def enable(self, named: NamedSeries) -> None:
        self._check(named)
        self._enabled.add(named)

    def disable(self, named: NamedSeries) -> None:
        self._check(named)
        self._enabled.discard(named)

    def toggle(self, named: NamedSeries) -> bool:
        """Flip one indicator; returns its new enabled state."""
        self._check(named)
        if named in self._enabled:
            self._enabled.remove(named)
            return False
        self._enabled.add(named)
        return True

    def is_enabled(self, named: NamedSeries) -> bool:
        return named in self._enabled

    def requests(
        self,
        symbol: str,
        window: TimeWindow,
        resolution: Resolution,
    ) -> tuple[SeriesRequest, ...]:
        """Snapshot of the current toggle state as secondary requests."""
        return tuple(
            SeriesRequest(
                symbol=symbol,
                window=window,
                resolution=resolution,
                series=named,
                enabled=named in self._enabled,
            )
            for named in self._available
        )


async def run_fetch_cycle(
    source: SeriesSource,
    symbol: str,
    primary: SeriesRequest,
    secondary: Sequence[SeriesRequest] = (),
    fetch_timeout: float | None = None,
) -> AlignedFrame:
    """Fetch the primary and enabled secondaries, then align them.

    Raises:
        PrimaryFetchFailure: If the primary series could not be fetched.
    """
    if primary.symbol != symbol or any(req.symbol != symbol for req in secondary):
        raise ValueError(f"All requests of a cycle must be for {symbol}")
    orchestrator = SeriesFetchOrchestrator(source, fetch_timeout=fetch_timeout)
    bundle = await orchestrator.fetch(primary, secondary)
    return align_series(bundle)


@dataclass(frozen=True)
class ChartState:
    """Result of the latest accepted cycle.

    ``signals`` is None when the frame is empty (no data available).
    """

    sequence: int
    symbol: str
    resolution: Resolution
    window: TimeWindow
    frame: AlignedFrame
    signals: SignalReport | None


class ChartSession:
    """Runs fetch cycles for one symbol and keeps the newest result.

    Cycles may overlap (a resolution change while a fetch is in flight).
    Superseded cycles are not cancelled; their results are dropped.
    """

    def __init__(
        self,
        source: SeriesSource,
        symbol: str,
        toggles: IndicatorToggles | None = None,
        signal_config: SignalConfig | None = None,
        fetch_timeout: float | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._source = source
        self.symbol = symbol
        self.toggles = toggles or IndicatorToggles.from_config(ChartConfig())
        self._signal_config = signal_config or SignalConfig()
        self._fetch_timeout = fetch_timeout
        self._clock = clock
        self._latest_requested = 0
        self._state: ChartState | None = None

    @property
    def state(self) -> ChartState | None:
        return self._state

    @property
    def latest_requested(self) -> int:
        return self._latest_requested

    async def refresh(self, resolution: Resolution) -> ChartState | None:
        """Run one cycle at ``resolution`` with the current toggles.

        Returns the new state, or None if a newer cycle was requested
        before this one settled.

        Raises:
            PrimaryFetchFailure: If the primary fetch failed and this cycle
                is still the latest.
        """
        self._latest_requested += 1
        sequence = self._latest_requested

        with cycle_context(self.symbol, sequence):
            now = self._clock()
            window = resolve_window(resolution, now)
            primary = SeriesRequest(
                symbol=self.symbol,
                window=window,
                resolution=resolution,
                series=NamedSeries.price(),
            )
            secondary = self.toggles.requests(self.symbol, window, resolution)

            try:
                frame = await run_fetch_cycle(
                    self._source,
                    self.symbol,
                    primary,
                    secondary,
                    fetch_timeout=self._fetch_timeout,
                )
            except PrimaryFetchFailure:
                if sequence != self._latest_requested:
                    self._log_stale(sequence)
                    return None
                raise

            try:
                return self._accept(sequence, resolution, window, frame)
            except StaleCycleDiscarded:
                self._log_stale(sequence)
                return None

    def _accept(
        self,
        sequence: int,
        resolution: Resolution,
        window: TimeWindow,
        frame: AlignedFrame,
    ) -> ChartState:
        if sequence != self._latest_requested:
            raise StaleCycleDiscarded(sequence, self._latest_requested)

        signals = None if frame.is_empty else derive_signals(
            frame, self._signal_config
        )
        state = ChartState(
            sequence=sequence,
            symbol=self.symbol,
            resolution=resolution,
            window=window,
            frame=frame,
            signals=signals,
        )
        self._state = state
        log.info(
            "fetch_cycle_completed",
            resolution=resolution.label,
            records=len(frame),
            series=[named.label for named in frame.series],
            failed=sorted(named.label for named in frame.failed),
            zone=signals.oscillator_zone if signals else None,
            trend=signals.trend_direction if signals else None,
        )
        return state

    def _log_stale(self, sequence: int) -> None:
        log.debug(
            "stale_cycle_discarded",
            sequence=sequence,
            latest=self._latest_requested,
        )
