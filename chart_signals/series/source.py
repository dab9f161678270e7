"""SeriesSource protocol: abstract interface for time-series providers.

All source implementations (HTTP API layer, fake) must satisfy this protocol.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    TimeSeriesPoint,
    TimeWindow,
)


@runtime_checkable
class SeriesSource(Protocol):
    """Async interface that supplies one named series per call.

    Implementations must be safe to call concurrently. Failures are raised
    as SeriesError subclasses; they are never returned as values.
    """

    async def fetch_series(
        self,
        symbol: str,
        series: NamedSeries,
        resolution: Resolution,
        window: TimeWindow,
    ) -> list[TimeSeriesPoint]:
        """Fetch one series for a symbol over a window.

        Args:
            symbol: Ticker symbol (e.g. "AAPL").
            series: Which series to fetch (price, SMA(20), RSI(14), ...).
            resolution: Sampling resolution; its token is passed to the source.
            window: ``[start, end)`` range in epoch seconds.

        Returns:
            Points ordered by strictly increasing timestamp, finite values only.
        """
        ...
