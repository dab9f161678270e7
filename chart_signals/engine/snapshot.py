"""Latest-value technical snapshot, as shown by the analysis widget.

No price series and no alignment: SMA(fast) and SMA(slow) are fetched over
one lookback, RSI over a shorter one, and only the last point of each
series matters.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime

from chart_signals.config import SignalConfig, WidgetConfig
from chart_signals.engine.orchestrator import SeriesFetchOrchestrator
from chart_signals.engine.signals import SignalReport, derive_signals_from_values
from chart_signals.engine.window import lookback_window
from chart_signals.series.source import SeriesSource
from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    SeriesRequest,
    SeriesResult,
    SeriesSuccess,
)
from chart_signals.series.utils import last_point
from chart_signals.utils.time import utc_now


@dataclass(frozen=True)
class TechnicalSnapshot:
    """Latest indicator values for one symbol and the signals they imply."""

    symbol: str
    signals: SignalReport

    @property
    def rsi(self) -> float | None:
        return self.signals.rsi

    @property
    def sma_fast(self) -> float | None:
        return self.signals.sma_fast

    @property
    def sma_slow(self) -> float | None:
        return self.signals.sma_slow


def _latest_value(result: SeriesResult) -> float | None:
    if isinstance(result, SeriesSuccess) and result.points:
        return last_point(result.points).value
    return None


async def fetch_snapshot(
    source: SeriesSource,
    symbol: str,
    now: datetime | int | float | None = None,
    signal_config: SignalConfig | None = None,
    widget_config: WidgetConfig | None = None,
    fetch_timeout: float | None = None,
) -> TechnicalSnapshot:
    """Fetch the three widget series concurrently and derive signals.

    Failed or empty series are treated as absent; this never raises for
    source failures.
    """
    signals_cfg = signal_config or SignalConfig()
    widget_cfg = widget_config or WidgetConfig()
    moment = utc_now() if now is None else now

    sma_window = lookback_window(widget_cfg.sma_lookback_days, moment)
    rsi_window = lookback_window(widget_cfg.rsi_lookback_days, moment)
    sma_resolution = Resolution(
        label="widget-sma",
        token=widget_cfg.resolution_token,
        days=widget_cfg.sma_lookback_days,
    )
    rsi_resolution = Resolution(
        label="widget-rsi",
        token=widget_cfg.resolution_token,
        days=widget_cfg.rsi_lookback_days,
    )

    orchestrator = SeriesFetchOrchestrator(source, fetch_timeout=fetch_timeout)
    fast, slow, rsi = await asyncio.gather(
        orchestrator.fetch_one(
            SeriesRequest(
                symbol=symbol,
                window=sma_window,
                resolution=sma_resolution,
                series=NamedSeries.sma(signals_cfg.sma_fast),
            )
        ),
        orchestrator.fetch_one(
            SeriesRequest(
                symbol=symbol,
                window=sma_window,
                resolution=sma_resolution,
                series=NamedSeries.sma(signals_cfg.sma_slow),
            )
        ),
        orchestrator.fetch_one(
            SeriesRequest(
                symbol=symbol,
                window=rsi_window,
                resolution=rsi_resolution,
                series=NamedSeries.rsi(signals_cfg.rsi_period),
            )
        ),
    )

    return TechnicalSnapshot(
        symbol=symbol,
        signals=derive_signals_from_values(
            rsi=_latest_value(rsi),
            sma_fast=_latest_value(fast),
            sma_slow=_latest_value(slow),
            config=signals_cfg,
        ),
    )
