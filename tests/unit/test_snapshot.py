"""Tests for the latest-value technical snapshot."""

from __future__ import annotations

from datetime import datetime

from chart_signals.config import SignalConfig, WidgetConfig
from chart_signals.engine.signals import (
    STRONG_ENTRY,
    OscillatorZone,
    TrendDirection,
)
from chart_signals.engine.snapshot import fetch_snapshot
from chart_signals.engine.window import lookback_window
from chart_signals.series.errors import SeriesConnectionError
from chart_signals.series.fake.source import FakeSeriesSource
from chart_signals.series.types import NamedSeries
from tests.factories import DEFAULT_NOW, PRICE, RSI14, SMA20, SMA50


class TestFetchSnapshot:
    """Three concurrent fetches, last value of each."""

    async def test_latest_values(self, fake_source: FakeSeriesSource) -> None:
        snapshot = await fetch_snapshot(fake_source, "AAPL", now=DEFAULT_NOW)
        assert snapshot.symbol == "AAPL"
        assert snapshot.rsi == 59.0
        assert snapshot.sma_fast == 108.0
        assert snapshot.sma_slow == 107.0
        assert snapshot.signals.trend_direction is TrendDirection.BULLISH
        assert snapshot.signals.oscillator_zone is OscillatorZone.NEUTRAL

    async def test_no_price_fetched(self, fake_source: FakeSeriesSource) -> None:
        await fetch_snapshot(fake_source, "AAPL", now=DEFAULT_NOW)
        assert PRICE not in fake_source.fetched()
        assert set(fake_source.fetched()) == {SMA20, SMA50, RSI14}

    async def test_lookback_windows(self, fake_source: FakeSeriesSource) -> None:
        await fetch_snapshot(fake_source, "AAPL", now=DEFAULT_NOW)
        windows = {call.series: call.window for call in fake_source.calls}
        assert windows[SMA20] == lookback_window(90, DEFAULT_NOW)
        assert windows[SMA50] == lookback_window(90, DEFAULT_NOW)
        assert windows[RSI14] == lookback_window(30, DEFAULT_NOW)
        assert {call.resolution.token for call in fake_source.calls} == {"D"}

    async def test_datetime_now(
        self, fake_source: FakeSeriesSource, fixed_now: datetime
    ) -> None:
        snapshot = await fetch_snapshot(fake_source, "AAPL", now=fixed_now)
        assert snapshot.rsi == 59.0

    async def test_failures_become_absent(
        self, fake_source: FakeSeriesSource
    ) -> None:
        fake_source.fail(RSI14, SeriesConnectionError("down"))
        fake_source.set_series(SMA50, [])
        snapshot = await fetch_snapshot(fake_source, "AAPL", now=DEFAULT_NOW)
        assert snapshot.rsi is None
        assert snapshot.sma_slow is None
        assert snapshot.signals.oscillator_zone is None
        assert snapshot.signals.trend_direction is TrendDirection.NEUTRAL

    async def test_custom_configs(self) -> None:
        source = FakeSeriesSource(
            series={
                NamedSeries.sma(10): [(100, 12.0)],
                NamedSeries.sma(30): [(100, 11.0)],
                NamedSeries.rsi(7): [(100, 20.0)],
            }
        )
        snapshot = await fetch_snapshot(
            source,
            "MSFT",
            now=DEFAULT_NOW,
            signal_config=SignalConfig(rsi_period=7, sma_fast=10, sma_slow=30),
            widget_config=WidgetConfig(sma_lookback_days=60, rsi_lookback_days=10),
        )
        assert snapshot.signals.recommendation == STRONG_ENTRY
        windows = {call.series.kind: call.window for call in source.calls}
        assert windows[NamedSeries.rsi(7).kind] == lookback_window(10, DEFAULT_NOW)
