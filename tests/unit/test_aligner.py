"""Tests for the exact-timestamp aligner.

Covers the frame-length invariant, the lossy exact join, partial failure,
and Hypothesis property-based checks of both.
"""

from __future__ import annotations

import pytest
import structlog
from hypothesis import given, settings
from hypothesis import strategies as st
from structlog.testing import capture_logs

from chart_signals.engine import aligner
from chart_signals.engine.aligner import AlignedFrame, AlignedRecord, align_series
from chart_signals.engine.errors import PrimaryFetchFailure
from chart_signals.engine.orchestrator import FetchBundle
from chart_signals.series.errors import EmptySeriesError
from chart_signals.series.http.mappers import candles_to_points
from chart_signals.series.types import SeriesSuccess
from tests.factories import (
    PRICE,
    RSI14,
    SMA20,
    SMA50,
    SMA200,
    failure,
    make_bundle,
)

PRIMARY = [(100, 10.0), (200, 10.5), (300, 11.0)]


class TestAlignSeries:
    """Join behavior on small hand-built bundles."""

    def test_frame_follows_primary_order(self) -> None:
        frame = align_series(make_bundle(PRIMARY))
        assert [r.timestamp for r in frame] == [100, 200, 300]
        assert [r.price for r in frame] == [10.0, 10.5, 11.0]

    def test_missing_secondary_timestamp_is_absent(self) -> None:
        frame = align_series(
            make_bundle(PRIMARY, {RSI14: [(100, 75.0), (300, 25.0)]})
        )
        assert frame.column(RSI14) == [75.0, None, 25.0]
        assert RSI14 not in frame.records[1].values

    def test_off_grid_secondary_points_dropped(self) -> None:
        sma = [(50, 1.0), (150, 2.0), (200, 3.0), (400, 4.0)]
        frame = align_series(make_bundle(PRIMARY, {SMA20: sma}))
        assert frame.column(SMA20) == [None, 3.0, None]

    def test_closeless_candle_keeps_record_and_secondaries(self) -> None:
        frame = align_series(
            make_bundle(
                [(100, 10.0), (200, None), (300, 11.0)],
                {RSI14: [(100, 75.0), (200, 50.0), (300, 25.0)]},
            )
        )
        assert len(frame) == 3
        assert frame.column(RSI14) == [75.0, 50.0, 25.0]
        assert frame.records[1].price is None
        assert PRICE not in frame.records[1].values
        assert frame.records[1].get(RSI14) == 50.0

    def test_null_close_from_candle_payload_keeps_rsi(self) -> None:
        points = candles_to_points(
            {"timestamp": [100, 200, 300], "close": [10.0, None, 11.0]}
        )
        bundle = make_bundle(
            SeriesSuccess(tuple(points)),
            {RSI14: [(100, 75.0), (200, 50.0), (300, 25.0)]},
        )
        frame = align_series(bundle)
        assert len(frame) == 3
        assert frame.column(PRICE) == [10.0, None, 11.0]
        assert frame.records[1].get(RSI14) == 50.0

    def test_closeless_latest_candle_still_has_indicators(self) -> None:
        frame = align_series(
            make_bundle(
                [(100, 10.0), (200, None)],
                {SMA20: [(100, 9.0), (200, 9.5)]},
            )
        )
        latest = frame.latest()
        assert latest.timestamp == 200
        assert latest.price is None
        assert latest.get(SMA20) == 9.5

    def test_no_carry_forward(self) -> None:
        frame = align_series(make_bundle(PRIMARY, {SMA50: [(100, 9.0)]}))
        assert frame.column(SMA50) == [9.0, None, None]

    def test_secondary_never_extends_grid(self) -> None:
        frame = align_series(
            make_bundle(PRIMARY, {SMA20: [(t, 1.0) for t in range(0, 1000, 50)]})
        )
        assert len(frame) == 3

    def test_failed_series_all_absent(self) -> None:
        frame = align_series(
            make_bundle(PRIMARY, {SMA20: PRIMARY, SMA200: failure("down")})
        )
        assert frame.column(SMA200) == [None, None, None]
        assert frame.column(SMA20) == [10.0, 10.5, 11.0]
        assert frame.failed == frozenset({SMA200})
        assert frame.series == (SMA20,)

    def test_empty_primary_gives_empty_frame(self) -> None:
        frame = align_series(make_bundle([], {RSI14: [(100, 50.0)]}))
        assert frame.is_empty
        assert len(frame) == 0

    def test_failed_primary_raises(self) -> None:
        with pytest.raises(PrimaryFetchFailure, match="unreachable"):
            align_series(make_bundle(failure("unreachable")))


class TestEndToEndScenario:
    """Price plus an RSI with a gap at the middle timestamp."""

    def test_scenario(self) -> None:
        from chart_signals.engine.signals import (
            OscillatorZone,
            classify_oscillator,
            derive_signals,
        )

        frame = align_series(
            make_bundle(PRIMARY, {RSI14: [(100, 75.0), (300, 25.0)]})
        )
        first, middle, last = frame.records
        assert first.get(RSI14) == 75.0
        assert classify_oscillator(first.get(RSI14)) is OscillatorZone.OVERBOUGHT
        assert middle.get(RSI14) is None
        assert last.get(RSI14) == 25.0
        assert derive_signals(frame).oscillator_zone is OscillatorZone.OVERSOLD


class TestAlignedFrame:
    """Frame accessors."""

    def test_latest(self) -> None:
        frame = align_series(make_bundle(PRIMARY))
        assert frame.latest().timestamp == 300

    def test_latest_on_empty_raises(self) -> None:
        with pytest.raises(EmptySeriesError):
            AlignedFrame().latest()

    def test_record_get_absent(self) -> None:
        record = AlignedRecord(timestamp=1, values={PRICE: 2.0})
        assert record.get(SMA20) is None
        assert record.price == 2.0


class TestDroppedPointsLogging:
    """The aligner reports off-grid secondary points per series."""

    @staticmethod
    def _dropped_events(
        monkeypatch: pytest.MonkeyPatch, bundle: FetchBundle
    ) -> list[dict]:
        with capture_logs() as events:
            monkeypatch.setattr(aligner, "log", structlog.get_logger())
            align_series(bundle)
        return [e for e in events if e["event"] == "secondary_points_dropped"]

    def test_off_grid_points_counted(self, monkeypatch: pytest.MonkeyPatch) -> None:
        sma = [(50, 1.0), (150, 2.0), (200, 3.0), (400, 4.0)]
        events = self._dropped_events(monkeypatch, make_bundle(PRIMARY, {SMA20: sma}))
        assert len(events) == 1
        assert events[0]["series"] == "SMA20"
        assert events[0]["dropped"] == 3
        assert events[0]["total"] == 4
        assert events[0]["log_level"] == "info"

    def test_one_event_per_lossy_series(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        bundle = make_bundle(
            PRIMARY,
            {
                SMA20: [(100, 1.0), (250, 2.0)],
                SMA50: PRIMARY,
                RSI14: [(1, 50.0), (2, 51.0)],
            },
        )
        events = self._dropped_events(monkeypatch, bundle)
        counts = {e["series"]: (e["dropped"], e["total"]) for e in events}
        assert counts == {"SMA20": (1, 2), "RSI14": (2, 2)}

    def test_nothing_logged_when_all_points_match(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        events = self._dropped_events(
            monkeypatch, make_bundle(PRIMARY, {SMA20: PRIMARY})
        )
        assert events == []

    def test_failed_series_not_counted(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        events = self._dropped_events(
            monkeypatch, make_bundle(PRIMARY, {SMA200: failure("down")})
        )
        assert events == []


# --- Property-based tests ---

_timestamps = st.lists(
    st.integers(min_value=0, max_value=10_000), unique=True, max_size=40
).map(sorted)
_value = st.floats(min_value=-1e6, max_value=1e6, allow_nan=False)


@st.composite
def _series(draw: st.DrawFn) -> list[tuple[int, float]]:
    return [(ts, draw(_value)) for ts in draw(_timestamps)]


class TestAlignmentProperties:
    """Hypothesis checks of the alignment invariants."""

    @given(
        primary=_series(),
        secondaries=st.lists(
            st.one_of(_series(), st.none()), min_size=0, max_size=4
        ),
    )
    @settings(max_examples=200)
    def test_frame_length_equals_primary_length(
        self,
        primary: list[tuple[int, float]],
        secondaries: list[list[tuple[int, float]] | None],
    ) -> None:
        names = [SMA20, SMA50, SMA200, RSI14]
        bundle = make_bundle(
            primary,
            {
                names[i]: failure() if s is None else s
                for i, s in enumerate(secondaries)
            },
        )
        frame = align_series(bundle)
        assert len(frame) == len(primary)
        assert [r.timestamp for r in frame] == [ts for ts, _ in primary]

    @given(primary=_series(), secondary=_series())
    @settings(max_examples=200)
    def test_lossy_exact_join(
        self,
        primary: list[tuple[int, float]],
        secondary: list[tuple[int, float]],
    ) -> None:
        frame = align_series(make_bundle(primary, {RSI14: secondary}))
        grid = {ts for ts, _ in primary}
        by_ts = {r.timestamp: r for r in frame}

        for ts, value in secondary:
            if ts in grid:
                assert by_ts[ts].get(RSI14) == value

        carried = sum(1 for r in frame if r.get(RSI14) is not None)
        assert carried == sum(1 for ts, _ in secondary if ts in grid)
