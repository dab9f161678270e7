"""Shared test fixtures for chart-signals."""

from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime

import pytest
import structlog

from chart_signals.series.fake.source import FakeSeriesSource
from tests.factories import DEFAULT_NOW, PRICE, RSI14, SMA20, SMA50, daily_pairs


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host CHART_* variables and log context out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("CHART_"):
            monkeypatch.delenv(key, raising=False)
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def fixed_now() -> datetime:
    return datetime.fromtimestamp(DEFAULT_NOW, tz=UTC)


@pytest.fixture
def fake_source() -> FakeSeriesSource:
    """Ten daily closes with SMA20/SMA50/RSI14 on the same grid."""
    closes = [100.0 + i for i in range(10)]
    return FakeSeriesSource(
        series={
            PRICE: daily_pairs(closes),
            SMA20: daily_pairs([c - 1.0 for c in closes]),
            SMA50: daily_pairs([c - 2.0 for c in closes]),
            RSI14: daily_pairs([50.0 + i for i in range(10)]),
        }
    )
