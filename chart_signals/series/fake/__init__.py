"""In-memory series source for tests."""

from chart_signals.series.fake.source import FakeSeriesSource, FetchCall

__all__ = ["FakeSeriesSource", "FetchCall"]
