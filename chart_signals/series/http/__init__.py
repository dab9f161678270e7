"""HTTP series source for the dashboard API layer."""

from chart_signals.series.http.source import HttpSeriesSource

__all__ = ["HttpSeriesSource"]
