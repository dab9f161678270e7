"""Series abstraction layer.

Re-exports all public types, protocols, and errors for convenient imports:
    from chart_signals.series import NamedSeries, SeriesSource, SeriesError
"""

from chart_signals.series.errors import (
    EmptySeriesError,
    MalformedSeriesError,
    SeriesAPIError,
    SeriesAuthError,
    SeriesConnectionError,
    SeriesError,
    SeriesNotConnectedError,
    SeriesTimeoutError,
    SeriesUnavailableError,
)
from chart_signals.series.source import SeriesSource
from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    SeriesFailure,
    SeriesKind,
    SeriesRequest,
    SeriesResult,
    SeriesSuccess,
    TimeSeriesPoint,
    TimeWindow,
)
from chart_signals.series.utils import last_point, normalize_points

__all__ = [
    "EmptySeriesError",
    "MalformedSeriesError",
    "NamedSeries",
    "Resolution",
    "SeriesAPIError",
    "SeriesAuthError",
    "SeriesConnectionError",
    "SeriesError",
    "SeriesFailure",
    "SeriesKind",
    "SeriesNotConnectedError",
    "SeriesRequest",
    "SeriesResult",
    "SeriesSource",
    "SeriesSuccess",
    "SeriesTimeoutError",
    "SeriesUnavailableError",
    "TimeSeriesPoint",
    "TimeWindow",
    "last_point",
    "normalize_points",
]
