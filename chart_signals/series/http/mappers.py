"""API payload to domain point converters.

All JSON-to-TimeSeriesPoint conversion happens here. The API layer returns
candles as parallel arrays and indicators as lists of ``{time, value}``
objects; ``null`` means the provider had too little data.
"""

from __future__ import annotations

from typing import Any

from chart_signals.series.errors import MalformedSeriesError, SeriesUnavailableError
from chart_signals.series.types import NamedSeries, SeriesKind, TimeSeriesPoint
from chart_signals.series.utils import normalize_points

# Query parameter carrying the resolution token, per endpoint
RESOLUTION_PARAM: dict[SeriesKind, str] = {
    SeriesKind.PRICE: "resolution",
    SeriesKind.SMA: "interval",
    SeriesKind.RSI: "interval",
}

ENDPOINTS: dict[SeriesKind, str] = {
    SeriesKind.PRICE: "/stocks/historical",
    SeriesKind.SMA: "/ta/sma",
    SeriesKind.RSI: "/ta/rsi",
}


def candles_to_points(payload: Any) -> list[TimeSeriesPoint]:
    """Convert a historical-candles payload into close-price points.

    A candle without a usable close keeps its timestamp with value None.
    """
    if payload is None:
        raise SeriesUnavailableError("No candles returned")
    if not isinstance(payload, dict):
        raise MalformedSeriesError(
            f"Expected candle object, got {type(payload).__name__}"
        )

    timestamps = payload.get("timestamp")
    closes = payload.get("close")
    if not isinstance(timestamps, list) or not isinstance(closes, list):
        raise MalformedSeriesError("Candle payload missing timestamp/close arrays")
    if len(timestamps) != len(closes):
        raise MalformedSeriesError(
            f"Candle arrays differ in length: "
            f"{len(timestamps)} timestamps, {len(closes)} closes"
        )
    return normalize_points(zip(timestamps, closes, strict=True), keep_gaps=True)


def indicator_to_points(payload: Any) -> list[TimeSeriesPoint]:
    """Convert an indicator payload (``[{time, value}, ...]``) into points."""
    if payload is None:
        raise SeriesUnavailableError("No indicator values returned")
    if not isinstance(payload, list):
        raise MalformedSeriesError(
            f"Expected indicator list, got {type(payload).__name__}"
        )

    pairs: list[tuple[Any, Any]] = []
    for item in payload:
        if not isinstance(item, dict) or "time" not in item:
            raise MalformedSeriesError(f"Invalid indicator entry: {item!r}")
        pairs.append((item["time"], item.get("value")))
    return normalize_points(pairs)


def payload_to_points(series: NamedSeries, payload: Any) -> list[TimeSeriesPoint]:
    """Dispatch on series kind."""
    if series.kind is SeriesKind.PRICE:
        return candles_to_points(payload)
    return indicator_to_points(payload)


def build_query(
    symbol: str,
    series: NamedSeries,
    token: str,
    start: int,
    end: int,
) -> dict[str, str | int]:
    """Query parameters for one series request."""
    params: dict[str, str | int] = {
        "symbol": symbol,
        RESOLUTION_PARAM[series.kind]: token,
        "from": start,
        "to": end,
    }
    if series.period is not None:
        params["period"] = series.period
    return params
