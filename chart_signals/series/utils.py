"""Shared point helpers.

Centralized normalization used by every source implementation, plus the
explicit last-element accessor.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

from chart_signals.series.errors import EmptySeriesError, MalformedSeriesError
from chart_signals.series.types import TimeSeriesPoint

T = TypeVar("T")


def _finite_or_none(raw: object) -> float | None:
    if not isinstance(raw, int | float) or isinstance(raw, bool):
        return None
    value = float(raw)
    return value if math.isfinite(value) else None


def normalize_points(
    pairs: Iterable[tuple[int | float, int | float | None]],
    keep_gaps: bool = False,
) -> list[TimeSeriesPoint]:
    """Build an ordered point list from raw ``(timestamp, value)`` pairs.

    Values that are missing, non-numeric or non-finite are absent: the pair
    is dropped, or with ``keep_gaps`` kept as a point whose value is None.
    Timestamps must be strictly increasing, including those of absent
    values.

    Raises:
        MalformedSeriesError: If a timestamp is not an integer or the
            timestamps are not strictly increasing.
    """
    points: list[TimeSeriesPoint] = []
    previous: int | None = None
    for raw_ts, raw_value in pairs:
        if not isinstance(raw_ts, int | float) or isinstance(raw_ts, bool):
            raise MalformedSeriesError(f"Timestamp is not a number: {raw_ts!r}")
        if not math.isfinite(raw_ts) or not float(raw_ts).is_integer():
            raise MalformedSeriesError(f"Timestamp is not an integer: {raw_ts!r}")
        ts = int(raw_ts)
        if previous is not None and ts <= previous:
            raise MalformedSeriesError(
                f"Timestamps not strictly increasing: {previous} then {ts}"
            )
        previous = ts
        value = _finite_or_none(raw_value)
        if value is None and not keep_gaps:
            continue
        points.append(TimeSeriesPoint(timestamp=ts, value=value))
    return points


def last_point(seq: Sequence[T]) -> T:
    """Return the last element of an ordered, non-empty sequence.

    Raises:
        EmptySeriesError: If the sequence is empty.
    """
    if not seq:
        raise EmptySeriesError("No points in sequence")
    return seq[-1]
