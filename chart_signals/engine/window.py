"""Chart resolutions and time-window resolution.

The window for a cycle is derived from a single captured ``now`` so every
series request of that cycle shares an identical ``[start, end)`` range.
"""

from __future__ import annotations

import math
from datetime import datetime

from chart_signals.series.types import Resolution, TimeWindow
from chart_signals.utils.time import SECONDS_PER_DAY, to_epoch_seconds

RESOLUTIONS: tuple[Resolution, ...] = (
    Resolution(label="1D", token="1", days=1),
    Resolution(label="5D", token="5", days=5),
    Resolution(label="1M", token="30", days=30),
    Resolution(label="3M", token="90", days=90),
    Resolution(label="6M", token="180", days=180),
    Resolution(label="1Y", token="D", days=365),
    Resolution(label="5Y", token="W", days=5 * 365),
)

_BY_LABEL: dict[str, Resolution] = {r.label: r for r in RESOLUTIONS}


def get_resolution(label: str) -> Resolution:
    """Look up a resolution by its label (case-insensitive).

    Raises:
        ValueError: If the label is not in the resolution table.
    """
    resolution = _BY_LABEL.get(label.strip().upper())
    if resolution is None:
        raise ValueError(
            f"Unknown resolution {label!r}; expected one of "
            f"{', '.join(_BY_LABEL)}"
        )
    return resolution


def resolve_window(
    resolution: Resolution,
    now: datetime | int | float,
) -> TimeWindow:
    """Absolute window ending at ``now`` and spanning ``resolution.days``.

    Both bounds are floored to whole epoch seconds. Pure: identical inputs
    always give an identical window. A zero-day span yields an empty window.
    """
    return lookback_window(resolution.days, now)


def lookback_window(days: int, now: datetime | int | float) -> TimeWindow:
    """Window of ``days`` ending at ``now``, for callers without a Resolution."""
    if days < 0:
        raise ValueError(f"Lookback days must be >= 0, got {days}")
    now_ts = to_epoch_seconds(now)
    return TimeWindow(
        start=math.floor(now_ts - days * SECONDS_PER_DAY),
        end=math.floor(now_ts),
    )
