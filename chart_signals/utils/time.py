"""UTC helpers and epoch-second conversion.

All times are UTC. Series timestamps are integer epoch seconds.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime

SECONDS_PER_DAY = 86_400


def utc_now() -> datetime:
    """Return the current UTC datetime, timezone-aware."""
    return datetime.now(UTC)


def to_epoch_seconds(moment: datetime | int | float) -> float:
    """Convert a datetime or numeric epoch value to epoch seconds.

    Naive datetimes are taken as UTC.
    """
    if isinstance(moment, datetime):
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=UTC)
        return moment.timestamp()
    if isinstance(moment, bool) or not math.isfinite(moment):
        raise ValueError(f"Invalid epoch value: {moment!r}")
    return float(moment)


def from_epoch_seconds(ts: int) -> datetime:
    """Epoch seconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ts, tz=UTC)


def format_timestamp(ts: int) -> str:
    """Format epoch seconds as ISO 8601 with Z suffix.

    Output format: YYYY-MM-DDTHH:MM:SSZ
    """
    return from_epoch_seconds(ts).strftime("%Y-%m-%dT%H:%M:%SZ")
