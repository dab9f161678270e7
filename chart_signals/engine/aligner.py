"""Exact-timestamp join of secondary series onto the primary grid.

The primary (price) series defines the frame: one record per primary
point, in primary order. A secondary value lands in a record only when its
timestamp equals the record's timestamp exactly; there is no interpolation
and no carry-forward. Secondary points off the grid are dropped and counted.
A price candle without a close keeps its record, with no price slot.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field

import structlog

from chart_signals.engine.errors import PrimaryFetchFailure
from chart_signals.engine.orchestrator import FetchBundle
from chart_signals.series.types import NamedSeries, SeriesFailure, SeriesSuccess
from chart_signals.series.utils import last_point

log = structlog.get_logger()

PRICE = NamedSeries.price()


@dataclass(frozen=True)
class AlignedRecord:
    """All values known at one primary timestamp.

    ``values`` has no key for a series that is absent at this timestamp.
    """

    timestamp: int
    values: Mapping[NamedSeries, float] = field(default_factory=dict)

    def get(self, series: NamedSeries) -> float | None:
        return self.values.get(series)

    @property
    def price(self) -> float | None:
        return self.values.get(PRICE)


@dataclass(frozen=True)
class AlignedFrame:
    """Ordered records keyed by the primary series.

    ``series`` lists the secondary series that were fetched successfully,
    ``failed`` the ones whose fetch failed (all their slots are absent).
    """

    records: tuple[AlignedRecord, ...] = ()
    series: tuple[NamedSeries, ...] = ()
    failed: frozenset[NamedSeries] = frozenset()

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[AlignedRecord]:
        return iter(self.records)

    @property
    def is_empty(self) -> bool:
        return not self.records

    def latest(self) -> AlignedRecord:
        """Most recent record.

        Raises:
            EmptySeriesError: If the frame has no records.
        """
        return last_point(self.records)

    def column(self, series: NamedSeries) -> list[float | None]:
        """Values of one series across the frame, None where absent."""
        return [record.get(series) for record in self.records]


def align_series(bundle: FetchBundle) -> AlignedFrame:
    """Join every successful secondary series onto the primary timestamps.

    Raises:
        PrimaryFetchFailure: If the bundle carries a failed primary.
    """
    if isinstance(bundle.primary, SeriesFailure):
        raise PrimaryFetchFailure(PRICE, bundle.primary.reason)

    primary_points = bundle.primary.points
    grid = {point.timestamp for point in primary_points}

    # One timestamp index per secondary, built once
    indexes: dict[NamedSeries, dict[int, float]] = {}
    for named, result in bundle.secondary.items():
        if not isinstance(result, SeriesSuccess):
            continue
        index = {
            point.timestamp: point.value
            for point in result.points
            if point.value is not None
        }
        indexes[named] = index

        dropped = sum(1 for ts in index if ts not in grid)
        if dropped:
            log.info(
                "secondary_points_dropped",
                series=named.label,
                dropped=dropped,
                total=len(index),
            )

    records: list[AlignedRecord] = []
    for point in primary_points:
        values: dict[NamedSeries, float] = {}
        if point.value is not None:
            values[PRICE] = point.value
        for named, index in indexes.items():
            value = index.get(point.timestamp)
            if value is not None:
                values[named] = value
        records.append(AlignedRecord(timestamp=point.timestamp, values=values))

    return AlignedFrame(
        records=tuple(records),
        series=tuple(indexes),
        failed=bundle.failed,
    )
