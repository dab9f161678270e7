"""Concurrent series acquisition with partial-failure tolerance.

One task per enabled request, joined with asyncio.gather. The bundle is
only returned once every dispatched task has settled; a secondary failure
becomes a SeriesFailure entry, a primary failure fails the whole cycle.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

import structlog

from chart_signals.engine.errors import PrimaryFetchFailure
from chart_signals.series.errors import SeriesError
from chart_signals.series.source import SeriesSource
from chart_signals.series.types import (
    NamedSeries,
    SeriesFailure,
    SeriesRequest,
    SeriesResult,
    SeriesSuccess,
)

log = structlog.get_logger()


@dataclass(frozen=True)
class FetchBundle:
    """Settled results of one fetch cycle.

    ``secondary`` holds an entry for every dispatched (enabled) secondary
    request and nothing else.
    """

    primary: SeriesResult
    secondary: Mapping[NamedSeries, SeriesResult] = field(default_factory=dict)

    @property
    def failed(self) -> frozenset[NamedSeries]:
        return frozenset(
            named for named, result in self.secondary.items() if not result.ok
        )


class SeriesFetchOrchestrator:
    """Fans out series fetches against a SeriesSource and joins them.

    Design decisions:
    - Join barrier, not a race: nothing is returned mid-flight.
    - Any exception from the source maps to SeriesFailure; SeriesError
      subclasses are expected, anything else is logged with a traceback.
    - Optional per-fetch timeout; a timed-out fetch is a SeriesFailure.
    """

    def __init__(
        self,
        source: SeriesSource,
        fetch_timeout: float | None = None,
    ) -> None:
        if fetch_timeout is not None and fetch_timeout <= 0:
            raise ValueError(f"fetch_timeout must be > 0, got {fetch_timeout}")
        self._source = source
        self._fetch_timeout = fetch_timeout

    async def fetch(
        self,
        primary: SeriesRequest,
        secondary: Sequence[SeriesRequest] = (),
    ) -> FetchBundle:
        """Fetch the primary and every enabled secondary concurrently.

        Raises:
            ValueError: If the primary request is disabled, or two enabled
                secondary requests name the same series.
            PrimaryFetchFailure: If the primary fetch failed. Raised only
                after all dispatched fetches have settled.
        """
        if not primary.enabled:
            raise ValueError("Primary request must be enabled")

        dispatched = [req for req in secondary if req.enabled]
        seen: set[NamedSeries] = set()
        for req in dispatched:
            if req.series in seen or req.series == primary.series:
                raise ValueError(f"Duplicate series request: {req.series.label}")
            seen.add(req.series)

        results = await asyncio.gather(
            self.fetch_one(primary),
            *(self.fetch_one(req) for req in dispatched),
        )
        primary_result, secondary_results = results[0], results[1:]

        bundle = FetchBundle(
            primary=primary_result,
            secondary={
                req.series: result
                for req, result in zip(dispatched, secondary_results, strict=True)
            },
        )

        skipped = [req.series.label for req in secondary if not req.enabled]
        log.debug(
            "fetch_bundle_settled",
            symbol=primary.symbol,
            dispatched=len(dispatched) + 1,
            skipped=skipped,
            failed=sorted(named.label for named in bundle.failed),
        )

        if isinstance(primary_result, SeriesFailure):
            raise PrimaryFetchFailure(primary.series, primary_result.reason)
        return bundle

    async def fetch_one(self, request: SeriesRequest) -> SeriesResult:
        """Fetch a single series, mapping every failure to SeriesFailure."""
        try:
            coro = self._source.fetch_series(
                request.symbol,
                request.series,
                request.resolution,
                request.window,
            )
            if self._fetch_timeout is None:
                points = await coro
            else:
                points = await asyncio.wait_for(coro, timeout=self._fetch_timeout)
        except TimeoutError:
            reason = (
                f"timed out after {self._fetch_timeout}s"
                if self._fetch_timeout is not None
                else "timed out"
            )
            log.warning(
                "series_fetch_failed",
                symbol=request.symbol,
                series=request.series.label,
                reason=reason,
            )
            return SeriesFailure(reason)
        except SeriesError as e:
            log.warning(
                "series_fetch_failed",
                symbol=request.symbol,
                series=request.series.label,
                error_type=type(e).__name__,
                reason=str(e),
            )
            return SeriesFailure(str(e) or type(e).__name__)
        except Exception as e:
            log.exception(
                "series_fetch_crashed",
                symbol=request.symbol,
                series=request.series.label,
            )
            return SeriesFailure(f"{type(e).__name__}: {e}")

        return SeriesSuccess(points=tuple(points))
