"""HttpSeriesSource: series data from the dashboard API layer via httpx.

One async HTTP client per connection, shared by all concurrent fetches.
httpx exceptions and non-success responses are translated into the
SeriesError hierarchy here, at the source boundary.
"""

from __future__ import annotations

from typing import Self

import httpx
import structlog

from chart_signals.config import SourceConfig
from chart_signals.series.errors import (
    MalformedSeriesError,
    SeriesAPIError,
    SeriesAuthError,
    SeriesConnectionError,
    SeriesNotConnectedError,
    SeriesTimeoutError,
)
from chart_signals.series.http.mappers import ENDPOINTS, build_query, payload_to_points
from chart_signals.series.types import (
    NamedSeries,
    Resolution,
    TimeSeriesPoint,
    TimeWindow,
)

logger = structlog.get_logger()


class HttpSeriesSource:
    """SeriesSource implementation backed by the remote API layer.

    Configured by SourceConfig (base_url, api_key, timeout_seconds). A custom
    httpx transport can be injected for tests.
    """

    def __init__(
        self,
        config: SourceConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self) -> None:
        """Open the shared HTTP client."""
        if self._client is not None:
            logger.warning("HttpSeriesSource already connected")
            return

        headers = {"Accept": "application/json"}
        if self._config.api_key:
            headers["Authorization"] = f"Bearer {self._config.api_key}"

        self._client = httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=headers,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )
        logger.info("HttpSeriesSource connected", base_url=self._config.base_url)

    async def disconnect(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is None:
            return
        await self._client.aclose()
        self._client = None
        logger.info("HttpSeriesSource disconnected")

    async def fetch_series(
        self,
        symbol: str,
        series: NamedSeries,
        resolution: Resolution,
        window: TimeWindow,
    ) -> list[TimeSeriesPoint]:
        """Fetch one series via REST."""
        if self._client is None:
            raise SeriesNotConnectedError("Not connected. Call connect() first.")

        params = build_query(
            symbol, series, resolution.token, window.start, window.end
        )
        try:
            response = await self._client.get(ENDPOINTS[series.kind], params=params)
        except httpx.TimeoutException as e:
            raise SeriesTimeoutError(
                f"Timed out fetching {series.label} for {symbol}"
            ) from e
        except httpx.TransportError as e:
            raise SeriesConnectionError(
                f"Failed to reach series API at {self._config.base_url}: {e}"
            ) from e

        if response.status_code in (401, 403):
            raise SeriesAuthError(
                f"Series API rejected credentials ({response.status_code}). "
                "Set CHART_SOURCE__API_KEY."
            )
        if response.is_error:
            raise SeriesAPIError(response.status_code, response.text or "")

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedSeriesError(
                f"Invalid JSON for {series.label} {symbol}"
            ) from e

        points = payload_to_points(series, payload)
        logger.debug(
            "series_fetched",
            symbol=symbol,
            series=series.label,
            points=len(points),
        )
        return points

    async def __aenter__(self) -> Self:
        """Connect on context manager entry."""
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object | None,
    ) -> None:
        """Disconnect on context manager exit.

        Wraps disconnect in try/except to avoid masking the original exception.
        """
        try:
            await self.disconnect()
        except Exception:
            logger.exception("Error during disconnect in __aexit__")
