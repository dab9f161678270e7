"""Series source error hierarchy.

All source-related exceptions inherit from SeriesError, so the fetch
orchestrator can turn any of them into a SeriesFailure at one boundary.
"""

from __future__ import annotations


class SeriesError(Exception):
    """Base exception for all series-related errors."""


class SeriesConnectionError(SeriesError):
    """The series source could not be reached."""


class SeriesAuthError(SeriesError):
    """Invalid or missing API credentials (HTTP 401/403)."""


class SeriesAPIError(SeriesError):
    """Non-success response from the series API.

    Stores the HTTP status code and error message from the source.
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Series API error {status_code}: {message}")


class SeriesTimeoutError(SeriesError):
    """Request timeout when fetching a series."""


class SeriesNotConnectedError(SeriesError):
    """Method called before connect() was called."""


class SeriesUnavailableError(SeriesError):
    """The source has no data for the request (e.g. too few candles)."""


class MalformedSeriesError(SeriesError):
    """Payload could not be turned into an ordered point sequence."""


class EmptySeriesError(SeriesError):
    """Latest element requested from an empty sequence."""
