"""BoundarySource abstract base class.

Defines the contract the collection builder uses to obtain upstream
JSON documents.  The builder never knows whether the documents come
from HTTP, a fixture directory or an in-memory fake.

Lifecycle:
    1. ``fetch_json(url)``: any number of times, possibly concurrently.
    2. ``aclose()``:        release transport resources.
"""

from __future__ import annotations

import abc
from typing import Any

from region_boundaries.core.exceptions import BoundaryServiceError


class BoundarySource(abc.ABC):
    """Abstract base class for upstream document sources.

    Implementations must be safe to call concurrently from several
    tasks on one event loop.
    """

    @property
    def name(self) -> str:
        """Short source name used in log lines and errors."""
        return type(self).__name__

    @abc.abstractmethod
    async def fetch_json(self, url: str) -> Any:
        """Fetch *url* and return its decoded JSON body.

        Args:
            url: Absolute document URL.

        Returns:
            The decoded JSON value.  No shape is guaranteed; callers
            validate what they use.

        Raises:
            UpstreamFetchError: If the document cannot be fetched or
                decoded.
        """

    async def aclose(self) -> None:  # noqa: B027
        """Release resources held by the source.  Default: nothing to do."""

    async def __aenter__(self) -> BoundarySource:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


# ---------------------------------------------------------------------------
# Source exceptions
# ---------------------------------------------------------------------------


class UpstreamFetchError(BoundaryServiceError):
    """An upstream document could not be fetched or decoded.

    Any such failure aborts the whole collection build; the cache relays
    it unchanged to every caller attached to that build.

    Attributes:
        url: The document URL that failed.
        status_code: HTTP status code, when a response was received.
    """

    default_stage = "fetch"
    default_code = "UPSTREAM_FETCH_FAILED"

    def __init__(
        self,
        url: str,
        message: str,
        *,
        retryable: bool = False,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message, retryable=retryable)

    def __str__(self) -> str:
        return f"[{self.url}] {self.message}"
