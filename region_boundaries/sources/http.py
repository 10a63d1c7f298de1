"""HTTP boundary source built on ``httpx.AsyncClient``.

Fetches upstream GeoJSON documents.  Every transport, status or decode
failure is wrapped in ``UpstreamFetchError`` so the builder and the
cache deal with a single error type.

Retry classification:
- transport errors (connect, read, timeout): retryable
- HTTP 429 and 5xx: retryable
- other 4xx, invalid JSON: not retryable
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from region_boundaries.core.constants import DEFAULT_FETCH_TIMEOUT_S
from region_boundaries.sources.base import BoundarySource, UpstreamFetchError

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = frozenset({429})


class HttpBoundarySource(BoundarySource):
    """Boundary source fetching documents over HTTP(S).

    Args:
        client: Optional pre-built ``httpx.AsyncClient``.  A client passed
            in is left open by ``aclose()``; one created here is closed.
        timeout_s: Request timeout used when creating the client.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout_s: float = DEFAULT_FETCH_TIMEOUT_S,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)

    @property
    def name(self) -> str:
        return "http"

    async def fetch_json(self, url: str) -> Any:
        """GET *url* and decode the body as JSON.

        Raises:
            UpstreamFetchError: On transport errors, non-2xx responses or
                a body that is not valid JSON.
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            msg = f"HTTP {status} from upstream"
            raise UpstreamFetchError(
                url,
                msg,
                retryable=status >= 500 or status in _RETRYABLE_STATUS,
                status_code=status,
            ) from exc
        except httpx.HTTPError as exc:
            msg = f"Request failed: {exc!r}"
            raise UpstreamFetchError(url, msg, retryable=True) from exc

        try:
            document = response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            msg = f"Response is not valid JSON: {exc}"
            raise UpstreamFetchError(url, msg, status_code=response.status_code) from exc

        logger.debug(
            "Fetched upstream document | url=%s | status=%d | bytes=%d",
            url,
            response.status_code,
            len(response.content),
        )
        return document

    async def aclose(self) -> None:
        """Close the HTTP client if this source created it."""
        if self._owns_client:
            await self._client.aclose()
