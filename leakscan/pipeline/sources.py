"""Content sources — turn a work item into a ContentBlob.

  - HttpContentSource: GET over a shared ``httpx.AsyncClient``
  - FileContentSource: filesystem read, offloaded to a worker thread

Both raise ``FetchError`` on any per-item failure. A fetch error is never
fatal to the run: the worker counts the item as processed with no results.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional, Protocol

import httpx

from leakscan.models.scan import ContentBlob
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)

# Keep-alive expiry for pooled connections (seconds).
POOL_KEEPALIVE_EXPIRY: float = 30.0


class FetchError(Exception):
    """Content for one location could not be obtained."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason


class ContentSource(Protocol):
    """Anything that can fetch content for a work item."""

    async def fetch(self, location: str) -> ContentBlob:
        ...

    async def aclose(self) -> None:
        ...


# ─── HTTP ─────────────────────────────────────────────────────────────────────


def create_http_client(
    user_agent: str,
    timeout: float,
    max_connections: int,
) -> httpx.AsyncClient:
    """Create the shared httpx.AsyncClient for one run.

    The client is created once per run and shared by every worker. It is
    NEVER instantiated per-request.

    Args:
        user_agent:      Value of the User-Agent header on every request.
        timeout:         Per-request timeout in seconds.
        max_connections: Pool size; matches the worker concurrency.

    Returns:
        Configured httpx.AsyncClient ready for use.
    """
    return httpx.AsyncClient(
        headers={"User-Agent": user_agent},
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_connections,
            keepalive_expiry=POOL_KEEPALIVE_EXPIRY,
        ),
        timeout=httpx.Timeout(timeout),
        verify=False,  # scan targets routinely serve self-signed certificates
        follow_redirects=False,
    )


class HttpContentSource:
    """Fetch remote pages and scripts.

    Any status code is accepted: error pages get scanned like any other body.
    """

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(
        cls,
        user_agent: str,
        timeout: float,
        max_connections: int,
    ) -> "HttpContentSource":
        return cls(create_http_client(user_agent, timeout, max_connections))

    async def fetch(self, location: str) -> ContentBlob:
        try:
            response = await self._client.get(location)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise FetchError(location, f"{type(exc).__name__}: {exc}") from exc
        logger.debug(
            "Fetched",
            url=location,
            status=response.status_code,
            bytes=len(response.content),
        )
        return ContentBlob(location=location, content=response.content)

    async def aclose(self) -> None:
        await self._client.aclose()


# ─── Filesystem ───────────────────────────────────────────────────────────────


class FileContentSource:
    """Read local files without blocking the event loop."""

    def __init__(self, base_dir: Optional[Path] = None) -> None:
        self._base_dir = base_dir

    async def fetch(self, location: str) -> ContentBlob:
        path = Path(location)
        if self._base_dir is not None and not path.is_absolute():
            path = self._base_dir / path
        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise FetchError(location, exc.strerror or str(exc)) from exc
        return ContentBlob(location=location, content=content)

    async def aclose(self) -> None:
        return None
