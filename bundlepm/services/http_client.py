"""
HTTP GET capability used for package lists and manifest files.
"""
from __future__ import annotations

import logging
from typing import Optional

import httpx

from bundlepm.domain.models import FetchResponse

logger = logging.getLogger(__name__)


DEFAULT_TIMEOUT_SECONDS = 60.0


class HttpFetcher:
    """
    Thin wrapper around a shared ``httpx.AsyncClient``.

    Use as an async context manager. ``fetch`` never raises for transport
    problems: a request that produced no response comes back with
    ``status_code == 0`` and ``error`` set.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "HttpFetcher":
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch(self, url: str) -> FetchResponse:
        if self._client is None:
            raise RuntimeError("HttpFetcher must be entered with 'async with' before use")

        logger.debug(f"GET {url}")
        try:
            response = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Request to {url} failed: {e}")
            return FetchResponse(url=url, status_code=0, error=str(e) or type(e).__name__)

        if response.status_code != 200:
            logger.debug(f"GET {url} returned {response.status_code}")
        return FetchResponse(url=url, status_code=response.status_code, body=response.text)
