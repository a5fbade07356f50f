"""
Async REST client base for upstream market-data providers.

Provides:
- One pooled aiohttp session per provider
- Fast JSON parsing with orjson
- Integrated rate limiting
- Mapping of transport and HTTP failures onto the oracle error taxonomy
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import orjson

from marketoracle.config.constants import DEFAULT_REQUEST_TIMEOUT, HTTP_TOO_MANY_REQUESTS
from marketoracle.core.errors import RateLimitedError, UpstreamUnavailableError
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.upstream.rate_limiter import RateLimiter
from marketoracle.utils.math import parse_float
from marketoracle.utils.time import get_timestamp_us


logger = logging.getLogger(__name__)


class UpstreamClient:
    """
    Base class for provider clients.

    Subclasses set `provider` and call `_get_json` for each endpoint.
    """

    provider: str = "upstream"

    def __init__(
        self,
        base_url: str,
        rate_limiter: RateLimiter,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        headers: dict[str, str] | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Provider base URL without trailing slash.
            rate_limiter: Request budget for this provider.
            timeout: Total timeout per request in seconds.
            headers: Extra default headers.
            metrics: Optional metrics sink for latency and error counts.
        """
        self._base_url = base_url.rstrip("/")
        self._rate_limiter = rate_limiter
        self._timeout = aiohttp.ClientTimeout(total=timeout)
        self._headers = {"Accept": "application/json", **(headers or {})}
        self._metrics = metrics
        self._session: aiohttp.ClientSession | None = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                keepalive_timeout=30,
                enable_cleanup_closed=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                headers=self._headers,
                timeout=self._timeout,
                json_serialize=lambda x: orjson.dumps(x).decode(),
            )

        return self._session

    async def close(self) -> None:
        """Close the client session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    @asynccontextmanager
    async def _request_context(self) -> AsyncIterator[aiohttp.ClientSession]:
        """Context manager for making requests."""
        session = await self._get_session()
        try:
            yield session
        except aiohttp.ClientError as e:
            raise UpstreamUnavailableError(f"{self.provider} network error: {e}") from e
        except TimeoutError as e:
            raise UpstreamUnavailableError(f"{self.provider} request timed out") from e

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """
        Send a GET request and decode the JSON body.

        Args:
            path: Endpoint path, starting with a slash.
            params: Query parameters.

        Returns:
            Decoded JSON document.

        Raises:
            RateLimitedError: On HTTP 429.
            UpstreamUnavailableError: On any other failure.
        """
        await self._rate_limiter.acquire()

        url = f"{self._base_url}{path}"
        start_us = get_timestamp_us()

        try:
            async with self._request_context() as session:
                async with session.get(url, params=params) as response:
                    return await self._handle_response(response)
        except UpstreamUnavailableError:
            self._count("upstream_errors")
            raise
        finally:
            if self._metrics is not None:
                self._metrics.record_latency(
                    f"{self.provider}_request", get_timestamp_us() - start_us
                )

    async def _handle_response(self, response: aiohttp.ClientResponse) -> Any:
        """Parse and validate response."""
        if response.status == HTTP_TOO_MANY_REQUESTS:
            retry_after = parse_float(response.headers.get("Retry-After"), default=-1.0)
            logger.warning(f"{self.provider} rate limited the request")
            self._count("upstream_rate_limited")
            raise RateLimitedError(
                f"{self.provider} API rate limited",
                retry_after=retry_after if retry_after >= 0 else None,
            )

        if response.status != 200:
            raise UpstreamUnavailableError(f"{self.provider} API error: {response.status}")

        text = await response.text()
        try:
            return orjson.loads(text)
        except orjson.JSONDecodeError as e:
            raise UpstreamUnavailableError(f"{self.provider} returned invalid JSON: {e}") from e

    def _count(self, name: str) -> None:
        if self._metrics is not None:
            self._metrics.increment_counter(name)

    async def __aenter__(self) -> "UpstreamClient":
        """Async context manager entry."""
        await self._get_session()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Async context manager exit."""
        await self.close()
