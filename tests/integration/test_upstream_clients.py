"""
Integration tests for the CoinGecko and DexScreener clients.

Runs the clients against a local aiohttp server that mimics the
provider endpoints.
"""

from collections.abc import Awaitable, Callable

import pytest
from aiohttp import test_utils, web

from marketoracle.core.errors import RateLimitedError, UpstreamUnavailableError
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.upstream.coingecko import CoinGeckoClient
from marketoracle.upstream.dexscreener import DexScreenerClient
from marketoracle.upstream.rate_limiter import RateLimiter
from tests.mocks.upstream import USDC_WETH_POOL, dexscreener_pair


Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def make_server(routes: dict[str, Handler]) -> test_utils.TestServer:
    app = web.Application()
    for path, handler in routes.items():
        app.router.add_get(path, handler)
    return test_utils.TestServer(app)


def coingecko_client(server: test_utils.TestServer, **kwargs) -> CoinGeckoClient:
    return CoinGeckoClient(
        base_url=str(server.make_url("/")),
        rate_limiter=RateLimiter(requests_per_minute=600),
        timeout=5,
        **kwargs,
    )


def dexscreener_client(server: test_utils.TestServer) -> DexScreenerClient:
    return DexScreenerClient(
        base_url=str(server.make_url("/")),
        rate_limiter=RateLimiter(requests_per_minute=600),
        timeout=5,
    )


class TestCoinGeckoClient:
    """Tests for CoinGeckoClient."""

    @pytest.mark.asyncio
    async def test_get_usd_price(self) -> None:
        """Test a successful simple-price lookup."""
        seen: dict[str, str] = {}

        async def simple_price(request: web.Request) -> web.Response:
            seen.update(request.query)
            return web.json_response({"ethereum": {"usd": 2512.34}})

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server) as client:
                price = await client.get_usd_price("ethereum")

        assert price == 2512.34
        assert seen == {"ids": "ethereum", "vs_currencies": "usd"}

    @pytest.mark.asyncio
    async def test_api_key_header(self) -> None:
        """Test that the demo API key is sent when configured."""
        seen: dict[str, str | None] = {}

        async def simple_price(request: web.Request) -> web.Response:
            seen["key"] = request.headers.get("x-cg-demo-api-key")
            return web.json_response({"bitcoin": {"usd": 45000}})

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server, api_key="demo-key") as client:
                await client.get_usd_price("bitcoin")

        assert seen["key"] == "demo-key"

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        """Test that HTTP 429 maps to RateLimitedError with Retry-After."""
        metrics = MetricsCollector()

        async def simple_price(request: web.Request) -> web.Response:
            return web.json_response(
                {"status": {"error_code": 429}}, status=429, headers={"Retry-After": "12"}
            )

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server, metrics=metrics) as client:
                with pytest.raises(RateLimitedError) as exc_info:
                    await client.get_usd_price("ethereum")

        assert exc_info.value.retry_after == 12.0
        assert metrics.get_counter("upstream_rate_limited") == 1

    @pytest.mark.asyncio
    async def test_server_error(self) -> None:
        """Test that other non-200 statuses are upstream failures."""

        async def simple_price(request: web.Request) -> web.Response:
            return web.Response(status=503, text="maintenance")

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server) as client:
                with pytest.raises(UpstreamUnavailableError, match="API error: 503") as exc_info:
                    await client.get_usd_price("ethereum")

        assert not isinstance(exc_info.value, RateLimitedError)

    @pytest.mark.asyncio
    async def test_missing_price(self) -> None:
        """Test that a response without the coin is an upstream failure."""

        async def simple_price(request: web.Request) -> web.Response:
            return web.json_response({})

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server) as client:
                with pytest.raises(UpstreamUnavailableError, match="Price not found"):
                    await client.get_usd_price("ethereum")

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        """Test that an unparseable body is an upstream failure."""

        async def simple_price(request: web.Request) -> web.Response:
            return web.Response(text="<html>oops</html>", content_type="text/html")

        async with make_server({"/api/v3/simple/price": simple_price}) as server:
            async with coingecko_client(server) as client:
                with pytest.raises(UpstreamUnavailableError, match="invalid JSON"):
                    await client.get_usd_price("ethereum")

    @pytest.mark.asyncio
    async def test_connection_refused(self) -> None:
        """Test that transport errors are upstream failures."""
        client = CoinGeckoClient(
            base_url="http://127.0.0.1:1",
            rate_limiter=RateLimiter(requests_per_minute=600),
            timeout=2,
        )

        try:
            with pytest.raises(UpstreamUnavailableError, match="network error"):
                await client.get_usd_price("ethereum")
        finally:
            await client.close()


class TestDexScreenerClient:
    """Tests for DexScreenerClient."""

    @pytest.mark.asyncio
    async def test_get_pair(self) -> None:
        """Test that the first pair document is returned."""

        async def pairs(request: web.Request) -> web.Response:
            assert request.match_info["chain"] == "ethereum"
            return web.json_response({"pairs": [dexscreener_pair(fee_tier="5")]})

        async with make_server({"/latest/dex/pairs/{chain}/{pair}": pairs}) as server:
            async with dexscreener_client(server) as client:
                pair = await client.get_pair("ethereum", USDC_WETH_POOL)

        assert pair is not None
        assert pair["priceUsd"] == "1.0012"
        assert pair["feeTier"] == "5"

    @pytest.mark.asyncio
    async def test_single_pair_shape(self) -> None:
        """Test the single-object response shape."""

        async def pairs(request: web.Request) -> web.Response:
            return web.json_response({"pairs": None, "pair": dexscreener_pair()})

        async with make_server({"/latest/dex/pairs/{chain}/{pair}": pairs}) as server:
            async with dexscreener_client(server) as client:
                pair = await client.get_pair("ethereum", USDC_WETH_POOL)

        assert pair is not None
        assert pair["dexId"] == "uniswap"

    @pytest.mark.asyncio
    async def test_unknown_pair(self) -> None:
        """Test that an empty result means no such pair."""

        async def pairs(request: web.Request) -> web.Response:
            return web.json_response({"schemaVersion": "1.0.0", "pairs": None})

        async with make_server({"/latest/dex/pairs/{chain}/{pair}": pairs}) as server:
            async with dexscreener_client(server) as client:
                assert await client.get_pair("ethereum", "0xdead") is None

    @pytest.mark.asyncio
    async def test_not_found_status(self) -> None:
        """Test that a 404 from the provider is an upstream failure."""

        async def pairs(request: web.Request) -> web.Response:
            return web.Response(status=404)

        async with make_server({"/latest/dex/pairs/{chain}/{pair}": pairs}) as server:
            async with dexscreener_client(server) as client:
                with pytest.raises(UpstreamUnavailableError, match="dexscreener API error: 404"):
                    await client.get_pair("ethereum", "0xdead")
