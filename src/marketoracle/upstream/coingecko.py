"""CoinGecko simple-price client."""

from marketoracle.config.constants import ENDPOINT_SIMPLE_PRICE
from marketoracle.core.errors import UpstreamUnavailableError
from marketoracle.telemetry.metrics import MetricsCollector
from marketoracle.upstream.client import UpstreamClient
from marketoracle.upstream.rate_limiter import RateLimiter


class CoinGeckoClient(UpstreamClient):
    """Fetches USD reference prices by CoinGecko coin id."""

    provider = "coingecko"

    def __init__(
        self,
        base_url: str,
        rate_limiter: RateLimiter,
        timeout: float,
        api_key: str | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        headers = {"x-cg-demo-api-key": api_key} if api_key else None
        super().__init__(
            base_url=base_url,
            rate_limiter=rate_limiter,
            timeout=timeout,
            headers=headers,
            metrics=metrics,
        )

    async def get_usd_price(self, coin_id: str) -> float:
        """
        Get the USD price of a coin.

        Args:
            coin_id: CoinGecko coin id (e.g., "ethereum").

        Returns:
            Price in USD.

        Raises:
            RateLimitedError: If CoinGecko rejected the call with 429.
            UpstreamUnavailableError: If the call failed or had no price.
        """
        data = await self._get_json(
            ENDPOINT_SIMPLE_PRICE,
            params={"ids": coin_id, "vs_currencies": "usd"},
        )

        entry = data.get(coin_id) if isinstance(data, dict) else None
        price = entry.get("usd") if isinstance(entry, dict) else None

        if not isinstance(price, (int, float)) or price <= 0:
            raise UpstreamUnavailableError("Price not found in CoinGecko response")

        return float(price)
