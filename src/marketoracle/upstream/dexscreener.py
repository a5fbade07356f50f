"""DexScreener pair client."""

from typing import Any

from marketoracle.config.constants import ENDPOINT_DEX_PAIRS
from marketoracle.upstream.client import UpstreamClient


class DexScreenerClient(UpstreamClient):
    """Fetches raw pair documents from DexScreener."""

    provider = "dexscreener"

    async def get_pair(self, chain: str, pair_address: str) -> dict[str, Any] | None:
        """
        Get the first pair document for a chain and pair address.

        Returns:
            The raw pair object, or None if DexScreener has no such pair.
        """
        data = await self._get_json(f"{ENDPOINT_DEX_PAIRS}/{chain}/{pair_address}")
        if not isinstance(data, dict):
            return None

        pairs = data.get("pairs")
        if isinstance(pairs, list) and pairs and isinstance(pairs[0], dict):
            return pairs[0]

        # Newer API revisions return a single "pair" object
        pair = data.get("pair")
        return pair if isinstance(pair, dict) else None
