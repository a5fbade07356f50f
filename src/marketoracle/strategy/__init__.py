"""Arbitrage scanning: cost model, price sources, and the scanner."""

from marketoracle.strategy.costs import CostModel
from marketoracle.strategy.price_source import (
    LiveDexPriceSource,
    OracleBasePrices,
    StaticBasePrices,
    SyntheticPriceSource,
)
from marketoracle.strategy.scanner import ArbitrageScanner


__all__ = [
    "ArbitrageScanner",
    "CostModel",
    "LiveDexPriceSource",
    "OracleBasePrices",
    "StaticBasePrices",
    "SyntheticPriceSource",
]
