"""Caching oracles for reference prices and DEX pairs."""

from marketoracle.oracle.dex import DexPairOracle
from marketoracle.oracle.refprice import BatchPriceResult, ReferencePriceOracle
from marketoracle.oracle.retry import RetryPolicy


__all__ = [
    "BatchPriceResult",
    "DexPairOracle",
    "ReferencePriceOracle",
    "RetryPolicy",
]
