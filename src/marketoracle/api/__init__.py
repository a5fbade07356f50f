"""HTTP API exposing the oracles and the arbitrage scanner."""

from marketoracle.api.server import create_app
from marketoracle.api.services import OracleServices, build_services


__all__ = [
    "OracleServices",
    "build_services",
    "create_app",
]
