"""
FastAPI server for the oracle endpoints.

Every oracle failure is turned into a `{"error": ...}` JSON body with the
status code carried by the error; responses are never partial.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from marketoracle import __version__
from marketoracle.api.schemas import BatchPriceRequest, ScanRequest
from marketoracle.api.services import OracleServices, build_services
from marketoracle.cache.store import MemoryCacheStore
from marketoracle.config.constants import CORS_ALLOW_HEADERS
from marketoracle.config.settings import Settings, get_settings
from marketoracle.core.errors import OracleError
from marketoracle.core.types import PriceQuote
from marketoracle.telemetry.logger import setup_logging
from marketoracle.utils.time import to_iso, utc_now


logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    services: OracleServices | None = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings used to wire services (default: environment).
        services: Pre-built services; when given they are used as-is and
            the app does not close them on shutdown.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owned = services is None
        app.state.services = services or build_services(settings or get_settings())
        logger.info("Oracle service started")
        yield
        if owned:
            await app.state.services.close()
        logger.info("Oracle service stopped")

    app = FastAPI(title="Market Oracle", version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=list(CORS_ALLOW_HEADERS),
    )
    app.add_exception_handler(OracleError, oracle_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, validation_error_handler)  # type: ignore[arg-type]

    app.get("/oracle-refprice")(missing_symbol)
    app.get("/oracle-refprice/")(missing_symbol)
    app.post("/oracle-refprice/batch")(get_reference_prices)
    app.get("/oracle-refprice/{symbol}")(get_reference_price)
    app.get("/oracle-dex/{chain}")(missing_pair)
    app.get("/oracle-dex/{chain}/{pair_address}")(get_dex_pair)
    app.post("/arbitrage-scanner")(scan_arbitrage)
    app.get("/health")(get_health)
    return app


def get_services(request: Request) -> OracleServices:
    """Dependency returning the app's service container."""
    return request.app.state.services  # type: ignore[no-any-return]


# =============================================================================
# Error Handlers
# =============================================================================


async def oracle_error_handler(request: Request, exc: OracleError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    )
    return JSONResponse(status_code=400, content={"error": f"Invalid request: {details}"})


# =============================================================================
# Reference Price Endpoints
# =============================================================================


def quote_response(quote: PriceQuote) -> dict[str, Any]:
    return {
        **quote.to_payload(),
        "stale": quote.stale,
        "freshness_sec": round(quote.freshness_sec, 3),
    }


async def missing_symbol() -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Symbol required"})


async def get_reference_price(
    symbol: str,
    services: OracleServices = Depends(get_services),
) -> dict[str, Any]:
    quote = await services.refprice.get_price(symbol)
    return quote_response(quote)


async def get_reference_prices(
    body: BatchPriceRequest,
    services: OracleServices = Depends(get_services),
) -> dict[str, Any]:
    result = await services.refprice.get_prices(body.symbols)
    return {
        "prices": [quote_response(q) for q in result.prices],
        "errors": {symbol: e.message for symbol, e in result.errors.items()},
    }


# =============================================================================
# DEX Endpoints
# =============================================================================


async def missing_pair(chain: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Chain and pair address required"})


async def get_dex_pair(
    chain: str,
    pair_address: str,
    services: OracleServices = Depends(get_services),
) -> dict[str, Any]:
    snapshot = await services.dex.get_pair_snapshot(chain, pair_address)
    return dict(snapshot.to_payload())


# =============================================================================
# Arbitrage Endpoint
# =============================================================================


async def scan_arbitrage(
    body: ScanRequest,
    services: OracleServices = Depends(get_services),
) -> Any:
    try:
        opportunities = await services.scanner.scan(
            body.asset,
            body.min_profit_bps,
            body.chains,
        )
    except OracleError:
        raise
    except Exception as e:
        logger.exception("Arbitrage scanner error")
        return JSONResponse(status_code=500, content={"error": str(e) or "Unknown error"})

    return {"opportunities": [o.to_dict() for o in opportunities]}


# =============================================================================
# Health
# =============================================================================


async def get_health(services: OracleServices = Depends(get_services)) -> dict[str, Any]:
    cache_entries = len(services.cache) if isinstance(services.cache, MemoryCacheStore) else None
    return {
        "status": "ok",
        "version": __version__,
        "cache_entries": cache_entries,
        "symbols": sorted(services.refprice.supported_symbols),
        "metrics": services.metrics.snapshot(),
    }


app = create_app()


def main() -> None:
    import uvicorn

    settings = get_settings()
    async_logger = setup_logging(settings.log_level)

    print(
        f"""
╔═══════════════════════════════════════════════════════════════╗
║                 MARKET ORACLE - API SERVER                    ║
╚═══════════════════════════════════════════════════════════════╝

Version:   {__version__}
Endpoints: http://{settings.host}:{settings.port}
Started:   {to_iso(utc_now())}
Press Ctrl+C to stop.
    """
    )
    try:
        uvicorn.run(
            create_app(settings),
            host=settings.host,
            port=settings.port,
            log_level="warning",
        )
    finally:
        async_logger.stop()


if __name__ == "__main__":
    main()
