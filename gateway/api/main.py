"""FastAPI application for the swap gateway.

Rate limiting is left to the reverse proxy in front of the service.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from gateway import __version__
from gateway.api.endpoints import router
from gateway.config import Settings
from gateway.engine import SwapEngine
from gateway.errors import GatewayError

logger = structlog.get_logger()

# Maximum request body size (1 MB)
MAX_REQUEST_SIZE = 1024 * 1024


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog for console output at the given level."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        cache_logger_on_first_use=True,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = Settings.from_env()
    app.state.engine = await SwapEngine.from_settings(settings)
    yield


app = FastAPI(
    title="Swap Gateway",
    description="Route, price and execute UniswapV2 swaps",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    logger.warning(
        "request_failed",
        path=request.url.path,
        error=exc.code,
        message=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(router)


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok"}


def run() -> None:
    """Run the gateway API server.

    Configuration via environment variables (see gateway.config.Settings):
    - GATEWAY_HOST: Host to bind to (default: 0.0.0.0)
    - GATEWAY_PORT: Port to bind to (default: 5000)
    - GATEWAY_DEBUG: Enable debug/reload mode (default: false)
    - GATEWAY_LOG_LEVEL: Log level (default: INFO)
    """
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(
        "gateway.api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
