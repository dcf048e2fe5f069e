"""
audnet Adapter Server.

Main entry point for the HTTP API that runs OpenRTB bid requests through
the Audience Network adapter.
"""

import time
from contextlib import asynccontextmanager
from typing import Any

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from audnet.ad_server.middleware.metrics import MetricsMiddleware, metrics_endpoint
from audnet.ad_server.routers import auction, health
from audnet.ad_server.services.dispatcher import BidderDispatcher
from audnet.adapters.audience_network import new_audience_network_bidder
from audnet.common.config import get_settings
from audnet.common.exceptions import AudnetError
from audnet.common.logger import clear_log_context, get_logger, log_context, setup_logging
from audnet.common.utils import generate_request_id
from audnet.schemas.response import ErrorResponse

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    logger.info(
        "Starting audnet server",
        version=settings.app_version,
        env=settings.env,
        endpoint=settings.adapter.endpoint,
    )

    client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_client.timeout_ms / 1000),
        limits=httpx.Limits(
            max_connections=settings.http_client.max_connections,
            max_keepalive_connections=settings.http_client.max_keepalive_connections,
        ),
    )
    app.state.dispatcher = BidderDispatcher(
        bidder=new_audience_network_bidder(settings.adapter),
        client=client,
        timeout_ms=settings.http_client.timeout_ms,
    )

    logger.info("audnet server started successfully")

    yield

    logger.info("Shutting down audnet server")
    await client.aclose()
    logger.info("audnet server stopped")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    settings = get_settings()
    setup_logging(settings.logging)

    app = FastAPI(
        title="audnet",
        description="Audience Network bidder adapter – OpenRTB in, placement bids out",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    if settings.monitoring.enabled:
        app.add_middleware(MetricsMiddleware)
        app.add_api_route("/metrics", metrics_endpoint, methods=["GET"], tags=["monitoring"])

    # Request logging middleware
    @app.middleware("http")
    async def logging_middleware(request: Request, call_next: Any) -> Any:
        """Log all requests with timing."""
        request_id = generate_request_id()
        log_context(request_id=request_id)

        start_time = time.perf_counter()

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            "Request completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round(duration_ms, 2),
        )

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"

        clear_log_context()

        return response

    # Exception handlers
    @app.exception_handler(AudnetError)
    async def audnet_error_handler(
        request: Request,
        exc: AudnetError,
    ) -> JSONResponse:
        """Handle audnet errors."""
        logger.warning(
            "audnet error",
            error=exc.__class__.__name__,
            message=exc.message,
            details=exc.details,
        )

        return JSONResponse(
            status_code=400,
            content=ErrorResponse(
                error=exc.__class__.__name__,
                message=exc.message,
                details=exc.details,
            ).model_dump(),
        )

    @app.exception_handler(Exception)
    async def general_error_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Handle unexpected errors."""
        logger.error(
            "Unexpected error",
            error=str(exc),
            error_type=exc.__class__.__name__,
        )

        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="InternalServerError",
                message="An unexpected error occurred",
            ).model_dump(),
        )

    app.include_router(health.router, tags=["health"])
    app.include_router(auction.router, prefix="/api/v1/auction", tags=["auction"])

    return app


app = create_app()


def main() -> None:
    """Run the server using uvicorn."""
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "audnet.ad_server.main:app",
        host=settings.server.host,
        port=settings.server.port,
        workers=settings.server.workers,
        reload=settings.server.reload,
        log_level="info" if not settings.debug else "debug",
    )


if __name__ == "__main__":
    main()
