"""
FastAPI application factory for the orders API.

Startup order matters: telemetry is initialized inside create_app(), before
the app object exists, so the pipeline is running before uvicorn binds the
listener and the first request can't produce unexported telemetry.

Run with:
    orders-api
    uvicorn orders_api.api.main:create_app --factory --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __version__
from ..config import Settings, get_settings
from ..exceptions import OrdersAPIError
from ..observability import (
    Telemetry,
    TelemetryConfig,
    create_order_metrics,
    initialize_observability,
    setup_logging,
)
from ..orders.service import OrderService
from ..orders.store import OrderStore
from .context import AppContext
from .routes import monitoring_router, orders_router, simulate_router

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    return f"{location}: {first.get('msg')}" if location else str(first.get("msg"))


def register_exception_handlers(app: FastAPI) -> None:
    """Every error response body is {"error": <message>}."""

    @app.exception_handler(OrdersAPIError)
    async def orders_api_error_handler(request: Request, exc: OrdersAPIError) -> JSONResponse:
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": _validation_message(exc)},
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """
        Global exception handler for unhandled exceptions.
        """
        logger.error(
            "Unhandled exception",
            extra={"error": str(exc), "error_type": type(exc).__name__, "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )


def create_app(
    settings: Optional[Settings] = None,
    telemetry: Optional[Telemetry] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Defaults to the cached environment settings
        telemetry: Pre-built pipeline (tests pass in-memory exporters). When
            omitted the OTLP pipeline is created here and shut down on
            lifespan exit; an injected pipeline is left to its owner.
    """
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.otel_service_name)

    owns_telemetry = telemetry is None
    if owns_telemetry:
        telemetry = initialize_observability(TelemetryConfig.from_settings(settings))

    store = OrderStore()
    order_metrics = create_order_metrics(telemetry.meter)
    context = AppContext(
        settings=settings,
        telemetry=telemetry,
        store=store,
        metrics=order_metrics,
        service=OrderService(store, order_metrics, telemetry.tracer),
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, Any]:
        logger.info(
            "Orders API started",
            extra={"service": settings.otel_service_name, "port": settings.port},
        )
        yield
        logger.info("Orders API shutting down")
        if owns_telemetry:
            telemetry.shutdown()

    app = FastAPI(
        title="Orders API",
        description="Toy order management service instrumented with OpenTelemetry.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.context = context

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(monitoring_router)
    app.include_router(orders_router)
    app.include_router(simulate_router)

    telemetry.instrument_app(app)
    return app


def main() -> None:
    """Console entry point: build the app, then bind the listener."""
    import uvicorn

    settings = get_settings()
    app = create_app(settings)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
