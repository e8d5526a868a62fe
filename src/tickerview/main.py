# src/tickerview/main.py
# Copyright (c) Tickerview.
# SPDX-License-Identifier: MIT
"""
Application Entry (Adapters Bootstrap)

Synopsis:
    FastAPI bootstrap for the ``/stock-data`` service. Provides an application
    factory (`create_app`) and a module-level eager app (`app`) for uvicorn.

Design:
    • Bootstrap only (no business logic): routers + middleware + handlers.
    • Every error leaves the service as ``{"status": "error", "message": ...}``.
    • CORS is open by default; browser charts call this endpoint cross-origin.
"""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException
from starlette.requests import Request
from starlette.responses import Response as StarletteResponse

from tickerview import __version__
from tickerview.adapters.routers import health_router, metrics_router, stock_data_router
from tickerview.config.settings import Settings, get_settings
from tickerview.infrastructure.http.errors import (
    handle_http_exception,
    handle_unhandled_exception,
    handle_validation_error,
)
from tickerview.infrastructure.logging.logger import (
    configure_root_logging,
    get_json_logger,
)
from tickerview.infrastructure.middleware.request_id import RequestIdMiddleware

logger = get_json_logger(__name__)


def _attach_cors(app: FastAPI, settings: Settings) -> None:
    allow_origins = settings.cors_allow_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        # Credentials cannot be combined with a wildcard origin.
        allow_credentials="*" not in allow_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )


def _patch_exception_handlers(app: FastAPI) -> None:
    """Replace FastAPI's default error bodies with the service envelope."""

    async def _http_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, HTTPException):
            raise exc
        return await handle_http_exception(request, exc)

    async def _validation_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        if not isinstance(exc, RequestValidationError):
            raise exc
        return await handle_validation_error(request, exc)

    async def _unhandled_error_handler(request: Request, exc: Exception) -> StarletteResponse:
        return await handle_unhandled_exception(request, exc)

    app.add_exception_handler(HTTPException, _http_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        settings: Optional explicit settings; defaults to the cached singleton.

    Returns:
        FastAPI: Fully configured application instance.
    """
    settings = settings or get_settings()
    configure_root_logging(settings.log_level)

    app = FastAPI(
        title="Tickerview Stock Data",
        version=__version__,
        description="Paginated historical daily bars for charting clients.",
    )

    _patch_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    _attach_cors(app, settings)

    app.include_router(stock_data_router)
    app.include_router(health_router)
    app.include_router(metrics_router)

    logger.info(
        "service_startup",
        extra={
            "extra": {
                "env": settings.environment.value,
                "version": __version__,
                "data_source": settings.data_source.value,
            }
        },
    )
    return app


# Eager app for uvicorn and tooling.
app: FastAPI = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(
        "tickerview.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=int(os.getenv("PORT", "8080")),
    )
