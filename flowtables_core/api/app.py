"""
FastAPI Application Module

This module provides the main FastAPI application setup with
all routes, middleware, and configuration.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import AppConfig
from ..container import ServiceContainer
from ..core.exceptions import APIException, ErrorCode
from ..core.logging import setup_logging
from .base import error_response, generate_request_id
from .routes import fields_router, records_router, tables_router


logger = logging.getLogger(__name__)


# =============================================================================
# Health Check Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    timestamp: datetime
    checks: Dict[str, Any] = {}


# =============================================================================
# Exception Handlers
# =============================================================================


async def api_exception_handler(request: Request, exc: APIException):
    """Handle API exceptions."""
    request_id = getattr(request.state, "request_id", None) or generate_request_id()

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response(exc, request_id),
    )


async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions."""
    request_id = getattr(request.state, "request_id", None) or generate_request_id()

    error_codes = {
        400: ErrorCode.VALIDATION_ERROR,
        404: ErrorCode.RESOURCE_NOT_FOUND,
        409: ErrorCode.RESOURCE_CONFLICT,
        422: ErrorCode.VALIDATION_ERROR,
        500: ErrorCode.INTERNAL_ERROR,
    }
    error_code = error_codes.get(exc.status_code, ErrorCode.INTERNAL_ERROR)

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "data": None,
            "error": {
                "code": error_code.value,
                "message": exc.detail,
                "request_id": request_id,
            },
            "request_id": request_id,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


async def generic_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    request_id = getattr(request.state, "request_id", None) or generate_request_id()

    logger.exception(f"Unhandled exception: {exc}", extra={"request_id": request_id})

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "data": None,
            "error": {
                "code": ErrorCode.INTERNAL_ERROR.value,
                "message": "An unexpected error occurred",
                "request_id": request_id,
            },
            "request_id": request_id,
            "timestamp": datetime.utcnow().isoformat(),
        },
    )


# =============================================================================
# Application Factory
# =============================================================================


def create_app(
    config: Optional[AppConfig] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        services: Pre-built services; built from the config when omitted

    Returns:
        Configured FastAPI application
    """
    config = config or AppConfig.from_env()
    services = services or ServiceContainer.build(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Flow Tables API...")
        await services.start()

        yield

        logger.info("Shutting down Flow Tables API...")
        await services.stop()

    app = FastAPI(
        title=config.title,
        description=config.description,
        version=config.version,
        docs_url="/docs" if config.docs_enabled else None,
        redoc_url="/redoc" if config.docs_enabled else None,
        openapi_url="/openapi.json" if config.docs_enabled else None,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(APIException, api_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check():
        """Health check endpoint."""
        db_healthy = await services.database.health_check()

        return HealthResponse(
            status="healthy" if db_healthy else "degraded",
            version=config.version,
            timestamp=datetime.utcnow(),
            checks={
                "api": "ok",
                "database": "ok" if db_healthy else "error",
            },
        )

    app.include_router(tables_router, prefix=config.api_prefix)
    app.include_router(fields_router, prefix=config.api_prefix)
    app.include_router(records_router, prefix=config.api_prefix)

    return app


# =============================================================================
# Entry Point
# =============================================================================


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    reload: bool = False,
):
    """Run the API server."""
    import uvicorn

    config = AppConfig.from_env()
    setup_logging(level=config.log_level, format=config.log_format)

    uvicorn.run(
        "flowtables_core.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run_server(reload=True)
