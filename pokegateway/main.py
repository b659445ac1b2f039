"""
PokeGateway - Pokemon Microservices Gateway

Entry point for the FastAPI application.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import httpx
from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from pokegateway.logging import configure_logging, get_logger
from pokegateway.middleware import log_requests
from pokegateway.state import AppState
from pokegateway.routers import internal, proxy, search, status
from pokegateway.services.registry import ServiceRegistry
from pokegateway.config import AppConfig, load_config

load_dotenv()

logger = get_logger(__name__)


def _init_registry(config: AppConfig) -> ServiceRegistry:
    """Build the backend registry from configuration."""
    registry = ServiceRegistry(config.service_urls())
    logger.bind(microservices=dict(registry)).info(f"Loaded {len(registry)} backend services")
    return registry


def _init_http_client() -> httpx.AsyncClient:
    """Initialize shared HTTP client for backend requests."""
    http_client = httpx.AsyncClient(timeout=30.0, follow_redirects=True)
    logger.info("HTTP client initialized")
    return http_client


async def _shutdown_http_client(http_client: httpx.AsyncClient) -> None:
    """Close the shared HTTP client."""
    await http_client.aclose()
    logger.info("HTTP client closed")


async def route_not_found(request: Request, exc: StarletteHTTPException):
    """Describe the available endpoints on 404, keep FastAPI's default body otherwise."""
    if exc.status_code != 404:
        return await http_exception_handler(request, exc)

    logger.bind(method=request.method, url=request.url.path).warning(
        f"Route not found: {request.url.path}"
    )
    return JSONResponse(
        status_code=404,
        content={
            "error": "Route not found",
            "method": request.method,
            "url": str(request.url.path),
            "available_endpoints": internal.AVAILABLE_ENDPOINTS,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


async def internal_error(request: Request, exc: Exception):
    """Last-resort handler for faults in the gateway itself."""
    logger.opt(exception=exc).error(f"Unhandled error in gateway: {request.method} {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal gateway error",
            "message": str(exc),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )


def create_app(config: AppConfig | None = None) -> FastAPI:
    """
    Build the gateway application.

    Configuration is resolved in the lifespan, so a missing backend URL
    stops startup with a ConfigurationError before any request is served.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager - handles startup and shutdown."""
        app_config = config if config is not None else load_config()
        configure_logging(app_config.log_level, app_config.log_json)
        registry = _init_registry(app_config)
        http_client = _init_http_client()
        try:
            app.state.gateway = AppState(app_config, registry, http_client)
        except Exception:
            await _shutdown_http_client(http_client)
            raise

        yield

        await _shutdown_http_client(http_client)

    app = FastAPI(
        title="PokeGateway",
        description="Pokemon Microservices Gateway",
        version=internal.GATEWAY_VERSION,
        lifespan=lifespan
    )

    app.middleware("http")(log_requests)
    app.add_exception_handler(StarletteHTTPException, route_not_found)
    app.add_exception_handler(Exception, internal_error)

    app.include_router(internal.router)
    app.include_router(status.router)
    app.include_router(search.router)
    app.include_router(proxy.router)
    return app


app = create_app()
