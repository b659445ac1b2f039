"""
Application state - components wired together at startup.
"""
from __future__ import annotations

import time

import httpx
from fastapi import HTTPException, Request

from pokegateway.config import AppConfig
from pokegateway.logging import get_logger
from pokegateway.services.aggregator import SearchAggregator
from pokegateway.services.backend_client import BackendClient
from pokegateway.services.health import HealthAggregator
from pokegateway.services.proxy import ReverseProxy
from pokegateway.services.registry import PROXY_ROUTES, ServiceRegistry
from pokegateway.services.stats import StatsCollector

logger = get_logger(__name__)


class AppState:
    """
    Application state container.
    Built in the lifespan, stored on ``app.state.gateway`` and injected into
    routes via the ``get_app_state`` dependency.
    """

    def __init__(self, config: AppConfig, registry: ServiceRegistry, http_client: httpx.AsyncClient):
        # Every proxied prefix must point at a registered backend
        registry.require(PROXY_ROUTES.values())

        self.config = config
        self.registry = registry
        self.http_client = http_client
        self.started_at = time.monotonic()
        self.stats = StatsCollector(registry)

        client = BackendClient(http_client)
        self.proxy = ReverseProxy(registry, client, self.stats, timeout=config.proxy_timeout_seconds)
        self.aggregator = SearchAggregator(registry, client, self.stats, timeout=config.search_timeout_seconds)
        self.health = HealthAggregator(registry, client, timeout=config.health_timeout_seconds)

    @property
    def uptime_seconds(self) -> float:
        return round(time.monotonic() - self.started_at, 3)


def get_app_state(request: Request) -> AppState:
    state = getattr(request.app.state, "gateway", None)
    if state is None:
        logger.error("Gateway state not initialized")
        raise HTTPException(status_code=500, detail="Internal server error")
    return state
