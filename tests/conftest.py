"""
Shared test fixtures and helpers.
"""
from __future__ import annotations

import asyncio
from typing import Dict, Generator, List, Tuple

import pytest
from fastapi.testclient import TestClient

from pokegateway.config import AppConfig
from pokegateway.errors import ErrorKind
from pokegateway.main import create_app
from pokegateway.services.backend_client import BackendCallResult, BackendFailure, BackendSuccess
from pokegateway.services.registry import ServiceRegistry


POKE_API_URL = "http://poke-api:3004"
STATS_API_URL = "http://stats-api:3002"
IMAGES_API_URL = "http://images-api:3003"

PIKACHU = {"id": 25, "name": "pikachu", "height": 4, "weight": 60}
PIKACHU_STATS = {"hp": 35, "attack": 55, "defense": 40, "speed": 90}
PIKACHU_IMAGE = {"name": "pikachu", "sprite": "https://sprites.example/25.png"}


def success(payload, status_code: int = 200) -> BackendSuccess:
    """A successful backend result carrying ``payload``."""
    return BackendSuccess(payload=payload, status_code=status_code, elapsed_ms=1.0)


def network_failure(message: str = "connect ECONNREFUSED", error_code: str = "ConnectError") -> BackendFailure:
    return BackendFailure(kind=ErrorKind.NETWORK, message=message, elapsed_ms=1.0, error_code=error_code)


def upstream_failure(message: str = "Pokemon not found", status_code: int = 404) -> BackendFailure:
    return BackendFailure(kind=ErrorKind.UPSTREAM, message=message, elapsed_ms=1.0, status_code=status_code)


class StubBackendClient:
    """
    Stands in for BackendClient: answers by URL prefix after an optional delay.

    ``responses`` maps a URL prefix to ``(delay_seconds, result)``; a result
    that is an exception instance is raised instead of returned.
    """

    def __init__(self, responses: Dict[str, Tuple[float, object]]):
        self.responses = responses
        self.calls: List[Tuple[str, str]] = []
        self.completed: List[str] = []

    async def call(self, method: str, url: str, **kwargs) -> BackendCallResult:
        self.calls.append((method, url))
        for prefix, (delay, result) in self.responses.items():
            if url.startswith(prefix):
                if delay:
                    await asyncio.sleep(delay)
                self.completed.append(prefix)
                if isinstance(result, BaseException):
                    raise result
                return result
        raise AssertionError(f"Unexpected backend call: {method} {url}")


@pytest.fixture
def service_urls() -> Dict[str, str]:
    return {
        "poke_api": POKE_API_URL,
        "stats_api": STATS_API_URL,
        "images_api": IMAGES_API_URL,
    }


@pytest.fixture
def registry(service_urls) -> ServiceRegistry:
    return ServiceRegistry(service_urls)


@pytest.fixture
def app_config() -> AppConfig:
    """Gateway config pointing at fake backend hosts."""
    return AppConfig(
        _env_file=None,
        poke_api_url=POKE_API_URL,
        stats_api_url=STATS_API_URL,
        images_api_url=IMAGES_API_URL,
        log_level="WARNING",
    )


@pytest.fixture
def client(app_config) -> Generator[TestClient, None, None]:
    """
    Test client for the full gateway app with the lifespan running.
    Outbound calls go through httpx and are intercepted by ``httpx_mock``.
    """
    app = create_app(app_config)
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def mock_env(monkeypatch):
    """Set up environment variables for testing."""
    monkeypatch.setenv("POKE_API_URL", POKE_API_URL)
    monkeypatch.setenv("STATS_API_URL", STATS_API_URL)
    monkeypatch.setenv("IMAGES_API_URL", IMAGES_API_URL)
    # Clear the cached config
    from pokegateway.config import get_config
    get_config.cache_clear()
    yield
    get_config.cache_clear()
