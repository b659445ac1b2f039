"""
Internal router - gateway info, self health, metrics and the load-test endpoint.
"""
import asyncio
import os
import platform
import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from pokegateway.logging import get_logger
from pokegateway.state import AppState, get_app_state

logger = get_logger(__name__)

router = APIRouter(tags=["internal"])

GATEWAY_VERSION = "1.0.0"

AVAILABLE_ENDPOINTS = [
    "/poke/search?pokemon_name={name}",
    "/api/pokemon/{name}",
    "/api/stats/{name}",
    "/api/images/{name}",
    "/health",
    "/status",
    "/metrics",
]


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class HealthResponse(BaseModel):
    """Gateway self health."""
    service: str = Field(example="gateway")
    status: str = Field(example="healthy")
    uptime_seconds: float = Field(example=12.5)
    timestamp: str
    microservices_configured: int = Field(example=3)


class ServiceStatsResponse(BaseModel):
    """Call statistics for a single backend service."""
    request_count: int = Field(example=100, description="Total number of calls")
    error_count: int = Field(example=5, description="Number of failed calls")
    error_rate_percent: float = Field(example=5.0, description="Percentage of failed calls")
    bytes_sent: int = Field(example=2048, description="Total request bytes sent to the backend")
    bytes_received: int = Field(example=20480, description="Total response bytes received from the backend")
    avg_response_time_ms: float = Field(example=45.23, description="Average response time in milliseconds")


class MetricsResponse(BaseModel):
    gateway: Dict[str, Any]
    microservices: Dict[str, ServiceStatsResponse]
    timestamp: str


class LoadTestResponse(BaseModel):
    pokemon: str
    timestamp: str
    delay_applied: int
    gateway_status: str = Field(example="healthy")
    test_id: str


@router.get("/")
async def info(state: AppState = Depends(get_app_state)) -> Dict[str, Any]:
    """Describe the gateway, its endpoints and the backends behind it."""
    return {
        "service": "Pokemon Microservices Gateway",
        "version": GATEWAY_VERSION,
        "description": "Central gateway for Pokemon microservices architecture",
        "endpoints": {
            "search": "/poke/search?pokemon_name={name}",
            "pokemon_data": "/api/pokemon/{name}",
            "stats": "/api/stats/{name}",
            "images": "/api/images/{name}",
            "health": "/health",
            "status": "/status",
            "metrics": "/metrics",
        },
        "microservices": {name: f"{url}/health" for name, url in state.registry.items()},
        "documentation": {
            "search_example": "/poke/search?pokemon_name=pikachu",
            "pokemon_example": "/api/pokemon/charizard",
            "stats_example": "/api/stats/bulbasaur",
            "images_example": "/api/images/squirtle",
        },
        "timestamp": _now(),
    }


@router.get("/health", response_model=HealthResponse)
async def health(state: AppState = Depends(get_app_state)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        service="gateway",
        status="healthy",
        uptime_seconds=state.uptime_seconds,
        timestamp=_now(),
        microservices_configured=len(state.registry),
    )


@router.get("/metrics", response_model=MetricsResponse)
async def metrics(state: AppState = Depends(get_app_state)) -> MetricsResponse:
    """
    Gateway process info plus call statistics per backend service since start.

    Each backend entry contains:
    - **request_count**: Total number of calls (proxied and search sub-calls)
    - **error_count**: Number of failed calls
    - **error_rate_percent**: Percentage of failed calls
    - **bytes_sent** / **bytes_received**: Body bytes in each direction
    - **avg_response_time_ms**: Average response time in milliseconds
    """
    return MetricsResponse(
        gateway={
            "uptime_seconds": state.uptime_seconds,
            "python_version": platform.python_version(),
            "platform": platform.system().lower(),
            "pid": os.getpid(),
        },
        microservices=state.stats.snapshot(),
        timestamp=_now(),
    )


@router.get("/test/load/{pokemon_name}", response_model=LoadTestResponse)
async def load_test(
    pokemon_name: str,
    delay: int = Query(0, ge=0, le=60000, description="Artificial delay in milliseconds"),
) -> LoadTestResponse:
    """Echo endpoint for load testing the gateway itself, without touching any backend."""
    if delay > 0:
        await asyncio.sleep(delay / 1000)

    response = LoadTestResponse(
        pokemon=pokemon_name,
        timestamp=_now(),
        delay_applied=delay,
        gateway_status="healthy",
        test_id=uuid.uuid4().hex[:9],
    )
    logger.bind(pokemon=pokemon_name, test_id=response.test_id).debug(
        f"Load test completed for: {pokemon_name}"
    )
    return response
