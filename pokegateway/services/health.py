"""
Health service - checks every registered backend and reduces the results to one status.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from pokegateway.logging import get_logger
from pokegateway.services.backend_client import BackendClient
from pokegateway.services.registry import ServiceRegistry

logger = get_logger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
DEGRADED = "degraded"


@dataclass
class ServiceHealth:
    """Result of one backend health check."""
    url: str
    status: str
    data: Any = None
    response_time: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def is_healthy(self) -> bool:
        return self.status == HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        if self.is_healthy:
            return {
                "status": self.status,
                "url": self.url,
                "response_time": self.response_time,
                "data": self.data,
            }
        result = {
            "status": self.status,
            "url": self.url,
            "error": self.error,
            "error_code": self.error_code,
        }
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


@dataclass
class HealthReport:
    """Health of every backend plus the derived overall status."""
    services: Dict[str, ServiceHealth] = field(default_factory=dict)
    check_duration_ms: float = 0.0

    @property
    def is_healthy(self) -> bool:
        return all(service.is_healthy for service in self.services.values())

    @property
    def overall_status(self) -> str:
        return HEALTHY if self.is_healthy else DEGRADED

    @property
    def healthy_count(self) -> int:
        return sum(1 for service in self.services.values() if service.is_healthy)

    def services_dict(self) -> Dict[str, Dict[str, Any]]:
        return {name: service.to_dict() for name, service in self.services.items()}


class HealthAggregator:
    """Concurrently calls ``<base_url>/health`` on each registry entry."""

    def __init__(self, registry: ServiceRegistry, client: BackendClient, timeout: float = 5.0):
        self._registry = registry
        self._client = client
        self._timeout = timeout

    async def _check(self, base_url: str) -> ServiceHealth:
        result = await self._client.call("GET", f"{base_url}/health", timeout=self._timeout)
        if result.ok:
            return ServiceHealth(
                url=base_url,
                status=HEALTHY,
                data=result.payload,
                response_time=result.headers.get("x-response-time", "unknown"),
            )
        return ServiceHealth(
            url=base_url,
            status=UNHEALTHY,
            error=result.message,
            error_code=result.error_code,
            status_code=result.status_code,
        )

    async def check_all(self) -> HealthReport:
        names = list(self._registry)
        start = time.perf_counter()
        outcomes = await asyncio.gather(
            *(self._check(self._registry[name]) for name in names),
            return_exceptions=True,
        )
        duration_ms = (time.perf_counter() - start) * 1000

        services = {}
        for name, outcome in zip(names, outcomes):
            if isinstance(outcome, BaseException):
                logger.opt(exception=outcome).error(f"Unexpected error checking {name}")
                outcome = ServiceHealth(
                    url=self._registry[name],
                    status=UNHEALTHY,
                    error=str(outcome) or type(outcome).__name__,
                    error_code=type(outcome).__name__,
                )
            services[name] = outcome

        report = HealthReport(services=services, check_duration_ms=round(duration_ms, 2))
        logger.bind(
            overall_status=report.overall_status,
            healthy_services=report.healthy_count,
            total_services=len(report.services),
            check_duration_ms=report.check_duration_ms,
        ).info("Status check completed")
        return report
