"""
Stats service - call counters for each registered backend.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from pokegateway.errors import ConfigurationError
from pokegateway.services.backend_client import BackendCallResult


@dataclass
class ServiceStats:
    """Running totals of outbound calls to one backend."""
    request_count: int = 0
    error_count: int = 0
    bytes_sent: int = 0
    bytes_received: int = 0
    total_response_time_ms: float = 0.0

    def add(self, result: BackendCallResult, bytes_sent: int = 0) -> None:
        self.request_count += 1
        self.bytes_sent += bytes_sent
        self.total_response_time_ms += result.elapsed_ms
        if result.ok:
            self.bytes_received += len(result.content)
        else:
            self.error_count += 1

    def to_dict(self) -> Dict:
        calls = self.request_count
        return {
            "request_count": calls,
            "error_count": self.error_count,
            "error_rate_percent": round(self.error_count * 100 / calls, 2) if calls else 0.0,
            "bytes_sent": self.bytes_sent,
            "bytes_received": self.bytes_received,
            "avg_response_time_ms": round(self.total_response_time_ms / calls, 2) if calls else 0.0,
        }


class StatsCollector:
    """
    One ServiceStats per backend, created up front from the registry names.

    Recording never awaits, so updates from concurrent tasks on the event
    loop cannot interleave.
    """

    def __init__(self, services: Iterable[str]):
        self._stats: Dict[str, ServiceStats] = {name: ServiceStats() for name in services}

    def record(self, service: str, result: BackendCallResult, bytes_sent: int = 0) -> None:
        """
        Count one settled call to ``service``.

        Raises:
            ConfigurationError: If ``service`` was not registered
        """
        stats = self._stats.get(service)
        if stats is None:
            raise ConfigurationError(f"No stats kept for unregistered service {service!r}")
        stats.add(result, bytes_sent)

    def snapshot(self) -> Dict[str, Dict]:
        return {service: stats.to_dict() for service, stats in self._stats.items()}
