"""
Aggregator service - fans a search out to several backends and merges partial results.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from pokegateway.errors import ErrorKind
from pokegateway.logging import get_logger
from pokegateway.services.backend_client import BackendCallResult, BackendClient, BackendFailure
from pokegateway.services.registry import ServiceRegistry
from pokegateway.services.stats import StatsCollector

logger = get_logger(__name__)

SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class AggregationTarget:
    """
    One backend queried by a search.

    ``field`` names the sub-key of ``data`` that receives the payload;
    when it is None an object payload is merged into ``data`` directly.
    """
    service: str
    path: str
    field: Optional[str] = None

    @property
    def error_key(self) -> str:
        return f"{self.service}_error"

    def url(self, base_url: str, key: str) -> str:
        return base_url + self.path.format(name=quote(key, safe=""))


SEARCH_TARGETS: Sequence[AggregationTarget] = (
    AggregationTarget("poke_api", "/api/pokemon/{name}"),
    AggregationTarget("stats_api", "/api/stats/{name}", field="stats"),
    AggregationTarget("images_api", "/api/images/{name}", field="image"),
)


@dataclass
class AggregatedResponse:
    """Merged search result with a per-backend success/error flag."""
    name: str
    status: Dict[str, str] = field(default_factory=dict)
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "status": self.status, "data": self.data}


class SearchAggregator:
    """
    Queries every target concurrently and waits for all of them to settle.

    A failing backend never cancels or blocks its siblings, and the merge
    follows target order so completion order cannot change the result.
    """

    def __init__(
        self,
        registry: ServiceRegistry,
        client: BackendClient,
        stats: Optional[StatsCollector] = None,
        timeout: float = 5.0,
        targets: Sequence[AggregationTarget] = SEARCH_TARGETS,
    ):
        registry.require(target.service for target in targets)
        self._registry = registry
        self._client = client
        self._stats = stats
        self._timeout = timeout
        self._targets: List[AggregationTarget] = list(targets)

    @property
    def targets(self) -> List[AggregationTarget]:
        return list(self._targets)

    async def _fetch(self, target: AggregationTarget, key: str) -> BackendCallResult:
        url = target.url(self._registry.url_for(target.service), key)
        result = await self._client.call("GET", url, timeout=self._timeout)

        log = logger.bind(service=target.service, pokemon=key, latency_ms=round(result.elapsed_ms, 2))
        if result.ok:
            log.debug(f"Fetched {target.service} for {key}")
        else:
            log.bind(error_kind=result.kind.value).warning(
                f"Fetching {target.service} for {key} failed: {result.message}"
            )

        if self._stats is not None:
            self._stats.record(target.service, result)
        return result

    async def search(self, key: str) -> AggregatedResponse:
        """
        Search every backend for ``key`` and merge what comes back.

        Raises:
            ValueError: If the key is empty
        """
        if not key:
            raise ValueError("Search key must not be empty")

        outcomes = await asyncio.gather(
            *(self._fetch(target, key) for target in self._targets),
            return_exceptions=True,
        )

        response = AggregatedResponse(name=key)
        for target, outcome in zip(self._targets, outcomes):
            if isinstance(outcome, BaseException):
                # Treat a crashed fetch like any other failed backend
                logger.opt(exception=outcome).error(f"Unexpected error querying {target.service}")
                outcome = BackendFailure(
                    kind=ErrorKind.NETWORK,
                    message=str(outcome) or type(outcome).__name__,
                    elapsed_ms=0.0,
                    error_code=type(outcome).__name__,
                )
            merge_result(response, target, outcome)

        logger.bind(pokemon=key, status=response.status).info(f"Search completed for: {key}")
        return response


def merge_result(response: AggregatedResponse, target: AggregationTarget, result: BackendCallResult) -> None:
    """Fold one backend's outcome into the aggregate."""
    if not result.ok:
        response.status[target.service] = ERROR
        response.data[target.error_key] = result.message
        return

    response.status[target.service] = SUCCESS
    if target.field is None and isinstance(result.payload, dict):
        response.data.update(result.payload)
    else:
        response.data[target.field or target.service] = result.payload
