"""
Proxy service - forwards path-prefixed requests to named backend services.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Mapping, Optional, Sequence, Tuple, Union

import httpx

from pokegateway.errors import ErrorKind
from pokegateway.logging import get_logger
from pokegateway.services.backend_client import BackendClient, BackendFailure
from pokegateway.services.registry import ServiceRegistry
from pokegateway.services.stats import StatsCollector

logger = get_logger(__name__)

# Hop-by-hop headers that should not be forwarded in either direction
HOP_BY_HOP_HEADERS = frozenset({
    "connection", "keep-alive", "transfer-encoding",
    "te", "trailers", "upgrade", "proxy-authorization", "proxy-authenticate"
})

# httpx recomputes these for the outbound request
_SKIP_REQUEST_HEADERS = HOP_BY_HOP_HEADERS | {"host", "content-length"}

# The relayed body is already decoded and may differ in length
_SKIP_RESPONSE_HEADERS = HOP_BY_HOP_HEADERS | {"content-encoding", "content-length"}

HeaderSource = Union[Mapping[str, str], Sequence[Tuple[str, str]], httpx.Headers]


@dataclass
class ProxiedResponse:
    """What the gateway sends back for a proxied call."""
    status_code: int
    content: bytes
    # Ordered pairs so repeated headers such as Set-Cookie survive
    headers: List[Tuple[str, str]] = field(default_factory=list)


def build_target_url(base_url: str, path: str, query: str = "") -> str:
    """Backend base URL + original path + original query string, unchanged."""
    target = f"{base_url}{path}"
    if query:
        target = f"{target}?{query}"
    return target


def scrub_request_headers(headers: HeaderSource) -> List[Tuple[str, str]]:
    """Drop the inbound host header and hop-by-hop headers, keeping repeats."""
    return [(k, v) for k, v in httpx.Headers(headers).multi_items() if k not in _SKIP_REQUEST_HEADERS]


def filter_response_headers(headers: HeaderSource) -> List[Tuple[str, str]]:
    return [(k, v) for k, v in httpx.Headers(headers).multi_items() if k not in _SKIP_RESPONSE_HEADERS]


def _failure_status(failure: BackendFailure) -> int:
    if failure.kind is ErrorKind.UPSTREAM and failure.status_code:
        return failure.status_code
    return 503


def _failure_message(failure: BackendFailure) -> str:
    if failure.kind is ErrorKind.UPSTREAM:
        return f"Service error: {failure.status_code} - {failure.message}"
    return f"Network error: {failure.message}"


def failure_body(service_name: str, failure: BackendFailure) -> bytes:
    return json.dumps({
        "error": "Service unavailable",
        "service": service_name,
        "message": _failure_message(failure),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }).encode()


class ReverseProxy:
    """Relays one inbound request to one backend and maps failures to 503 or the backend status."""

    def __init__(
        self,
        registry: ServiceRegistry,
        client: BackendClient,
        stats: Optional[StatsCollector] = None,
        timeout: float = 30.0,
    ):
        self._registry = registry
        self._client = client
        self._stats = stats
        self._timeout = timeout

    async def forward(
        self,
        service_name: str,
        method: str,
        path: str,
        query: str,
        body: bytes,
        headers: HeaderSource,
    ) -> ProxiedResponse:
        """
        Forward a request to a backend service.

        Args:
            service_name: Registered backend name
            method: Original HTTP method
            path: Original request path
            query: Original raw query string
            body: Original request body
            headers: Original request headers

        Returns:
            The backend's response, or a synthesized failure response

        Raises:
            ConfigurationError: If the service is not registered
        """
        target_url = build_target_url(self._registry.url_for(service_name), path, query)

        result = await self._client.call(
            method,
            target_url,
            content=body or None,
            headers=scrub_request_headers(headers),
            timeout=self._timeout,
        )

        if result.ok:
            response = ProxiedResponse(
                status_code=result.status_code,
                content=result.content,
                headers=filter_response_headers(result.headers),
            )
        else:
            response = ProxiedResponse(
                status_code=_failure_status(result),
                content=failure_body(service_name, result),
                headers=[("content-type", "application/json")],
            )

        log = logger.bind(
            service=service_name,
            target_url=target_url,
            method=method,
            status_code=response.status_code,
            latency_ms=round(result.elapsed_ms, 2),
        )
        if result.ok:
            log.info(f"Proxied {method} {path} to {service_name}")
        else:
            log.bind(error_kind=result.kind.value).warning(
                f"Proxy to {service_name} failed: {result.message}"
            )

        if self._stats is not None:
            self._stats.record(service_name, result, bytes_sent=len(body))

        return response
