"""
Service registry - maps backend names to base URLs and path prefixes to backends.
"""
from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional
from urllib.parse import urlparse

from pokegateway.errors import ConfigurationError


# Path prefix -> backend name for the reverse proxy
PROXY_ROUTES: Dict[str, str] = {
    "/api/pokemon": "poke_api",
    "/api/stats": "stats_api",
    "/api/images": "images_api",
}


def _validate_base_url(name: str, url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(f"Service '{name}' has an invalid base URL: {url!r}")
    return url.rstrip("/")


class ServiceRegistry(Mapping[str, str]):
    """
    Read-only mapping of backend name to base URL.

    Built once at startup and shared across requests without locking.
    """

    def __init__(self, services: Mapping[str, str]):
        if not services:
            raise ConfigurationError("No backend services configured")
        self._services = MappingProxyType(
            {name: _validate_base_url(name, url) for name, url in services.items()}
        )

    def __getitem__(self, name: str) -> str:
        return self._services[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._services)

    def __len__(self) -> int:
        return len(self._services)

    def __repr__(self) -> str:
        return f"ServiceRegistry({dict(self._services)!r})"

    def url_for(self, name: str) -> str:
        """Base URL for a backend, or ConfigurationError if it is not registered."""
        try:
            return self._services[name]
        except KeyError:
            raise ConfigurationError(f"Service '{name}' is not registered")

    def require(self, names: Iterable[str]) -> None:
        """Check that every referenced backend name is registered."""
        missing = sorted({name for name in names if name not in self._services})
        if missing:
            raise ConfigurationError(f"Unknown backend services referenced: {', '.join(missing)}")


def resolve_route(path: str, routes: Mapping[str, str] = PROXY_ROUTES) -> Optional[str]:
    """
    Find the backend serving a request path.

    Prefixes match on whole path segments, so ``/api/stats`` serves
    ``/api/stats/pikachu`` but not ``/api/statsfoo``. Longest prefix wins.
    """
    for prefix in sorted(routes, key=len, reverse=True):
        if path == prefix or path.startswith(prefix + "/"):
            return routes[prefix]
    return None
