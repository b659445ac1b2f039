"""
Backend client - one outbound HTTP call with a fixed timeout and uniform error classification.
"""
from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

import httpx

from pokegateway.errors import ErrorKind


@dataclass(frozen=True)
class BackendSuccess:
    """A 2xx response from a backend."""
    payload: Any
    status_code: int
    elapsed_ms: float
    content: bytes = b""
    headers: httpx.Headers = field(default_factory=httpx.Headers)

    ok = True


@dataclass(frozen=True)
class BackendFailure:
    """A backend call that failed at the transport level or with a non-2xx status."""
    kind: ErrorKind
    message: str
    elapsed_ms: float
    status_code: Optional[int] = None
    error_code: Optional[str] = None

    ok = False


BackendCallResult = Union[BackendSuccess, BackendFailure]


def _elapsed_ms(start: float) -> float:
    return max(0.0, (time.perf_counter() - start) * 1000)


def _parse_payload(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _upstream_message(response: httpx.Response) -> str:
    """Best human-readable message from a non-2xx response body."""
    text = response.text.strip()
    if not text:
        return f"Request failed with status code {response.status_code}"
    try:
        body = json.loads(text)
    except ValueError:
        return text
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            if isinstance(body.get(key), str):
                return body[key]
    return text


class BackendClient:
    """
    Thin wrapper over a shared httpx.AsyncClient.

    Never raises for backend-level problems: every call settles as either
    BackendSuccess or BackendFailure. Does not retry.
    """

    def __init__(self, http_client: httpx.AsyncClient):
        self._http = http_client

    async def call(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Mapping[str, str]] = None,
        content: Optional[bytes] = None,
        headers: Union[Mapping[str, str], Sequence[Tuple[str, str]], None] = None,
        timeout: float,
    ) -> BackendCallResult:
        """
        Perform a single request against a backend.

        Args:
            method: HTTP method
            url: Absolute target URL
            params: Extra query parameters
            content: Raw request body
            headers: Request headers, already scrubbed by the caller
            timeout: Timeout in seconds for the whole call

        Raises:
            ValueError: If the timeout is not positive or the URL is not absolute
        """
        if timeout <= 0:
            raise ValueError(f"Timeout must be positive, got {timeout}")
        if not urlparse(url).netloc:
            raise ValueError(f"Target URL must be absolute: {url!r}")

        start = time.perf_counter()
        try:
            response = await self._http.request(
                method,
                url,
                params=params,
                content=content,
                headers=headers,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            return BackendFailure(
                kind=ErrorKind.NETWORK,
                message=f"timeout of {int(timeout * 1000)}ms exceeded",
                elapsed_ms=_elapsed_ms(start),
                error_code=type(e).__name__,
            )
        except httpx.RequestError as e:
            return BackendFailure(
                kind=ErrorKind.NETWORK,
                message=str(e) or type(e).__name__,
                elapsed_ms=_elapsed_ms(start),
                error_code=type(e).__name__,
            )

        elapsed = _elapsed_ms(start)
        if not response.is_success:
            return BackendFailure(
                kind=ErrorKind.UPSTREAM,
                message=_upstream_message(response),
                elapsed_ms=elapsed,
                status_code=response.status_code,
            )

        return BackendSuccess(
            payload=_parse_payload(response),
            status_code=response.status_code,
            elapsed_ms=elapsed,
            content=response.content,
            headers=response.headers,
        )
