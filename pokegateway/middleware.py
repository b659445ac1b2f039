"""
Request logging middleware - one entry per inbound request with its latency.
"""
from __future__ import annotations

import time

from fastapi import Request

from pokegateway.logging import get_logger

logger = get_logger(__name__)


async def log_requests(request: Request, call_next):
    """Log every request and expose its latency as X-Response-Time."""
    start = time.perf_counter()
    response = await call_next(request)
    latency_ms = (time.perf_counter() - start) * 1000

    response.headers["X-Response-Time"] = f"{latency_ms:.2f}ms"
    logger.bind(
        method=request.method,
        url=str(request.url.path),
        status_code=response.status_code,
        latency_ms=round(latency_ms, 2),
        user_agent=request.headers.get("user-agent"),
    ).info(f"{request.method} {request.url.path} - {response.status_code}")
    return response
