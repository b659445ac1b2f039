"""
Proxy router - relays /api/<resource>/* requests to the backend that owns the prefix.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from pokegateway.logging import get_logger
from pokegateway.services.registry import resolve_route
from pokegateway.state import AppState, get_app_state

logger = get_logger(__name__)

router = APIRouter(tags=["proxy"])

PROXY_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@router.api_route(
    "/api/{resource}",
    methods=PROXY_METHODS,
    response_class=Response,
    include_in_schema=False,
)
@router.api_route(
    "/api/{resource}/{path:path}",
    methods=PROXY_METHODS,
    response_class=Response,
    responses={
        200: {"description": "Proxied response from the backend (format varies by backend)"},
        404: {"description": "No backend serves this resource"},
        503: {"description": "Backend unreachable or timed out"}
    }
)
async def proxy(request: Request, state: AppState = Depends(get_app_state)) -> Response:
    """
    Forward the request to the backend registered for its path prefix.

    Path, query string, method and body are passed through unchanged; the
    inbound Host header is not. Backend errors keep the backend's status
    code, network failures become 503.
    """
    service_name = resolve_route(request.url.path)
    if service_name is None:
        raise HTTPException(status_code=404)

    proxied = await state.proxy.forward(
        service_name=service_name,
        method=request.method,
        path=request.url.path,
        query=request.url.query,
        body=await request.body(),
        headers=request.headers,
    )

    response = Response(content=proxied.content, status_code=proxied.status_code)
    for key, value in proxied.headers:
        response.headers.append(key, value)
    return response
