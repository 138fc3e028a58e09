"""Catch-all route: proxy unhandled requests upstream when enabled."""

import logging

from fastapi import APIRouter, HTTPException, Request, Response
from starlette.concurrency import run_in_threadpool

from ..services import proxy
from ..settings import settings

router = APIRouter()
logger = logging.getLogger("cookbook.proxy")

METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]


@router.api_route("/{full_path:path}", methods=METHODS, include_in_schema=False)
async def api_fallback(full_path: str, request: Request):
    if not settings.proxy_fallback_enabled:
        raise HTTPException(status_code=404, detail="Not Found")

    body = await request.body()
    logger.warning(f"Unhandled method: {request.method} {request.url.path} ({len(body)} byte body)")

    host = request.headers.get("host")
    if not host:
        raise HTTPException(status_code=400, detail="Expected a host header")

    try:
        resp = await run_in_threadpool(
            proxy.forward,
            request.method,
            host,
            request.url.path,
            request.url.query,
            [(k.decode("latin-1"), v.decode("latin-1")) for k, v in request.headers.raw],
            body,
        )
    except proxy.UpstreamError as e:
        logger.error(f"Error in fallback: {e}")
        raise HTTPException(status_code=502, detail="Upstream request failed")

    response = Response(content=resp.content, status_code=resp.status_code)
    for key, value in proxy.response_headers(resp):
        response.headers.append(key, value)
    return response
