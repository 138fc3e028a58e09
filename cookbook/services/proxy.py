"""Forward requests the API does not handle to the upstream recipe service.

The upstream is the host the client asked for (the Host header), reached
over HTTPS with the original method, path, query, headers and body.
"""

import logging
from typing import Iterable, Optional

import requests

from ..settings import settings

logger = logging.getLogger("cookbook.proxy")

# Connection-level headers are not forwarded in either direction. requests
# decodes bodies, so length and encoding headers no longer apply either.
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
    "content-length",
    "content-encoding",
}

session = requests.Session()


class UpstreamError(Exception):
    pass


def build_upstream_url(host: str, path: str, query: Optional[str]) -> str:
    url = f"https://{host}{path if path.startswith('/') else '/' + path}"
    if query:
        url += f"?{query}"
    return url


def filter_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(k, v) for k, v in headers if k.lower() not in HOP_BY_HOP_HEADERS]


def merge_headers(headers: Iterable[tuple[str, str]]) -> dict[str, str]:
    """Fold repeated request headers into one field, as HTTP allows for lists."""
    merged = {}
    for k, v in headers:
        key = k.lower()
        if key in merged:
            sep = "; " if key == "cookie" else ", "
            merged[key] = f"{merged[key]}{sep}{v}"
        else:
            merged[key] = v
    return merged


def response_headers(resp: requests.Response) -> list[tuple[str, str]]:
    """Upstream headers with repeated fields (Set-Cookie) kept apart."""
    return filter_headers(resp.raw.headers.items())


def forward(
    method: str,
    host: str,
    path: str,
    query: Optional[str],
    headers: Iterable[tuple[str, str]],
    body: bytes,
) -> requests.Response:
    """Make the upstream request. Network failures raise UpstreamError."""
    url = build_upstream_url(host, path, query)
    logger.debug(f"Forwarding {method} {url}")
    try:
        resp = session.request(
            method,
            url,
            headers=merge_headers(filter_headers(headers)),
            data=body or None,
            timeout=settings.proxy_timeout_seconds,
            allow_redirects=False,
        )
    except requests.RequestException as e:
        raise UpstreamError(f"Making fallback proxy request to {url}: {e}") from e

    logger.info(f"Got response for fallback: {resp.status_code} {resp.content[:200]!r}")
    return resp
