"""Streaming reverse proxy used for development mode."""

import logging
from typing import List, Optional, Tuple

import httpx
from fastapi import HTTPException
from starlette.background import BackgroundTask
from starlette.requests import Request
from starlette.responses import StreamingResponse

logger = logging.getLogger(__name__)

# RFC 7230 section 6.1 connection-level headers; never forwarded.
HOP_BY_HOP_HEADERS = frozenset({
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "proxy-connection",
    "te",
    "trailer",
    "transfer-encoding",
    "upgrade",
})

# httpx adds these to every request unless told otherwise
_CLIENT_DEFAULT_HEADERS = ("accept", "accept-encoding", "user-agent")


def _hop_by_hop(headers: List[Tuple[bytes, bytes]]) -> set:
    names = set(HOP_BY_HOP_HEADERS)
    for name, value in headers:
        if name.lower() == b"connection":
            names.update(
                token.strip().lower() for token in value.decode("latin-1").split(",") if token.strip()
            )
    return names


def filter_headers(headers: List[Tuple[bytes, bytes]], drop: Tuple[str, ...] = ()) -> List[Tuple[bytes, bytes]]:
    """Remove hop-by-hop headers (and ``drop``) from a raw header list."""
    excluded = _hop_by_hop(headers) | set(drop)
    return [
        (name.lower(), value)
        for name, value in headers
        if name.decode("latin-1").lower() not in excluded
    ]


def build_upstream_url(target: httpx.URL, request: Request) -> httpx.URL:
    """Append the request's raw path and query to the target URL."""
    raw_path = request.scope.get("raw_path") or request.url.path.encode("utf-8")
    path = raw_path.decode("latin-1").split("?", 1)[0]
    base = str(target).split("?", 1)[0].split("#", 1)[0].rstrip("/")
    url = base + "/" + path.lstrip("/")
    query = request.scope.get("query_string", b"").decode("latin-1")
    if query:
        url += "?" + query
    return httpx.URL(url)


class ReverseProxy:
    """
    Forward a request to a target origin and relay the response.

    Only ``Host`` is rewritten (to the target) and hop-by-hop headers are
    dropped; ``X-Forwarded-*`` headers are added.  Response bodies are
    relayed chunk by chunk and the upstream response is closed when the
    client goes away.
    """

    def __init__(self, timeout: float = 30.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                # Dev servers hold event streams open, so reads never time out
                timeout=httpx.Timeout(self.timeout, read=None),
                transport=self.transport,
                follow_redirects=False,
            )
            for name in _CLIENT_DEFAULT_HEADERS:
                del self._client.headers[name]
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def forward(self, request: Request, target: httpx.URL) -> StreamingResponse:
        url = build_upstream_url(target, request)
        headers = filter_headers(request.headers.raw, drop=("host", "x-forwarded-for"))
        headers.extend(self._forwarded_headers(request))

        has_body = "content-length" in request.headers or "transfer-encoding" in request.headers
        upstream_request = self.client.build_request(
            request.method,
            url,
            headers=headers,
            content=request.stream() if has_body else None,
        )

        try:
            upstream = await self.client.send(upstream_request, stream=True)
        except httpx.TimeoutException as e:
            logger.warning(f"Dev server timed out for {request.method} {url}: {e!r}")
            raise HTTPException(status_code=504, detail=f"Dev server at {target} timed out")
        except httpx.RequestError as e:
            logger.warning(f"Dev server unreachable for {request.method} {url}: {e!r}")
            raise HTTPException(status_code=502, detail=f"Dev server at {target} is unreachable")

        response = StreamingResponse(
            self._relay(upstream),
            status_code=upstream.status_code,
            background=BackgroundTask(upstream.aclose),
        )
        response.raw_headers = filter_headers(upstream.headers.raw)
        return response

    @staticmethod
    def _forwarded_headers(request: Request) -> List[Tuple[bytes, bytes]]:
        client_host = request.client.host if request.client else None
        prior = request.headers.get("x-forwarded-for")
        forwarded = []
        if client_host or prior:
            value = ", ".join(v for v in (prior, client_host) if v)
            forwarded.append((b"x-forwarded-for", value.encode("latin-1")))
        if "x-forwarded-host" not in request.headers and "host" in request.headers:
            forwarded.append((b"x-forwarded-host", request.headers["host"].encode("latin-1")))
        if "x-forwarded-proto" not in request.headers:
            forwarded.append((b"x-forwarded-proto", request.url.scheme.encode("latin-1")))
        return forwarded

    @staticmethod
    async def _relay(upstream: httpx.Response):
        try:
            async for chunk in upstream.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            logger.warning(f"Upstream body from {upstream.request.url} aborted: {e!r}")
        finally:
            await upstream.aclose()
