"""Transforms applied to the SPA fallback document before it is sent."""

import io
import json
import re
from typing import Any, BinaryIO, Dict, Optional

from spaserve.assets.resolver import FallbackInterceptor, identity_interceptor

_HEAD_CLOSE_RE = re.compile(rb"</head\s*>", re.IGNORECASE)


def inject_runtime_config(
    config: Dict[str, Any], global_name: str = "__RUNTIME_CONFIG__"
) -> FallbackInterceptor:
    """
    Build an interceptor that exposes ``config`` to the page as
    ``window.<global_name>``.

    The script tag goes right before ``</head>``; documents without a head
    get it prepended.
    """
    payload = json.dumps(config, separators=(",", ":")).replace("</", "<\\/")
    script = f"<script>window.{global_name} = {payload};</script>".encode("utf-8")

    def interceptor(request, stream: BinaryIO) -> BinaryIO:
        try:
            html = stream.read()
        finally:
            stream.close()
        match = _HEAD_CLOSE_RE.search(html)
        if match:
            html = html[: match.start()] + script + html[match.start():]
        else:
            html = script + html
        return io.BytesIO(html)

    return interceptor


def chain_interceptors(*interceptors: Optional[FallbackInterceptor]) -> FallbackInterceptor:
    """Compose interceptors left to right; ``None`` entries are skipped."""
    active = [i for i in interceptors if i is not None]
    if not active:
        return identity_interceptor
    if len(active) == 1:
        return active[0]

    def chained(request, stream: BinaryIO) -> BinaryIO:
        for interceptor in active:
            stream = interceptor(request, stream)
        return stream

    return chained
