"""Pydantic result and response schemas."""

from typing import Any, Optional

from pydantic import BaseModel

from spaserve.models import OperatingMode, OutcomeKind


# ── Resolver ─────────────────────────────────────────────────────────────────

class RequestOutcome(BaseModel):
    """What the static resolver decided for one request path.

    ``stream`` is an open binary file object owned by the receiver; it is
    set for ``SERVED`` and ``FALLBACK_SERVED`` only.
    """

    kind: OutcomeKind
    content_type: Optional[str] = None
    location: Optional[str] = None
    asset_path: Optional[str] = None
    stream: Optional[Any] = None

    @classmethod
    def served(cls, stream, content_type: str, asset_path: str) -> "RequestOutcome":
        return cls(
            kind=OutcomeKind.SERVED,
            stream=stream,
            content_type=content_type,
            asset_path=asset_path,
        )

    @classmethod
    def fallback(cls, stream, asset_path: str) -> "RequestOutcome":
        return cls(
            kind=OutcomeKind.FALLBACK_SERVED,
            stream=stream,
            content_type="text/html",
            asset_path=asset_path,
        )

    @classmethod
    def redirect(cls, location: str) -> "RequestOutcome":
        return cls(kind=OutcomeKind.REDIRECT, location=location)

    @classmethod
    def not_found(cls) -> "RequestOutcome":
        return cls(kind=OutcomeKind.NOT_FOUND)

    @property
    def has_body(self) -> bool:
        return self.kind in (OutcomeKind.SERVED, OutcomeKind.FALLBACK_SERVED)


# ── Dev Server ───────────────────────────────────────────────────────────────

class DevServerStatus(BaseModel):
    running: bool
    starting: bool = False
    base_url: Optional[str] = None
    pid: Optional[int] = None
    command: Optional[str] = None


# ── Health ───────────────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str = "healthy"
    mode: OperatingMode
