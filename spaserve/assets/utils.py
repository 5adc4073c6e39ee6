"""Asset path helpers: request-path cleaning and content-type lookup."""

import mimetypes
import re

from spaserve.errors import PathEscapeRejected

_DRIVE_RE = re.compile(r"^[A-Za-z]:$")

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def clean_request_path(request_path: str) -> str:
    """
    Turn a client request path into a path relative to the mounted root.

    Empty and ``.`` segments are dropped.  Anything that could step outside
    the root raises PathEscapeRejected: ``..`` segments, backslashes, NUL
    bytes, a leading ``//`` and a drive-letter first segment.

    Returns:
        The relative path without leading or trailing slash ("" for the root).
    """
    if "\\" in request_path or "\x00" in request_path:
        raise PathEscapeRejected(request_path)
    if request_path.startswith("//"):
        raise PathEscapeRejected(request_path)

    segments = []
    for segment in request_path.split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            raise PathEscapeRejected(request_path)
        segments.append(segment)

    if segments and _DRIVE_RE.match(segments[0]):
        raise PathEscapeRejected(request_path)
    return "/".join(segments)


def join_asset_path(*parts: str) -> str:
    """Join store path parts with ``/``, skipping empty ones."""
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))


def content_type_for(path: str) -> str:
    """Return the MIME type for a file name, by extension."""
    content_type, _ = mimetypes.guess_type(path)
    return content_type or DEFAULT_CONTENT_TYPE
