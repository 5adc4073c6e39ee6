"""Release-mode asset resolution with SPA fallback.

Lookup order for a request path, first match wins:

  1. the exact file under the mounted root
  2. for a directory: redirect to ``path/`` when the slash is missing,
     otherwise ``path/index.html``
  3. ``path.html`` for static-site-generator builds
  4. the SPA fallback document (``index.html``), passed through the
     fallback interceptor
  5. NotFound
"""

import logging
from typing import BinaryIO, Callable, Optional, Tuple

from spaserve.assets.store import AssetStore
from spaserve.assets.utils import clean_request_path, content_type_for, join_asset_path
from spaserve.errors import AssetIsDirectory, AssetNotFound, PathEscapeRejected
from spaserve.models import FrameworkType
from spaserve.schemas import RequestOutcome

logger = logging.getLogger(__name__)

DIRECTORY_INDEX = "index.html"

FallbackInterceptor = Callable[[object, BinaryIO], BinaryIO]


def identity_interceptor(request, stream: BinaryIO) -> BinaryIO:
    return stream


class StaticAssetResolver:
    """Maps request paths to assets in a read-only store.

    ``resolve`` always returns a RequestOutcome; store errors only move the
    lookup on to the next step.
    """

    def __init__(
        self,
        store: AssetStore,
        root: str,
        framework_type: FrameworkType = FrameworkType.GENERIC,
        fallback_path: str = DIRECTORY_INDEX,
        interceptor: Optional[FallbackInterceptor] = None,
    ):
        self.store = store
        self.root = root
        self.framework_type = framework_type
        self.fallback_path = fallback_path
        self.interceptor = interceptor or identity_interceptor

    def resolve(self, request_path: str, request=None) -> RequestOutcome:
        try:
            relpath = clean_request_path(request_path)
        except PathEscapeRejected:
            logger.warning(f"Rejected request path outside the asset root: {request_path!r}")
            return RequestOutcome.not_found()

        opened = self._open(relpath)
        if opened is not None:
            stream, is_dir = opened
            if not is_dir:
                return self._served(stream, relpath)
            # Redirect must come before the nested index lookup, and only
            # when the client-visible path lacks the slash.
            if not request_path.endswith("/"):
                return RequestOutcome.redirect(request_path + "/")
            outcome = self._try_file(join_asset_path(relpath, DIRECTORY_INDEX))
            if outcome is not None:
                return outcome

        if self.framework_type == FrameworkType.STATIC_SITE_GENERATOR and relpath:
            outcome = self._try_file(relpath + ".html")
            if outcome is not None:
                return outcome

        return self._fallback(request)

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _open(self, relpath: str) -> Optional[Tuple[Optional[BinaryIO], bool]]:
        path = join_asset_path(self.root, relpath)
        try:
            return self.store.open(path)
        except AssetNotFound:
            return None
        except OSError as e:
            logger.warning(f"Failed to open asset {path}: {e}")
            return None

    def _open_file(self, relpath: str) -> Optional[BinaryIO]:
        path = join_asset_path(self.root, relpath)
        try:
            return self.store.open_file(path)
        except (AssetNotFound, AssetIsDirectory):
            return None
        except OSError as e:
            logger.warning(f"Failed to open asset {path}: {e}")
            return None

    def _try_file(self, relpath: str) -> Optional[RequestOutcome]:
        stream = self._open_file(relpath)
        if stream is None:
            return None
        return self._served(stream, relpath)

    def _served(self, stream: BinaryIO, relpath: str) -> RequestOutcome:
        return RequestOutcome.served(
            stream, content_type_for(relpath), join_asset_path(self.root, relpath)
        )

    def _fallback(self, request) -> RequestOutcome:
        asset_path = join_asset_path(self.root, self.fallback_path)
        original = self._open_file(self.fallback_path)
        if original is None:
            logger.warning(f"SPA fallback document {asset_path} not found in {self.store!r}")
            return RequestOutcome.not_found()

        try:
            stream = self.interceptor(request, original)
        except Exception:
            logger.exception(f"Fallback interceptor failed, serving {asset_path} unmodified")
            original.close()
            stream = self._open_file(self.fallback_path)
            if stream is None:
                return RequestOutcome.not_found()
        return RequestOutcome.fallback(stream, asset_path)
