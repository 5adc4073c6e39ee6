"""Mode router: proxy to the dev server or serve the release build.

A ``Frontend`` is built from one frozen ``Settings`` object and owns its
resolver, reverse proxy and dev-server manager.  To change mode or asset
root, build a new ``Frontend``.
"""

import logging
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool
from starlette.responses import RedirectResponse, Response, StreamingResponse

from spaserve.assets import (
    AssetStore,
    DirectoryAssetStore,
    FallbackInterceptor,
    PackageAssetStore,
    StaticAssetResolver,
    chain_interceptors,
    inject_runtime_config,
)
from spaserve.config import Settings
from spaserve.devserver import DevServerLauncher, DevServerManager, ReverseProxy
from spaserve.models import OperatingMode, OutcomeKind
from spaserve.schemas import RequestOutcome

logger = logging.getLogger(__name__)

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

_CHUNK_SIZE = 64 * 1024


def default_asset_store(settings: Settings) -> AssetStore:
    """Package data when ASSETS_PACKAGE is set, else the folder holding the frontend."""
    if settings.ASSETS_PACKAGE:
        return PackageAssetStore(settings.ASSETS_PACKAGE)
    return DirectoryAssetStore(Path(settings.FRONTEND_FOLDER_PATH).parent)


def iter_asset(stream: BinaryIO, asset_path: str) -> Iterator[bytes]:
    """Yield an asset in chunks; read errors end the body instead of raising."""
    try:
        while True:
            chunk = stream.read(_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    except (OSError, ValueError) as e:
        logger.warning(f"Aborted streaming {asset_path}: {e}")
    finally:
        stream.close()


def outcome_to_response(outcome: RequestOutcome, request: Request) -> Response:
    """Translate a resolver outcome into a Starlette response (404 raises)."""
    if outcome.kind == OutcomeKind.REDIRECT:
        # The resolver saw the mount-relative path; the client needs the full one.
        location = request.url.path + "/"
        if request.url.query:
            location = f"{location}?{request.url.query}"
        return RedirectResponse(location, status_code=307)

    if outcome.kind == OutcomeKind.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Not Found")

    return StreamingResponse(
        iter_asset(outcome.stream, outcome.asset_path),
        media_type=outcome.content_type,
        background=BackgroundTask(outcome.stream.close),
    )


class Frontend:
    """
    Serves a frontend application in development or release mode.

    Development: every request goes to the running dev server (or to
    ``localhost:DEV_SERVER_PORT`` when auto-start is skipped).  Release:
    the static resolver picks an asset, a redirect, the SPA fallback or 404.
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[AssetStore] = None,
        interceptor: Optional[FallbackInterceptor] = None,
        launcher: Optional[DevServerLauncher] = None,
        proxy: Optional[ReverseProxy] = None,
    ):
        self.settings = settings
        self.mode = settings.operating_mode
        self.proxy = proxy or ReverseProxy(timeout=settings.PROXY_TIMEOUT)
        self.dev_server = DevServerManager(
            launcher or DevServerLauncher(start_timeout=settings.DEV_SERVER_START_TIMEOUT)
        )

        self.resolver: Optional[StaticAssetResolver] = None
        if self.mode == OperatingMode.RELEASE:
            runtime = inject_runtime_config(settings.RUNTIME_CONFIG) if settings.RUNTIME_CONFIG else None
            self.resolver = StaticAssetResolver(
                store or default_asset_store(settings),
                settings.resolved_root,
                framework_type=settings.FRAMEWORK_TYPE,
                fallback_path=settings.FALLBACK_PATH,
                interceptor=chain_interceptors(runtime, interceptor),
            )

        self._fixed_target: Optional[httpx.URL] = None
        if settings.SKIP_RUNNING_DEV_SERVER and settings.DEV_SERVER_PORT:
            self._fixed_target = httpx.URL(f"http://localhost:{settings.DEV_SERVER_PORT}")

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def startup(self) -> None:
        logger.info(f"Frontend starting in {self.mode.value} mode")
        if self.mode == OperatingMode.RELEASE:
            logger.info(f"Serving {self.settings.resolved_root} from {self.resolver.store!r}")
        elif not self.settings.SKIP_RUNNING_DEV_SERVER:
            await self.dev_server.start(
                self.settings.frontend_folder, self.settings.DEV_SERVER_COMMAND
            )
        elif self._fixed_target is not None:
            logger.info(f"Proxying to externally managed dev server at {self._fixed_target}")
        else:
            logger.warning("Dev server auto-start is disabled and no port is set; nothing to proxy to")

    async def shutdown(self) -> None:
        if self.dev_server.is_running:
            await self.dev_server.stop()
        await self.proxy.aclose()

    # ── Request handling ─────────────────────────────────────────────────────

    async def handle(self, request: Request, path: Optional[str] = None) -> Response:
        """Answer one request; ``path`` is relative to the mount point."""
        if self.mode == OperatingMode.RELEASE:
            if path is None:
                path = request.url.path
            outcome = await run_in_threadpool(self.resolver.resolve, path, request)
            return outcome_to_response(outcome, request)

        target = await self.dev_server.current_target()
        if target is None:
            target = self._fixed_target
        if target is None and self.dev_server.is_starting:
            raise HTTPException(status_code=503, detail="Frontend dev server is starting, retry shortly.")
        if target is None:
            raise HTTPException(
                status_code=503,
                detail=(
                    "Frontend dev server is not running. Start it, or set "
                    "DEV_SERVER_PORT to proxy to one you run yourself."
                ),
            )
        return await self.proxy.forward(request, target)

    def mount(self, app: FastAPI, path: str = "/{full_path:path}") -> None:
        """Register the catch-all route; call after every other route."""

        async def frontend_route(request: Request, full_path: str):
            return await self.handle(request, "/" + full_path)

        app.add_api_route(
            path, frontend_route, methods=ALL_METHODS, include_in_schema=False, name="frontend"
        )
