"""Dev-server lifecycle: at most one running server per Frontend."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import httpx

from spaserve.devserver.launcher import DevServerHandle, DevServerLauncher
from spaserve.errors import ConfigurationMissing, DevServerAlreadyRunning, DevServerNotRunning
from spaserve.schemas import DevServerStatus

logger = logging.getLogger(__name__)

MANIFEST_FILE = "package.json"


class DevServerManager:
    """
    Owns the single dev-server handle.

    ``start``, ``stop`` and ``current_target`` share one lock so a request
    never builds a proxy target from a handle that is being stopped.  The
    launch itself runs outside the lock; while it is in progress
    ``is_starting`` is set and ``current_target`` returns ``None``.
    Misuse (double start, stop without start) raises instead of being
    ignored.
    """

    def __init__(self, launcher: Optional[DevServerLauncher] = None):
        self.launcher = launcher or DevServerLauncher()
        self._lock = asyncio.Lock()
        self._handle: Optional[DevServerHandle] = None
        self._base_url: Optional[httpx.URL] = None
        self._starting = False

    @property
    def is_running(self) -> bool:
        return self._handle is not None

    @property
    def is_starting(self) -> bool:
        return self._starting

    @property
    def handle(self) -> Optional[DevServerHandle]:
        return self._handle

    async def start(self, project_folder, command: str) -> DevServerHandle:
        manifest = Path(project_folder) / MANIFEST_FILE
        if not manifest.is_file():
            raise ConfigurationMissing(f"{MANIFEST_FILE} not found in {project_folder}")

        async with self._lock:
            if self._handle is not None:
                raise DevServerAlreadyRunning(
                    f"dev server is already running at {self._handle.base_url}"
                )
            if self._starting:
                raise DevServerAlreadyRunning("dev server is already starting")
            self._starting = True

        try:
            handle = await self.launcher.start(project_folder, command)
            try:
                base_url = httpx.URL(handle.base_url)
            except httpx.InvalidURL:
                await handle.stop()
                raise
            async with self._lock:
                self._handle = handle
                self._base_url = base_url
        finally:
            self._starting = False
        return handle

    async def stop(self) -> None:
        async with self._lock:
            if self._handle is None:
                raise DevServerNotRunning()
            handle = self._handle
            try:
                await handle.stop()
            finally:
                self._handle = None
                self._base_url = None
        logger.info("Dev server stopped")

    async def current_target(self) -> Optional[httpx.URL]:
        async with self._lock:
            return self._base_url

    def status(self) -> DevServerStatus:
        handle = self._handle
        if handle is None:
            return DevServerStatus(running=False, starting=self._starting)
        return DevServerStatus(
            running=True,
            base_url=str(handle.base_url),
            pid=getattr(handle, "pid", None),
            command=getattr(handle, "command", None),
        )
