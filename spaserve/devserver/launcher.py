"""Spawn a frontend dev server and wait until it prints its local URL."""

import asyncio
import contextlib
import logging
import os
import re
import signal
from pathlib import Path
from typing import Optional

from spaserve.errors import DevServerStartError

logger = logging.getLogger(__name__)

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_URL_RE = re.compile(r"(https?)://(localhost|127\.0\.0\.1|0\.0\.0\.0|\[::1?\]):(\d+)(/[^\s'\"]*)?")

_STDOUT_LIMIT = 1024 * 1024


def parse_dev_server_url(line: str) -> Optional[str]:
    """
    Extract a local dev-server URL from one line of output.

    Vite, webpack-dev-server, Next.js and friends all print something like
    ``Local: http://localhost:5173/``.  Wildcard bind addresses are
    rewritten to ``localhost`` so the URL is usable as a proxy target.
    """
    match = _URL_RE.search(_ANSI_RE.sub("", line))
    if not match:
        return None
    scheme, host, port, path = match.groups()
    if host in ("0.0.0.0", "[::]"):
        host = "localhost"
    return f"{scheme}://{host}:{port}{(path or '/').rstrip('.,;')}"


def _send_signal(process: asyncio.subprocess.Process, sig: int) -> None:
    with contextlib.suppress(ProcessLookupError):
        if os.name == "nt":
            process.terminate()
        else:
            # The dev server runs in its own session; signal the whole group so
            # package-manager wrappers don't leave the real server orphaned.
            os.killpg(process.pid, sig)


async def _terminate(process: asyncio.subprocess.Process, grace: float = 5.0) -> None:
    if process.returncode is not None:
        return
    _send_signal(process, signal.SIGTERM)
    try:
        await asyncio.wait_for(process.wait(), grace)
    except asyncio.TimeoutError:
        logger.warning(f"Dev server (pid {process.pid}) ignored SIGTERM, killing it")
        _send_signal(process, getattr(signal, "SIGKILL", signal.SIGTERM))
        await process.wait()


class DevServerHandle:
    """A running dev server: its URL plus the means to stop it."""

    def __init__(
        self,
        process: asyncio.subprocess.Process,
        base_url: str,
        command: str,
        drain_task: Optional[asyncio.Task] = None,
    ):
        self.process = process
        self.base_url = base_url
        self.command = command
        self._drain_task = drain_task

    @property
    def pid(self) -> int:
        return self.process.pid

    async def stop(self, grace: float = 5.0) -> None:
        await _terminate(self.process, grace)
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._drain_task
        logger.info(f"Dev server (pid {self.pid}) exited with code {self.process.returncode}")


class DevServerLauncher:
    """Starts ``command`` through the shell inside the frontend folder."""

    def __init__(self, start_timeout: float = 60.0):
        self.start_timeout = start_timeout

    async def start(self, folder, command: str) -> DevServerHandle:
        folder = Path(folder)
        logger.info(f"Starting dev server in {folder}: {command}")

        kwargs = {} if os.name == "nt" else {"start_new_session": True}
        process = await asyncio.create_subprocess_shell(
            command,
            cwd=str(folder),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
            env={**os.environ, "BROWSER": "none"},
            limit=_STDOUT_LIMIT,
            **kwargs,
        )

        try:
            base_url = await asyncio.wait_for(self._wait_for_url(process), self.start_timeout)
        except asyncio.TimeoutError:
            await _terminate(process)
            raise DevServerStartError(
                f"Dev server did not report a URL within {self.start_timeout:g}s: {command}"
            )
        except BaseException:
            await _terminate(process)
            raise

        logger.info(f"Dev server (pid {process.pid}) is ready at {base_url}")
        drain_task = asyncio.create_task(self._drain(process))
        return DevServerHandle(process, base_url, command, drain_task)

    async def _wait_for_url(self, process: asyncio.subprocess.Process) -> str:
        while True:
            raw = await process.stdout.readline()
            if not raw:
                code = await process.wait()
                raise DevServerStartError(
                    f"Dev server exited with code {code} before reporting a URL"
                )
            line = raw.decode("utf-8", errors="replace").rstrip()
            logger.debug(f"[dev] {line}")
            url = parse_dev_server_url(line)
            if url:
                return url

    @staticmethod
    async def _drain(process: asyncio.subprocess.Process) -> None:
        # Keep the pipe empty or the child blocks on write.
        while True:
            raw = await process.stdout.readline()
            if not raw:
                return
            logger.debug(f"[dev] {raw.decode('utf-8', errors='replace').rstrip()}")
