"""Tests for the dev-server launcher, using real child processes."""

import shlex
import sys
from pathlib import Path

import pytest

from spaserve.devserver.launcher import DevServerLauncher, parse_dev_server_url
from spaserve.errors import DevServerStartError

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell quoting")

PYTHON = shlex.quote(sys.executable)


def _python_command(code: str) -> str:
    return f"{PYTHON} -u -c {shlex.quote(code)}"


class TestParseDevServerUrl:
    def test_vite_banner(self):
        assert parse_dev_server_url("  ➜  Local:   http://localhost:5173/") == "http://localhost:5173/"

    def test_ansi_colour_codes(self):
        line = "  Local:   http://localhost:\x1b[1m5173\x1b[22m/"
        assert parse_dev_server_url(line) == "http://localhost:5173/"

    def test_wildcard_host_becomes_localhost(self):
        assert parse_dev_server_url("ready - started server on 0.0.0.0:3000, url: http://0.0.0.0:3000") == \
            "http://localhost:3000/"

    def test_path_is_kept(self):
        assert parse_dev_server_url("Local: http://127.0.0.1:4200/app/") == "http://127.0.0.1:4200/app/"

    def test_no_url(self):
        assert parse_dev_server_url("compiling...") is None
        assert parse_dev_server_url("see https://vitejs.dev for docs") is None


class TestDevServerLauncher:
    @pytest.mark.asyncio
    async def test_start_waits_for_url_and_stop_terminates(self, tmp_path):
        code = (
            "import time\n"
            "print('starting dev server')\n"
            "print('  Local:   http://localhost:5999/')\n"
            "time.sleep(60)\n"
        )
        launcher = DevServerLauncher(start_timeout=20)
        handle = await launcher.start(tmp_path, _python_command(code))
        try:
            assert handle.base_url == "http://localhost:5999/"
            assert handle.process.returncode is None
        finally:
            await handle.stop()
        assert handle.process.returncode is not None

    @pytest.mark.asyncio
    async def test_runs_in_project_folder(self, tmp_path):
        marker = tmp_path / "cwd.txt"
        code = (
            "import os, time\n"
            "open('cwd.txt', 'w').write(os.getcwd())\n"
            "print('http://localhost:6001/', flush=True)\n"
            "time.sleep(60)\n"
        )
        handle = await DevServerLauncher(start_timeout=20).start(tmp_path, _python_command(code))
        await handle.stop()
        assert Path(marker.read_text()).resolve() == tmp_path.resolve()

    @pytest.mark.asyncio
    async def test_exit_before_url(self, tmp_path):
        launcher = DevServerLauncher(start_timeout=20)
        with pytest.raises(DevServerStartError, match="exited with code 3"):
            await launcher.start(tmp_path, _python_command("import sys; print('boom'); sys.exit(3)"))

    @pytest.mark.asyncio
    async def test_timeout_kills_process(self, tmp_path):
        launcher = DevServerLauncher(start_timeout=0.5)
        with pytest.raises(DevServerStartError, match="did not report a URL"):
            await launcher.start(tmp_path, _python_command("import time; time.sleep(60)"))
