"""Shared fixtures: a built frontend tree on disk and a fake dev-server launcher."""

import pytest
from httpx import AsyncClient, ASGITransport

from spaserve.config import build_settings
from spaserve.frontend import Frontend
from spaserve.main import create_app

INDEX_HTML = b"<!doctype html><html><head><title>App</title></head><body><div id=app></div></body></html>"
ABOUT_HTML = b"<html><body>about page</body></html>"
APP_JS = b"console.log('app');\n"
BLOG_HTML = b"<html><body>generated blog</body></html>"
SITE_CSS = b"body { margin: 0 }\n"


def write_file(path, content: bytes):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def frontend_dir(tmp_path):
    """tmp/frontend with package.json and a dist/ build."""
    folder = tmp_path / "frontend"
    write_file(folder / "package.json", b'{"name": "demo", "scripts": {"dev": "vite"}}')
    dist = folder / "dist"
    write_file(dist / "index.html", INDEX_HTML)
    write_file(dist / "app.js", APP_JS)
    write_file(dist / "about" / "index.html", ABOUT_HTML)
    write_file(dist / "blog.html", BLOG_HTML)
    write_file(dist / "assets" / "site.css", SITE_CSS)
    (dist / "empty").mkdir()
    return folder


def _make_settings(frontend_dir, **overrides):
    values = {"FRONTEND_FOLDER_PATH": str(frontend_dir), "_env_file": None}
    values.update(overrides)
    return build_settings(**values)


@pytest.fixture
def make_settings(frontend_dir):
    """Settings for the tmp frontend; keyword arguments override fields."""
    return lambda **overrides: _make_settings(frontend_dir, **overrides)


class FakeHandle:
    def __init__(self, base_url: str, command: str):
        self.base_url = base_url
        self.command = command
        self.pid = 4242
        self.stopped = False

    async def stop(self):
        self.stopped = True


class FakeLauncher:
    """Stands in for the subprocess launcher; records every start."""

    def __init__(self, base_url: str = "http://upstream.test"):
        self.base_url = base_url
        self.started = []

    async def start(self, folder, command):
        handle = FakeHandle(self.base_url, command)
        self.started.append((folder, command, handle))
        return handle


@pytest.fixture
def fake_launcher():
    return FakeLauncher()


@pytest.fixture
def release_frontend(frontend_dir):
    return Frontend(_make_settings(frontend_dir, MODE="release"))


@pytest.fixture
async def release_client(release_frontend):
    transport = ASGITransport(app=create_app(frontend=release_frontend))
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
