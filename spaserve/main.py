"""FastAPI application factory: health check, dev-server API and the frontend."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request

from spaserve import __version__
from spaserve.config import Settings, build_settings
from spaserve.frontend import Frontend
from spaserve.models import OperatingMode
from spaserve.routers import dev_server
from spaserve.schemas import HealthResponse


def create_app(settings: Optional[Settings] = None, frontend: Optional[Frontend] = None) -> FastAPI:
    """
    Build the ASGI app.

    Routes are matched in registration order, so the frontend catch-all is
    added last.  OpenAPI docs are disabled because ``/docs`` belongs to the
    frontend.
    """
    if frontend is None:
        frontend = Frontend(settings or build_settings())
    settings = frontend.settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Start the dev server (development mode) and stop it on shutdown."""
        await frontend.startup()
        try:
            yield
        finally:
            await frontend.shutdown()

    app = FastAPI(
        title="spaserve",
        description="Serves a frontend build, or proxies to its dev server.",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.frontend = frontend

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check(request: Request):
        return HealthResponse(mode=request.app.state.frontend.mode)

    if settings.DEV_CONTROL_API and frontend.mode == OperatingMode.DEVELOPMENT:
        app.include_router(dev_server.router)

    frontend.mount(app)
    return app
