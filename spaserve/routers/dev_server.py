"""Dev-server control API endpoints (opt-in, development mode only).

Includes:
  - GET /status: whether a dev server is running, its URL and pid
  - POST /start: launch the configured dev-server command
  - POST /stop: stop the running dev server
"""

from fastapi import APIRouter, Depends, HTTPException, Request

from spaserve.errors import (
    ConfigurationMissing,
    DevServerAlreadyRunning,
    DevServerNotRunning,
    DevServerStartError,
)
from spaserve.schemas import DevServerStatus

router = APIRouter(prefix="/api/dev-server", tags=["Dev Server"])


def get_frontend(request: Request):
    return request.app.state.frontend


@router.get("/status", response_model=DevServerStatus)
async def dev_server_status(frontend=Depends(get_frontend)):
    return frontend.dev_server.status()


@router.post("/start", response_model=DevServerStatus)
async def start_dev_server(frontend=Depends(get_frontend)):
    """Launch the dev server with the configured command."""
    settings = frontend.settings
    try:
        await frontend.dev_server.start(settings.frontend_folder, settings.DEV_SERVER_COMMAND)
    except DevServerAlreadyRunning as e:
        raise HTTPException(status_code=409, detail=str(e))
    except ConfigurationMissing as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DevServerStartError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return frontend.dev_server.status()


@router.post("/stop", response_model=DevServerStatus)
async def stop_dev_server(frontend=Depends(get_frontend)):
    try:
        await frontend.dev_server.stop()
    except DevServerNotRunning as e:
        raise HTTPException(status_code=409, detail=str(e))
    return frontend.dev_server.status()
