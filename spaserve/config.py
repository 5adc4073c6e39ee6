"""Application configuration via pydantic-settings."""

import os
from pathlib import Path, PurePosixPath
from typing import Any, Dict, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from spaserve.models import FrameworkType, OperatingMode


class Settings(BaseSettings):
    # Frozen: a Frontend captures one Settings instance for its whole lifetime.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", frozen=True
    )

    # Mode: unset means "release when an assets package is configured"
    MODE: Optional[OperatingMode] = None

    # Frontend project layout
    FRONTEND_FOLDER_NAME: str = "frontend"
    FRONTEND_FOLDER_PATH: str = "."
    DIST_FOLDER: str = "dist"
    FALLBACK_PATH: str = "index.html"
    FRAMEWORK_TYPE: FrameworkType = FrameworkType.GENERIC

    # Release assets packaged inside an importable module (e.g. "myapp")
    ASSETS_PACKAGE: Optional[str] = None

    # Injected into the fallback document as window.__RUNTIME_CONFIG__
    RUNTIME_CONFIG: Optional[Dict[str, Any]] = None

    # Dev server
    DEV_SERVER_COMMAND: str = "yarn dev"
    SKIP_RUNNING_DEV_SERVER: bool = False
    DEV_SERVER_PORT: int = 0
    DEV_SERVER_START_TIMEOUT: float = 60.0
    DEV_CONTROL_API: bool = False

    # Proxy
    PROXY_TIMEOUT: float = 30.0

    # Server
    HOST: str = "127.0.0.1"
    PORT: int = 8000
    LOG_LEVEL: str = "INFO"

    @property
    def operating_mode(self) -> OperatingMode:
        if self.MODE is not None:
            return self.MODE
        return OperatingMode.RELEASE if self.ASSETS_PACKAGE else OperatingMode.DEVELOPMENT

    @property
    def frontend_folder(self) -> Path:
        """Frontend project folder (where package.json lives).

        Absolute only when the settings come from ``build_settings``; a bare
        ``Settings()`` keeps ``FRONTEND_FOLDER_PATH`` as given.
        """
        return Path(self.FRONTEND_FOLDER_PATH)

    @property
    def resolved_root(self) -> str:
        """Asset-store path of the build output, e.g. ``frontend/dist``."""
        return str(PurePosixPath(self.FRONTEND_FOLDER_NAME) / self.DIST_FOLDER)


def build_settings(**overrides) -> Settings:
    """Build settings, making the frontend folder path absolute.

    An absolute ``FRONTEND_FOLDER_PATH`` names the frontend folder itself and
    its basename wins over ``FRONTEND_FOLDER_NAME``.  A relative one is the
    parent directory and gets ``FRONTEND_FOLDER_NAME`` appended.
    """
    s = Settings(**overrides)
    folder_path = s.FRONTEND_FOLDER_PATH or "."
    if os.path.isabs(folder_path):
        folder_name = Path(folder_path).name
        absolute = Path(folder_path)
    else:
        folder_name = s.FRONTEND_FOLDER_NAME
        absolute = Path(os.path.abspath(folder_path)) / folder_name
    return s.model_copy(
        update={"FRONTEND_FOLDER_NAME": folder_name, "FRONTEND_FOLDER_PATH": str(absolute)}
    )
