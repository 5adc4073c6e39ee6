"""Serve a frontend application: dev-server proxy or release build with SPA fallback."""

__version__ = "1.0.0"

from spaserve.config import Settings, build_settings  # noqa: E402
from spaserve.frontend import Frontend  # noqa: E402
from spaserve.models import FrameworkType, OperatingMode  # noqa: E402

__all__ = [
    "__version__",
    "Settings",
    "build_settings",
    "Frontend",
    "FrameworkType",
    "OperatingMode",
]
