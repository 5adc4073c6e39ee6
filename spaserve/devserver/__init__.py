"""Development mode: dev-server lifecycle and the reverse proxy in front of it."""

from spaserve.devserver.launcher import DevServerHandle, DevServerLauncher, parse_dev_server_url
from spaserve.devserver.manager import DevServerManager
from spaserve.devserver.proxy import ReverseProxy

__all__ = [
    "DevServerHandle",
    "DevServerLauncher",
    "DevServerManager",
    "ReverseProxy",
    "parse_dev_server_url",
]
