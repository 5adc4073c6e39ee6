"""Exceptions raised by the asset store, resolver and dev-server lifecycle."""


class FrontendError(Exception):
    """Base class for all spaserve errors."""


class ConfigurationMissing(FrontendError):
    """The frontend project folder has no package.json."""


class DevServerAlreadyRunning(FrontendError):
    def __init__(self, message: str = "dev server is already running"):
        super().__init__(message)


class DevServerNotRunning(FrontendError):
    def __init__(self, message: str = "dev server is not running"):
        super().__init__(message)


class DevServerStartError(FrontendError):
    """The dev-server command exited or timed out before printing its URL."""


class AssetNotFound(FrontendError):
    pass


class AssetIsDirectory(FrontendError):
    """A file was required but the path names a directory."""


class PathEscapeRejected(FrontendError):
    """The request path tried to leave the mounted root."""
