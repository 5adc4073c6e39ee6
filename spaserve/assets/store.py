"""Read-only asset stores: a directory on disk or files shipped in a package."""

import logging
import os
from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path
from typing import BinaryIO, Optional, Tuple

from spaserve.errors import AssetIsDirectory, AssetNotFound

logger = logging.getLogger(__name__)


class AssetStore(ABC):
    """Hierarchical read-only file store.

    Paths are ``/``-separated and relative to the store root.  Request
    handlers only ever read from a store.
    """

    @abstractmethod
    def open(self, path: str) -> Tuple[Optional[BinaryIO], bool]:
        """
        Open ``path`` inside the store.

        Returns:
            ``(stream, False)`` for a regular file, ``(None, True)`` for a
            directory.

        Raises:
            AssetNotFound: nothing exists at ``path``.
        """
        pass

    def open_file(self, path: str) -> BinaryIO:
        """Open ``path`` as a regular file; raises AssetIsDirectory for a directory."""
        stream, is_dir = self.open(path)
        if is_dir:
            raise AssetIsDirectory(path)
        return stream


class DirectoryAssetStore(AssetStore):
    """Assets read from a directory on the local filesystem."""

    def __init__(self, base_dir):
        self.base_dir = Path(os.path.abspath(base_dir))

    def _target(self, path: str) -> Path:
        target = Path(os.path.normpath(self.base_dir / path))
        if target != self.base_dir and self.base_dir not in target.parents:
            logger.warning(f"Refusing asset path outside {self.base_dir}: {path!r}")
            raise AssetNotFound(path)
        return target

    def open(self, path: str) -> Tuple[Optional[BinaryIO], bool]:
        target = self._target(path)
        if target.is_dir():
            return None, True
        try:
            return target.open("rb"), False
        except (FileNotFoundError, NotADirectoryError):
            raise AssetNotFound(path)

    def __repr__(self) -> str:
        return f"DirectoryAssetStore({str(self.base_dir)!r})"


class PackageAssetStore(AssetStore):
    """
    Assets shipped as package data inside an importable Python package.

    This is how a release build bundles its frontend: the ``frontend/dist``
    tree is installed with the host package and read through
    ``importlib.resources``, which also works from zipped installs.
    """

    def __init__(self, package: str):
        self.package = package
        self._root = resources.files(package)

    def open(self, path: str) -> Tuple[Optional[BinaryIO], bool]:
        node = self._root
        for segment in path.split("/"):
            if segment:
                node = node / segment
        if node.is_dir():
            return None, True
        if not node.is_file():
            raise AssetNotFound(path)
        return node.open("rb"), False

    def __repr__(self) -> str:
        return f"PackageAssetStore({self.package!r})"
