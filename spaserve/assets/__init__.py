"""Release-mode asset serving."""

from spaserve.assets.interceptors import chain_interceptors, inject_runtime_config
from spaserve.assets.resolver import FallbackInterceptor, StaticAssetResolver, identity_interceptor
from spaserve.assets.store import AssetStore, DirectoryAssetStore, PackageAssetStore

__all__ = [
    "AssetStore",
    "DirectoryAssetStore",
    "PackageAssetStore",
    "StaticAssetResolver",
    "FallbackInterceptor",
    "identity_interceptor",
    "inject_runtime_config",
    "chain_interceptors",
]
