"""Maven-to-Gentoo dependency cache and its on-disk format."""

from .cache_file import CacheFormatError, UnsupportedCacheVersion
from .dependency_cache import DependencyCache

__all__ = [
    "CacheFormatError",
    "DependencyCache",
    "UnsupportedCacheVersion",
]
