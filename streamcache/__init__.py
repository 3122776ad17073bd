"""
streamcache - hybrid memory/disk cache for a music streaming client.

Images are held decoded in a bounded LRU memory tier and raw on disk under
``<base>/images/<hex digest>``; other API payloads live in named disk buckets.
"""
from .addresser import digest, format_key, key_for
from .cache import IMAGES_BUCKET, CacheStats, WebApiCache
from .config import CacheConfig, build_cache
from .disk_store import DiskStats, DiskStore, StoreResult
from .memory_tier import MemoryTier

__version__ = "1.0.0"

__all__ = [
    "IMAGES_BUCKET",
    "CacheConfig",
    "CacheStats",
    "DiskStats",
    "DiskStore",
    "MemoryTier",
    "StoreResult",
    "WebApiCache",
    "build_cache",
    "digest",
    "format_key",
    "key_for",
]
