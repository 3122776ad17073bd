"""
Cached API records.

Structured responses (albums, playlists, user profiles) are stored as JSON
blobs in a generic disk bucket. On read they come back wrapped in Cached,
which carries the time the blob was written so callers can decide whether
to show it and refresh in the background. The cache applies no TTL itself.
"""
from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from .cache import WebApiCache

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Cached:
    value: Any
    cached_at: Optional[float] = None

    @classmethod
    def fresh(cls, value: Any) -> "Cached":
        """Wrap a value that was just fetched (not read from disk)."""
        return cls(value=value, cached_at=None)

    @property
    def is_cached(self) -> bool:
        return self.cached_at is not None

    def age(self, now: Optional[float] = None) -> float:
        """Seconds since the record was written; 0.0 for fresh values."""
        if self.cached_at is None:
            return 0.0
        now = time.time() if now is None else now
        return max(0.0, now - self.cached_at)

    def cached_at_datetime(self) -> Optional[datetime]:
        if self.cached_at is None:
            return None
        return datetime.fromtimestamp(self.cached_at)


def load_cached(cache: WebApiCache, bucket: str, key: str) -> Optional[Cached]:
    """Load a JSON record, or None if absent or not valid JSON."""
    handle = cache.get(bucket, key)
    if handle is None:
        return None
    try:
        with handle:
            value = json.load(handle)
    except (OSError, ValueError) as e:
        logger.warning(f"Ignoring corrupt cached record {bucket}/{key}: {e}")
        return None
    return Cached(value=value, cached_at=cache.disk.modified_at(bucket, key))


def store_cached(cache: WebApiCache, bucket: str, key: str, value: Any) -> bool:
    """Serialise ``value`` as JSON and write it to ``bucket/key``."""
    try:
        payload = json.dumps(value, ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        logger.error(f"Cannot cache {bucket}/{key}, value is not JSON-serialisable: {e}")
        return False
    return cache.set(bucket, key, payload)
