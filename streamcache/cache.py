"""
Web API cache facade.

Combines the in-memory image tier with the bucketed disk store. This is the
only object the rest of the client talks to; it is constructed once at
startup (see streamcache.config.build_cache) and passed to whatever needs it.

Tiers:
    - images (memory): decoded images keyed by URI, LRU-bounded
    - images (disk): raw encoded bytes keyed by the URI's hex digest
    - any other bucket (disk): raw payloads such as API response bodies
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Callable, Dict, Optional

from .addresser import key_for
from .disk_store import DiskStore, PathLike
from .memory_tier import DEFAULT_CAPACITY, MemoryTier

logger = logging.getLogger(__name__)

IMAGES_BUCKET = "images"

Decoder = Callable[[bytes], Optional[Any]]


@dataclass(frozen=True)
class CacheStats:
    """Point-in-time snapshot of cache occupancy."""

    total_size: int
    total_entries: int
    image_cache_entries: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "total_size": self.total_size,
            "total_entries": self.total_entries,
            "image_cache_entries": self.image_cache_entries,
        }


class WebApiCache:
    """Hybrid memory/disk cache for remote API responses and images."""

    def __init__(
        self,
        base: Optional[PathLike],
        image_capacity: int = DEFAULT_CAPACITY,
        decoder: Optional[Decoder] = None,
    ):
        """
        Args:
            base: Root directory for the disk tier. None disables disk
                persistence: images stay memory-only and every other bucket
                is a no-op.
            image_capacity: Number of decoded images kept in memory
            decoder: Turns raw image bytes into the in-memory representation.
                Defaults to the QImage decoder, imported on first use so
                that stats and maintenance work without loading Qt.
        """
        self.disk = DiskStore(base)
        self.images = MemoryTier(image_capacity)
        self._decoder = decoder
        if self.disk.enabled:
            logger.info("Web API cache at %s (image capacity %d)", self.disk.base, image_capacity)
        else:
            logger.info("Web API cache running memory-only (image capacity %d)", image_capacity)

    @property
    def base(self):
        return self.disk.base

    @property
    def decoder(self) -> Decoder:
        if self._decoder is None:
            from .images import decode_image
            self._decoder = decode_image
        return self._decoder

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------

    def get_image(self, uri: str) -> Optional[Any]:
        """Memory-tier lookup only; never touches disk."""
        return self.images.get(uri)

    def set_image(self, uri: str, image: Any) -> None:
        self.images.put(uri, image)

    def get_image_from_disk(self, uri: str) -> Optional[Any]:
        """Read and decode a persisted image. Any failure is a miss."""
        data = self.disk.read(IMAGES_BUCKET, key_for(uri))
        if data is None:
            return None
        try:
            return self.decoder(data)
        except Exception as e:
            logger.warning("Discarding undecodable cached image for %s: %s", uri, e)
            return None

    def save_image_to_disk(self, uri: str, data: bytes) -> bool:
        """Persist raw image bytes. Returns False (after logging) on failure."""
        if not self.disk.enabled:
            return False
        logger.info("Saving image to disk: %s", uri)
        return bool(self.disk.put(IMAGES_BUCKET, key_for(uri), data))

    # ------------------------------------------------------------------
    # Generic buckets
    # ------------------------------------------------------------------

    def get(self, bucket: str, key: str) -> Optional[BinaryIO]:
        """Open a cached payload; the caller closes the returned file."""
        return self.disk.get(bucket, key)

    def set(self, bucket: str, key: str, value: bytes) -> bool:
        if not self.disk.enabled:
            return False
        return bool(self.disk.put(bucket, key, value))

    # ------------------------------------------------------------------
    # Stats and maintenance
    # ------------------------------------------------------------------

    def get_stats(self) -> CacheStats:
        disk = self.disk.stats()
        return CacheStats(
            total_size=disk.total_size,
            total_entries=disk.total_entries,
            image_cache_entries=len(self.images),
        )

    def clear_all(self) -> None:
        """Clear every disk bucket and the image memory tier.

        Raises:
            OSError: if the disk tree could not be removed or recreated. The
                memory tier is cleared regardless.
        """
        try:
            self.disk.clear_all()
        finally:
            removed = self.images.clear()
            logger.info("Cleared %d in-memory images", removed)

    def clear_bucket(self, bucket: str) -> None:
        """Clear one disk bucket. The image memory tier is left alone.

        Raises:
            OSError: on I/O errors other than the bucket being absent
            ValueError: if the bucket name is not a single path component
        """
        self.disk.clear_bucket(bucket)
