"""
Disk Store - bucket-scoped persistent byte storage.

Layout is exactly two levels deep::

    <base>/<bucket>/<key>

Each entry is a plain file; its existence is its validity. Nothing here is a
system of record, so write failures are logged and reported through a
StoreResult instead of raised. A store built with ``base=None`` is disabled:
reads miss and writes are no-ops.
"""
from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class StoreResult:
    """Outcome of a write. Falsy when the write did not happen."""

    ok: bool
    path: Optional[Path] = None
    error: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def failed(cls, error: str, path: Optional[Path] = None) -> "StoreResult":
        return cls(ok=False, path=path, error=error)


@dataclass(frozen=True)
class DiskStats:
    total_size: int = 0
    total_entries: int = 0


def _is_valid_component(name: str) -> bool:
    """A bucket or key must name exactly one directory entry."""
    if not name or name in (".", ".."):
        return False
    if "\x00" in name or "/" in name:
        return False
    if os.sep in name or (os.altsep and os.altsep in name):
        return False
    return True


def mkdir_if_not_exists(path: Path) -> None:
    """Create ``path`` and any parents, ignoring an existing directory."""
    path.mkdir(parents=True, exist_ok=True)


class DiskStore:
    """Directory-per-bucket, file-per-key store rooted at ``base``."""

    def __init__(self, base: Optional[PathLike]):
        self.base: Optional[Path] = Path(base) if base is not None else None

    @property
    def enabled(self) -> bool:
        return self.base is not None

    def bucket_path(self, bucket: str) -> Optional[Path]:
        if self.base is None or not _is_valid_component(bucket):
            return None
        return self.base / bucket

    def key_path(self, bucket: str, key: str) -> Optional[Path]:
        bucket_dir = self.bucket_path(bucket)
        if bucket_dir is None or not _is_valid_component(key):
            return None
        return bucket_dir / key

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, bucket: str, key: str) -> Optional[BinaryIO]:
        """
        Open a cached entry for reading.

        Returns:
            An open binary file the caller must close, or None when the
            store is disabled, the entry is absent, or it cannot be opened.
        """
        path = self.key_path(bucket, key)
        if path is None:
            return None
        try:
            handle = open(path, "rb")
        except OSError:
            logger.debug("Cache MISS: %s/%s", bucket, key)
            return None
        logger.debug("Cache HIT: %s/%s", bucket, key)
        return handle

    def read(self, bucket: str, key: str) -> Optional[bytes]:
        """Read a whole entry into memory, or None on any failure."""
        handle = self.get(bucket, key)
        if handle is None:
            return None
        try:
            with handle:
                return handle.read()
        except OSError as e:
            logger.warning("Failed to read cache entry %s/%s: %s", bucket, key, e)
            return None

    def modified_at(self, bucket: str, key: str) -> Optional[float]:
        """Return the entry's modification time (epoch seconds), if present."""
        path = self.key_path(bucket, key)
        if path is None:
            return None
        try:
            return path.stat().st_mtime
        except OSError:
            return None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def put(self, bucket: str, key: str, data: bytes) -> StoreResult:
        """
        Write ``data`` to ``bucket/key``, replacing any previous entry.

        The bytes go to a temporary sibling first and are renamed into
        place, so a concurrent reader sees either the old entry or the new
        one. Same-key writers race and the last rename wins.
        """
        if self.base is None:
            return StoreResult.failed("disk cache disabled")

        bucket_dir = self.bucket_path(bucket)
        path = self.key_path(bucket, key)
        if bucket_dir is None or path is None:
            logger.error("Refusing to cache invalid entry name: %r/%r", bucket, key)
            return StoreResult.failed(f"invalid entry name: {bucket!r}/{key!r}")

        try:
            mkdir_if_not_exists(bucket_dir)
        except OSError as e:
            logger.error("Failed to create cache bucket %s: %s", bucket_dir, e)
            return StoreResult.failed(str(e), path)

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=str(bucket_dir), prefix=".tmp-", suffix=".part")
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            logger.error("Failed to save to cache %s: %s", path, e)
            return StoreResult.failed(str(e), path)
        finally:
            if tmp_name is not None:
                try:
                    os.remove(tmp_name)
                except OSError:
                    pass

        logger.debug("Cached %d bytes at %s/%s", len(data), bucket, key)
        return StoreResult(ok=True, path=path)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def clear_bucket(self, bucket: str) -> None:
        """
        Remove a bucket's entries and leave an empty directory behind.

        A missing bucket is not an error. Other I/O errors propagate as
        OSError. Invalid bucket names raise ValueError.
        """
        if self.base is None:
            return
        bucket_dir = self.bucket_path(bucket)
        if bucket_dir is None:
            logger.error("Refusing to clear invalid bucket name: %r", bucket)
            raise ValueError(f"Invalid bucket name: {bucket!r}")

        try:
            try:
                shutil.rmtree(bucket_dir)
            except FileNotFoundError:
                pass
            mkdir_if_not_exists(bucket_dir)
        except OSError as e:
            logger.error("Failed to clear cache bucket %s: %s", bucket_dir, e)
            raise
        logger.info("Cleared cache bucket: %s", bucket)

    def clear_all(self) -> None:
        """Remove every bucket and recreate an empty base directory."""
        if self.base is None:
            return
        try:
            try:
                shutil.rmtree(self.base)
            except FileNotFoundError:
                pass
            mkdir_if_not_exists(self.base)
        except OSError as e:
            logger.error("Failed to clear disk cache %s: %s", self.base, e)
            raise
        logger.info("Cleared disk cache: %s", self.base)

    def stats(self) -> DiskStats:
        """
        Walk the store and total up entry sizes and counts.

        Files directly under the base count as entries; each bucket directory
        contributes the files directly inside it. Anything nested deeper is
        not part of the layout and is not counted.
        """
        total_size = 0
        total_entries = 0
        if self.base is None:
            return DiskStats()

        try:
            top_level = list(self.base.iterdir())
        except OSError:
            return DiskStats()

        for entry in top_level:
            if entry.is_file():
                files = [entry]
            elif entry.is_dir():
                try:
                    files = [child for child in entry.iterdir() if child.is_file()]
                except OSError:
                    continue
            else:
                continue

            for path in files:
                try:
                    size = path.stat().st_size
                except OSError:
                    # Removed mid-walk by a concurrent clear
                    continue
                total_size += size
                total_entries += 1

        return DiskStats(total_size=total_size, total_entries=total_entries)
