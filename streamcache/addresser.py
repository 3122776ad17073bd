"""
Content addressing for cache keys.

Maps an arbitrary identifier (usually a resource URL) to a 64-bit digest and
its canonical 16-character hex form, which is used as the on-disk file name
in the images bucket.

Known limitation: two identifiers whose digests collide share one cache slot.
At 64 bits this only ever means a single cached image is wrong until it is
overwritten, so no chaining is attempted.
"""
from __future__ import annotations

import hashlib

KEY_WIDTH = 16


def digest(identifier: str) -> int:
    """Return a stable unsigned 64-bit digest of ``identifier``.

    Unlike ``hash()``, the value does not depend on PYTHONHASHSEED, so the
    same identifier maps to the same file across process restarts.
    """
    raw = hashlib.blake2b(identifier.encode("utf-8"), digest_size=8).digest()
    return int.from_bytes(raw, "big")


def format_key(value: int) -> str:
    """Format a digest as a zero-padded lowercase hex key."""
    return f"{value:0{KEY_WIDTH}x}"


def key_for(identifier: str) -> str:
    return format_key(digest(identifier))
