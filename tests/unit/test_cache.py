"""Tests for the WebApiCache facade.

Coverage:
- Image memory tier vs disk tier separation
- Decode-on-read failure handling
- Generic bucket pass-through
- Stats and maintenance operations
- Memory-only operation without a base directory
"""

import sys
import threading
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from streamcache.addresser import key_for
from streamcache.cache import IMAGES_BUCKET, CacheStats, WebApiCache

COVER = "https://i.scdn.co/image/ab67616d0000b273aaaa"


class TestBasicOperations:
    """Round trips through generic buckets."""

    def test_set_get_stats_and_clear_bucket(self, cache):
        assert cache.set("test-bucket", "test-key", b"test data")

        stats = cache.get_stats()
        assert stats.total_entries > 0
        assert stats.total_size > 0

        handle = cache.get("test-bucket", "test-key")
        assert handle is not None
        with handle:
            assert handle.read(100) == b"test data"

        cache.clear_bucket("test-bucket")
        assert cache.get_stats().total_entries == 0

    def test_clear_all(self, cache):
        cache.set("bucket1", "key1", b"data1")
        cache.set("bucket2", "key2", b"data2")
        cache.set_image(COVER, object())
        assert cache.get_stats().total_entries == 2

        cache.clear_all()

        stats = cache.get_stats()
        assert stats == CacheStats(total_size=0, total_entries=0, image_cache_entries=0)
        assert cache.get("bucket1", "key1") is None
        assert cache.get_image(COVER) is None

    def test_clear_bucket_leaves_other_buckets(self, cache):
        cache.set("album", "a", b"1")
        cache.set("playlist", "p", b"2")
        cache.clear_bucket("album")
        assert cache.get("album", "a") is None
        with cache.get("playlist", "p") as handle:
            assert handle.read() == b"2"

    def test_clear_bucket_keeps_memory_images(self, cache):
        cache.set_image(COVER, "decoded")
        cache.save_image_to_disk(COVER, b"IMG:cover")
        cache.clear_bucket(IMAGES_BUCKET)
        assert cache.get_image(COVER) == "decoded"
        assert cache.get_image_from_disk(COVER) is None

    def test_stats_to_dict(self, cache):
        cache.set("album", "a", b"123")
        assert cache.get_stats().to_dict() == {
            "total_size": 3,
            "total_entries": 1,
            "image_cache_entries": 0,
        }


class TestImages:
    """Image tier behaviour."""

    def test_get_image_is_memory_only(self, cache):
        cache.save_image_to_disk(COVER, b"IMG:cover")
        assert cache.get_image(COVER) is None

    def test_set_and_get_image(self, cache):
        cache.set_image(COVER, "decoded")
        assert cache.get_image(COVER) == "decoded"
        assert cache.get_stats().image_cache_entries == 1

    def test_image_file_is_addressed_by_digest(self, cache, cache_dir):
        assert cache.save_image_to_disk(COVER, b"IMG:cover")
        path = cache_dir / IMAGES_BUCKET / key_for(COVER)
        assert path.read_bytes() == b"IMG:cover"

    def test_same_uri_same_slot(self, cache, cache_dir):
        cache.save_image_to_disk(COVER, b"IMG:one")
        cache.save_image_to_disk(COVER, b"IMG:two")
        assert len(list((cache_dir / IMAGES_BUCKET).iterdir())) == 1

    def test_get_image_from_disk(self, cache):
        cache.save_image_to_disk(COVER, b"IMG:cover")
        image = cache.get_image_from_disk(COVER)
        assert image.payload == b"cover"

    def test_get_image_from_disk_does_not_populate_memory(self, cache):
        cache.save_image_to_disk(COVER, b"IMG:cover")
        cache.get_image_from_disk(COVER)
        assert cache.get_image(COVER) is None

    def test_get_image_from_disk_missing(self, cache):
        assert cache.get_image_from_disk(COVER) is None

    def test_get_image_from_disk_undecodable(self, cache):
        cache.save_image_to_disk(COVER, b"<html>not an image</html>")
        assert cache.get_image_from_disk(COVER) is None

    def test_get_image_from_disk_decoder_raises(self, cache_dir):
        def broken(data):
            raise RuntimeError("decoder exploded")

        cache = WebApiCache(cache_dir, decoder=broken)
        cache.save_image_to_disk(COVER, b"IMG:cover")
        assert cache.get_image_from_disk(COVER) is None

    def test_image_capacity(self, cache):
        for i in range(10):
            cache.set_image(f"{COVER}/{i}", i)
        assert cache.get_stats().image_cache_entries == 4
        assert cache.get_image(f"{COVER}/0") is None
        assert cache.get_image(f"{COVER}/9") == 9

    def test_save_failure_does_not_raise(self, cache_dir):
        cache_dir.mkdir(parents=True)
        (cache_dir / IMAGES_BUCKET).write_bytes(b"file in the way")
        cache = WebApiCache(cache_dir, decoder=lambda data: data)
        assert cache.save_image_to_disk(COVER, b"IMG:cover") is False
        assert cache.get_image_from_disk(COVER) is None


class TestMemoryOnly:
    """No base directory: images in memory, everything else a no-op."""

    def test_get_always_empty(self, memory_only_cache):
        for bucket, key in [("album", "a"), ("images", key_for(COVER)), ("x", "y")]:
            assert memory_only_cache.set(bucket, key, b"1") is False
            assert memory_only_cache.get(bucket, key) is None

    def test_images_still_cached_in_memory(self, memory_only_cache):
        memory_only_cache.set_image(COVER, "decoded")
        assert memory_only_cache.get_image(COVER) == "decoded"

    def test_disk_image_calls_are_noops(self, memory_only_cache):
        assert memory_only_cache.save_image_to_disk(COVER, b"IMG:cover") is False
        assert memory_only_cache.get_image_from_disk(COVER) is None

    def test_stats_and_clear(self, memory_only_cache):
        memory_only_cache.set_image(COVER, "decoded")
        assert memory_only_cache.get_stats() == CacheStats(0, 0, 1)
        memory_only_cache.clear_bucket("album")
        memory_only_cache.clear_all()
        assert memory_only_cache.get_stats() == CacheStats(0, 0, 0)
        assert memory_only_cache.base is None


class TestClearFailures:
    """Clear errors surface to the caller."""

    def test_clear_all_failure_still_clears_memory(self, cache, monkeypatch):
        cache.set("album", "a", b"1")
        cache.set_image(COVER, "decoded")

        def boom():
            raise PermissionError("busy")

        monkeypatch.setattr(cache.disk, "clear_all", boom)
        with pytest.raises(PermissionError):
            cache.clear_all()
        assert cache.get_image(COVER) is None

    def test_clear_bucket_invalid_name(self, cache):
        with pytest.raises(ValueError):
            cache.clear_bucket("../etc")


class TestConcurrency:
    """Concurrent callers sharing one cache."""

    def test_concurrent_set_and_get_image(self, cache):
        errors = []

        def worker(n: int):
            try:
                for i in range(1000):
                    uri = f"{COVER}/{i % 8}"
                    cache.set_image(uri, (uri, n, i))
                    image = cache.get_image(uri)
                    if image is not None:
                        assert image[0] == uri
            except Exception as e:  # pragma: no cover - surfaced below
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert cache.get_stats().image_cache_entries == 4

    def test_concurrent_writers_same_key(self, cache):
        """Same-key writers race; the entry is always one whole payload."""
        payloads = [bytes([n]) * 4096 for n in range(6)]

        def writer(payload: bytes):
            for _ in range(50):
                cache.set("album", "shared", payload)

        threads = [threading.Thread(target=writer, args=(p,)) for p in payloads]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        with cache.get("album", "shared") as handle:
            assert handle.read() in payloads
        assert cache.get_stats().total_entries == 1
