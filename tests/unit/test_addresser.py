"""Tests for content addressing of cache keys."""

import os
import subprocess
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(ROOT_DIR))

from streamcache.addresser import KEY_WIDTH, digest, format_key, key_for


class TestDigest:
    """Tests for digest()."""

    def test_digest_is_repeatable(self):
        uri = "https://i.scdn.co/image/ab67616d0000b273"
        assert digest(uri) == digest(uri)

    def test_digest_fits_in_64_bits(self):
        for uri in ["", "a", "https://example.com/" + "x" * 5000, "日本語"]:
            value = digest(uri)
            assert 0 <= value < 2 ** 64

    def test_distinct_identifiers_get_distinct_digests(self):
        uris = [f"https://i.scdn.co/image/{i}" for i in range(500)]
        assert len({digest(u) for u in uris}) == len(uris)

    def test_digest_stable_across_processes(self):
        """Same identifier, same digest, regardless of hash randomisation."""
        uri = "spotify:album:4aawyAB9vmqN3uQ7FjRGTy"
        code = (
            "import sys; sys.path.insert(0, sys.argv[1]); "
            "from streamcache.addresser import digest; print(digest(sys.argv[2]))"
        )
        results = set()
        for seed in ("0", "1", "12345"):
            env = dict(os.environ, PYTHONHASHSEED=seed)
            out = subprocess.run(
                [sys.executable, "-c", code, str(ROOT_DIR), uri],
                capture_output=True, text=True, check=True, env=env,
            )
            results.add(int(out.stdout.strip()))
        assert results == {digest(uri)}


class TestFormatKey:
    """Tests for the hex key representation."""

    def test_zero_padded(self):
        assert format_key(0) == "0" * 16
        assert format_key(255) == "00000000000000ff"

    def test_max_value(self):
        assert format_key(2 ** 64 - 1) == "f" * 16

    @pytest.mark.parametrize("uri", ["a", "https://example.com/cover.jpg", ""])
    def test_key_for_is_fixed_width_lowercase_hex(self, uri):
        key = key_for(uri)
        assert len(key) == KEY_WIDTH
        assert key == key.lower()
        int(key, 16)

    def test_key_for_matches_digest(self):
        uri = "https://example.com/cover.jpg"
        assert int(key_for(uri), 16) == digest(uri)
