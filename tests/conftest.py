"""Test configuration and fixtures."""

import os
import sys
from dataclasses import dataclass
from pathlib import Path

import pytest

# Add repo root to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from streamcache.cache import WebApiCache


@dataclass(frozen=True)
class FakeImage:
    """Stand-in for a decoded image in tests that do not need Qt."""

    payload: bytes


def fake_decode(data: bytes):
    """Decode b"IMG:<payload>" into a FakeImage; anything else is invalid."""
    if not data.startswith(b"IMG:"):
        return None
    return FakeImage(data[4:])


@pytest.fixture()
def cache_dir(tmp_path):
    return tmp_path / "cache"


@pytest.fixture()
def cache(cache_dir):
    """Disk-backed cache with a small image tier and a fake decoder."""
    return WebApiCache(cache_dir, image_capacity=4, decoder=fake_decode)


@pytest.fixture()
def memory_only_cache():
    return WebApiCache(None, image_capacity=4, decoder=fake_decode)


@pytest.fixture()
def qt_app():
    """
    A QGuiApplication on the offscreen platform, so image format plugins
    load the same way they do in the client.
    """
    pytest.importorskip("PySide6")
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    app = QGuiApplication.instance() or QGuiApplication([])
    yield app
