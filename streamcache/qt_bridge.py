"""
Qt bridge for cache maintenance actions.

Preferences dialogs connect buttons to these slots and listen on the signals;
no exception from a clear ever escapes into the Qt event loop.
"""
from __future__ import annotations

from PySide6.QtCore import QObject, Signal, Slot

from .cache import WebApiCache

ALL_BUCKETS = "*"


class CacheMaintenance(QObject):
    """Expose stats and clear operations of a WebApiCache to the UI."""

    stats_ready = Signal(object)  # CacheStats
    cleared = Signal(str)  # bucket name, or "*" for everything
    failed = Signal(str)  # human-readable error

    def __init__(self, cache: WebApiCache, parent: QObject = None):
        super().__init__(parent)
        self._cache = cache

    @Slot()
    def refresh_stats(self) -> None:
        self.stats_ready.emit(self._cache.get_stats())

    @Slot()
    def clear_all(self) -> None:
        try:
            self._cache.clear_all()
        except OSError as e:
            self.failed.emit(f"Failed to clear cache: {e}")
            return
        self.cleared.emit(ALL_BUCKETS)
        self.refresh_stats()

    @Slot(str)
    def clear_bucket(self, bucket: str) -> None:
        try:
            self._cache.clear_bucket(bucket)
        except (OSError, ValueError) as e:
            self.failed.emit(f"Failed to clear {bucket}: {e}")
            return
        self.cleared.emit(bucket)
        self.refresh_stats()
