"""
Image decoding for the images bucket.

Decoded images are QImage instances: QImage can be built off the GUI thread
and without a running QApplication, unlike QPixmap.
"""
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QByteArray
from PySide6.QtGui import QImage

logger = logging.getLogger(__name__)


def decode_image(data: bytes) -> Optional[QImage]:
    """Decode encoded image bytes (PNG, JPEG, ...). Returns None if invalid."""
    if not data:
        return None
    image = QImage()
    if not image.loadFromData(QByteArray(data)) or image.isNull():
        logger.debug("Could not decode %d bytes as an image", len(data))
        return None
    return image

