"""Conversion of rendered spectrograms into Qt images."""

from __future__ import annotations

import numpy as np

from PySide6.QtGui import QImage

from qlspectrumlib.models import SpectrogramResult


def to_qimage(result: SpectrogramResult) -> QImage:
    """Return a QImage that owns a copy of the result's RGBA pixels."""
    # result images are read-only; Qt wants a writable buffer
    rgba = np.array(result.image, dtype=np.uint8, order="C", copy=True)
    h, w = rgba.shape[:2]
    img = QImage(rgba.data, w, h, w * 4, QImage.Format.Format_RGBA8888)
    # detach from the numpy buffer before it goes out of scope
    return img.copy()
