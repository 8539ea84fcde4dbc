"""Linear contrast stretching."""
from __future__ import annotations

import logging

import numpy as np

from .buffer import ImageLike, PixelBuffer
from .grayscale import to_grayscale

__all__ = ["linear_stretch"]

logger = logging.getLogger(__name__)


def linear_stretch(image: ImageLike) -> PixelBuffer:
    """Stretch the grayscale range of *image* so it spans [0, 255].

    A constant image has no range to stretch and is returned unchanged.
    """
    gray = to_grayscale(image)
    values = gray.gray
    lo = int(values.min())
    hi = int(values.max())

    if lo == hi:
        logger.debug("linear_stretch: constant image (value %d), returning copy", lo)
        return gray

    stretched = (values.astype(np.float64) - lo) / (hi - lo) * 255.0
    out = np.clip(np.rint(stretched), 0, 255).astype(np.uint8)
    return PixelBuffer(out)
