"""Global histogram equalization."""
from __future__ import annotations

import logging

import numpy as np

from .buffer import ImageLike, PixelBuffer
from .grayscale import to_grayscale

__all__ = ["histogram", "cumulative_histogram", "equalization_lut", "equalize"]

logger = logging.getLogger(__name__)

_LEVELS = 256


def histogram(gray: np.ndarray) -> np.ndarray:
    """Return the 256-bin intensity histogram of a uint8 plane."""
    return np.bincount(gray.ravel(), minlength=_LEVELS).astype(np.int64)


def cumulative_histogram(hist: np.ndarray) -> np.ndarray:
    return np.cumsum(hist, dtype=np.int64)


def equalization_lut(hist: np.ndarray) -> np.ndarray:
    """Build the intensity remap table for *hist*.

    Levels whose cumulative count is still zero map to 0. When a single
    level holds every pixel the remap has a zero denominator; the identity
    table is returned instead.
    """
    cdf = cumulative_histogram(hist)
    total = int(cdf[-1])
    nonzero = np.flatnonzero(cdf)
    if nonzero.size == 0:
        return np.arange(_LEVELS, dtype=np.uint8)
    cdf_min = int(cdf[nonzero[0]])

    if total == cdf_min:
        return np.arange(_LEVELS, dtype=np.uint8)

    scaled = (cdf - cdf_min).astype(np.float64) / (total - cdf_min) * 255.0
    lut = np.clip(np.rint(scaled), 0, 255).astype(np.uint8)
    lut[cdf == 0] = 0
    return lut


def equalize(image: ImageLike) -> PixelBuffer:
    """Equalize the grayscale histogram of *image*.

    A constant image is returned as an unchanged grayscale copy.
    """
    gray = to_grayscale(image)
    values = gray.gray
    hist = histogram(values)
    if np.count_nonzero(hist) == 1:
        logger.debug("equalize: constant image, returning copy")
        return gray

    lut = equalization_lut(hist)
    return PixelBuffer(lut[values])
