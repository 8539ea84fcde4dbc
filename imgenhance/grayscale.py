"""Colour to luma reduction."""
from __future__ import annotations

import numpy as np

from .buffer import ImageLike, PixelBuffer, as_buffer

__all__ = ["to_grayscale", "luma"]

# NTSC weights
_R_WEIGHT = 0.299
_G_WEIGHT = 0.587
_B_WEIGHT = 0.114


def luma(rgb: np.ndarray) -> np.ndarray:
    """Return the truncated uint8 luma plane of an (H, W, 3) RGB array."""
    r = rgb[..., 0].astype(np.float64)
    g = rgb[..., 1].astype(np.float64)
    b = rgb[..., 2].astype(np.float64)
    gray = _R_WEIGHT * r + _G_WEIGHT * g + _B_WEIGHT * b
    return np.clip(np.trunc(gray), 0, 255).astype(np.uint8)


def to_grayscale(image: ImageLike) -> PixelBuffer:
    """Reduce *image* to a single-channel buffer.

    Single-channel input is already luma and comes back as an equal copy.
    Three-channel input goes through the weighted sum even when the
    channels are equal.
    """
    buf = as_buffer(image)
    if buf.is_grayscale:
        return buf.copy()
    return PixelBuffer(luma(buf.pixels))
