"""Rank-order (median) filtering."""
from __future__ import annotations

import numpy as np

from .buffer import ImageLike, PixelBuffer, check_radius, clipped_windows, row_blocks
from .grayscale import to_grayscale

__all__ = ["median_filter"]


def median_filter(image: ImageLike, radius: int = 1) -> PixelBuffer:
    """Replace every pixel by the median of its clipped neighbourhood.

    The window is the (2*radius+1) square around the pixel with positions
    outside the image dropped. Values are sorted and the element at index
    ``count // 2`` is taken, so an even-sized window near a border selects
    the upper of its two middle values.
    """
    radius = check_radius(radius)
    gray = to_grayscale(image)
    if radius == 0:
        return gray

    values = gray.gray
    h, w = values.shape
    windows, counts = clipped_windows(values, radius)
    size = windows.shape[-2] * windows.shape[-1]
    index = counts // 2

    out = np.empty((h, w), dtype=np.uint8)
    for rows in row_blocks(h, w * size):
        block = windows[rows].reshape(-1, w, size)
        # out-of-bounds NaN become +inf and sort past every real value
        block = np.where(np.isnan(block), np.inf, block)
        block.sort(axis=-1)
        picked = np.take_along_axis(block, index[rows][..., None], axis=-1)
        out[rows] = picked[..., 0].astype(np.uint8)
    return PixelBuffer(out)
