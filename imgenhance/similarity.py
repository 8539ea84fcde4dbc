"""Windowed structural similarity (SSIM) between two images."""
from __future__ import annotations

import logging

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view

from .buffer import ImageLike, as_buffer, row_blocks
from .errors import DimensionMismatchError, InvalidParameterError
from .grayscale import to_grayscale

__all__ = ["compute_ssim", "ssim_map", "C1", "C2"]

logger = logging.getLogger(__name__)

_DYNAMIC_RANGE = 255.0
_K1 = 0.01
_K2 = 0.03
C1 = (_K1 * _DYNAMIC_RANGE) ** 2
C2 = (_K2 * _DYNAMIC_RANGE) ** 2


def _check_window_size(window_size: int) -> int:
    if isinstance(window_size, bool) or not isinstance(window_size, (int, np.integer)):
        raise InvalidParameterError(f"window_size must be an integer, got {window_size!r}")
    if window_size < 1:
        raise InvalidParameterError(f"window_size must be positive, got {window_size}")
    return int(window_size)


def _gray_pair(image_a: ImageLike, image_b: ImageLike):
    buf_a = as_buffer(image_a)
    buf_b = as_buffer(image_b)
    if buf_a.shape != buf_b.shape:
        raise DimensionMismatchError(buf_a.shape, buf_b.shape)
    x = to_grayscale(buf_a).gray.astype(np.float64)
    y = to_grayscale(buf_b).gray.astype(np.float64)
    return x, y


def ssim_map(image_a: ImageLike, image_b: ImageLike, window_size: int = 8) -> np.ndarray:
    """Return local SSIM for every window centre where a full window fits.

    Centres run over ``[half, height - half)`` x ``[half, width - half)`` with
    ``half = window_size // 2``; each window spans ``-half..+half`` around its
    centre. The result has shape ``(height - 2*half, width - 2*half)`` and is
    empty when the image is smaller than the window.
    """
    window_size = _check_window_size(window_size)
    x, y = _gray_pair(image_a, image_b)
    half = window_size // 2
    side = 2 * half + 1
    h, w = x.shape
    if h < side or w < side:
        return np.empty((max(0, h - 2 * half), max(0, w - 2 * half)), dtype=np.float64)

    count = side * side
    ddof = count - 1
    win_x = sliding_window_view(x, (side, side))
    win_y = sliding_window_view(y, (side, side))
    rows_out, cols_out = win_x.shape[:2]

    local = np.empty((rows_out, cols_out), dtype=np.float64)
    for rows in row_blocks(rows_out, cols_out * count):
        bx = win_x[rows]
        by = win_y[rows]
        mean_x = bx.mean(axis=(-2, -1))
        mean_y = by.mean(axis=(-2, -1))
        dx = bx - mean_x[..., None, None]
        dy = by - mean_y[..., None, None]
        if ddof > 0:
            var_x = (dx * dx).sum(axis=(-2, -1)) / ddof
            var_y = (dy * dy).sum(axis=(-2, -1)) / ddof
            cov_xy = (dx * dy).sum(axis=(-2, -1)) / ddof
        else:
            # a single-pixel window has no sample spread
            var_x = np.zeros_like(mean_x)
            var_y = np.zeros_like(mean_y)
            cov_xy = np.zeros_like(mean_x)

        numerator = (2 * mean_x * mean_y + C1) * (2 * cov_xy + C2)
        denominator = (mean_x * mean_x + mean_y * mean_y + C1) * (var_x + var_y + C2)
        local[rows] = numerator / denominator
    return local


def compute_ssim(image_a: ImageLike, image_b: ImageLike, window_size: int = 8) -> float:
    """Mean structural similarity of two equally sized images.

    Both images are reduced to grayscale first. Windows are dense and
    overlapping (stride 1) and only placed where they fit entirely inside
    the image. Returns 0.0 when no window fits.

    Raises
    ------
    DimensionMismatchError
        If the images differ in width or height.
    """
    local = ssim_map(image_a, image_b, window_size)
    if local.size == 0:
        logger.debug("compute_ssim: image smaller than window %d, returning 0", window_size)
        return 0.0
    return float(local.mean())
