"""Local-statistics (Wiener-style) adaptive noise filter."""
from __future__ import annotations

import math

import numpy as np

from .buffer import ImageLike, PixelBuffer, check_radius, clipped_windows, row_blocks
from .errors import InvalidParameterError
from .grayscale import to_grayscale

__all__ = ["adaptive_filter", "wiener_filter", "local_statistics"]


def _check_noise_variance(noise_variance: float) -> float:
    try:
        value = float(noise_variance)
    except (TypeError, ValueError):
        raise InvalidParameterError(
            f"noise_variance must be a number, got {noise_variance!r}"
        ) from None
    if not math.isfinite(value) or value < 0:
        raise InvalidParameterError(
            f"noise_variance must be a finite non-negative number, got {noise_variance!r}"
        )
    return value


def local_statistics(gray: np.ndarray, radius: int):
    """Return the per-pixel mean and population variance of clipped windows.

    The variance is taken as the mean squared deviation from the window
    mean, in two passes over the window values.
    """
    radius = check_radius(radius)
    h, w = gray.shape
    windows, counts = clipped_windows(gray, radius)
    size = windows.shape[-2] * windows.shape[-1]

    mu = np.empty((h, w), dtype=np.float64)
    sigma2 = np.empty((h, w), dtype=np.float64)
    for rows in row_blocks(h, w * size):
        block = windows[rows]
        n = counts[rows]
        mu[rows] = np.nansum(block, axis=(-2, -1)) / n
        deviations = block - mu[rows][..., None, None]
        sigma2[rows] = np.nansum(deviations * deviations, axis=(-2, -1)) / n
    return mu, sigma2


def adaptive_filter(image: ImageLike, radius: int = 1, noise_variance: float = 10.0) -> PixelBuffer:
    """Smooth *image* according to local variance.

    Parameters
    ----------
    image:
        Colour or grayscale input.
    radius:
        Half-width of the clipped local window.
    noise_variance:
        Assumed variance of additive noise. Pixels whose local variance does
        not exceed it are replaced by the local mean; elsewhere the deviation
        from the mean is kept in proportion ``(sigma2 - noise) / sigma2``.

    Returns
    -------
    PixelBuffer
        Filtered single-channel buffer of the same size.
    """
    radius = check_radius(radius)
    noise = _check_noise_variance(noise_variance)
    gray = to_grayscale(image)
    values = gray.gray

    mu, sigma2 = local_statistics(values, radius)
    center = values.astype(np.float64)

    detail = (sigma2 > noise) & (sigma2 > 0)
    gain = np.zeros_like(sigma2)
    np.divide(sigma2 - noise, sigma2, out=gain, where=detail)
    out = np.where(detail, mu + gain * (center - mu), mu)
    return PixelBuffer(np.clip(np.rint(out), 0, 255).astype(np.uint8))


wiener_filter = adaptive_filter
