"""Immutable pixel buffer shared by every operator."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple, Union

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from PIL import Image

from .errors import InvalidParameterError

__all__ = [
    "PixelBuffer",
    "ImageLike",
    "as_buffer",
    "check_radius",
    "clipped_windows",
    "row_blocks",
]

# Upper bound on window elements materialised at once by the filters
_BLOCK_ELEMENTS = 1 << 22


def _validated_pixels(pixels: np.ndarray) -> np.ndarray:
    """Return a private read-only ``uint8`` copy of *pixels*."""
    arr = np.asarray(pixels)
    if arr.ndim == 3 and arr.shape[2] == 1:
        arr = arr[:, :, 0]
    if arr.ndim == 3 and arr.shape[2] != 3:
        raise InvalidParameterError(
            f"Expected 1 or 3 channels, got {arr.shape[2]}"
        )
    if arr.ndim not in (2, 3):
        raise InvalidParameterError(f"Unsupported pixel array shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise InvalidParameterError("Image with zero dimension")

    if arr.dtype != np.uint8:
        if arr.dtype == np.bool_ or not np.issubdtype(arr.dtype, np.number):
            raise InvalidParameterError(f"Unsupported pixel dtype {arr.dtype}")
        if not np.all(np.isfinite(arr)):
            raise InvalidParameterError("Pixel values must be finite")
        if np.any(arr < 0) or np.any(arr > 255) or np.any(arr != np.floor(arr)):
            raise InvalidParameterError("Pixel values must be integers in [0, 255]")

    out = arr.astype(np.uint8, copy=True)
    out.flags.writeable = False
    return out


@dataclass(frozen=True, eq=False)
class PixelBuffer:
    """
    Rectangular intensity grid.

    ``pixels`` has shape (H, W) for grayscale or (H, W, 3) for RGB, dtype
    uint8. The array is copied on construction and marked read-only, so a
    buffer never changes after it is created.
    """
    pixels: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "pixels", _validated_pixels(self.pixels))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    @property
    def channels(self) -> int:
        return 1 if self.pixels.ndim == 2 else 3

    @property
    def is_grayscale(self) -> bool:
        return self.pixels.ndim == 2

    @property
    def gray(self) -> np.ndarray:
        """The (H, W) intensity plane of a grayscale buffer."""
        if not self.is_grayscale:
            raise InvalidParameterError("Buffer is not grayscale; convert it first")
        return self.pixels

    def to_rgb(self) -> np.ndarray:
        """Return an (H, W, 3) array; grayscale values are replicated."""
        if self.is_grayscale:
            return np.repeat(self.pixels[:, :, None], 3, axis=2)
        return self.pixels.copy()

    def pixel(self, x: int, y: int) -> Tuple[int, int, int]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        if self.is_grayscale:
            v = int(self.pixels[y, x])
            return v, v, v
        r, g, b = (int(c) for c in self.pixels[y, x])
        return r, g, b

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "PixelBuffer":
        if image.mode == "L":
            return cls(np.array(image, dtype=np.uint8))
        return cls(np.array(image.convert("RGB"), dtype=np.uint8))

    def to_pil(self) -> Image.Image:
        # uint8 (H, W) maps to mode L, (H, W, 3) to RGB
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    def __eq__(self, other):
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(
            np.array_equal(self.pixels, other.pixels)
        )

    __hash__ = None

    def __repr__(self) -> str:
        kind = "gray" if self.is_grayscale else "rgb"
        return f"PixelBuffer({self.width}x{self.height}, {kind})"


ImageLike = Union[PixelBuffer, np.ndarray]


def as_buffer(image: ImageLike) -> PixelBuffer:
    """Accept a :class:`PixelBuffer` or a raw array and return a buffer."""
    if isinstance(image, PixelBuffer):
        return image
    if image is None:
        raise InvalidParameterError("No image provided")
    return PixelBuffer(image)


def check_radius(radius: int) -> int:
    if isinstance(radius, bool) or not isinstance(radius, (int, np.integer)):
        raise InvalidParameterError(f"radius must be an integer, got {radius!r}")
    if radius < 0:
        raise InvalidParameterError(f"radius must be non-negative, got {radius}")
    return int(radius)


def clipped_windows(gray: np.ndarray, radius: int) -> Tuple[np.ndarray, np.ndarray]:
    """Return the clipped neighbourhood of every pixel.

    Parameters
    ----------
    gray:
        (H, W) intensity plane.
    radius:
        Half-width of the square window, excluding the centre.

    Returns
    -------
    tuple
        ``(windows, counts)``. ``windows`` is a read-only float64 view of shape
        (H, W, 2ry+1, 2rx+1) where positions outside the image are NaN.
        ``ry`` and ``rx`` are *radius* limited to ``H - 1`` and ``W - 1``;
        a wider reach only adds out-of-bounds positions.
        ``counts`` is the (H, W) number of in-bounds positions per window.
    """
    radius = check_radius(radius)
    h, w = gray.shape
    ry = min(radius, h - 1)
    rx = min(radius, w - 1)
    padded = np.pad(
        gray.astype(np.float64), ((ry, ry), (rx, rx)), mode="constant", constant_values=np.nan
    )
    windows = sliding_window_view(padded, (2 * ry + 1, 2 * rx + 1))

    ys = np.arange(h)
    xs = np.arange(w)
    rows = np.minimum(ys + ry, h - 1) - np.maximum(ys - ry, 0) + 1
    cols = np.minimum(xs + rx, w - 1) - np.maximum(xs - rx, 0) + 1
    counts = np.outer(rows, cols)
    return windows, counts


def row_blocks(rows: int, elements_per_row: int) -> Iterator[slice]:
    """Split ``range(rows)`` into slices small enough to expand in memory."""
    step = max(1, _BLOCK_ELEMENTS // max(1, elements_per_row))
    for start in range(0, rows, step):
        yield slice(start, min(start + step, rows))
