"""Exception types raised by the enhancement library."""
from __future__ import annotations

from typing import Tuple


class EnhancementError(Exception):
    """Base class for every error raised by :mod:`imgenhance`."""


class InvalidParameterError(EnhancementError, ValueError):
    """A filter parameter or pixel array is outside its valid domain."""


class DimensionMismatchError(EnhancementError, ValueError):
    """Two images that must share a size do not."""

    def __init__(self, shape_a: Tuple[int, int], shape_b: Tuple[int, int]):
        self.shape_a = shape_a
        self.shape_b = shape_b
        super().__init__(
            f"Images must have the same size, got {shape_a[1]}x{shape_a[0]} "
            f"and {shape_b[1]}x{shape_b[0]}"
        )


class ImageReadError(EnhancementError, OSError):
    """An image file could not be read or decoded."""


class ImageWriteError(EnhancementError, OSError):
    """An image could not be encoded or written."""
