"""Grayscale image enhancement filters and structural-similarity scoring."""
from .buffer import PixelBuffer, as_buffer
from .grayscale import to_grayscale
from .contrast import linear_stretch
from .histogram import histogram, equalization_lut, equalize
from .median import median_filter
from .adaptive import adaptive_filter, wiener_filter
from .similarity import compute_ssim, ssim_map
from .pipeline import METHODS, EnhancementResult, enhance
from .errors import (
    EnhancementError,
    InvalidParameterError,
    DimensionMismatchError,
    ImageReadError,
    ImageWriteError,
)
__all__ = [
    "PixelBuffer",
    "as_buffer",
    "to_grayscale",
    "linear_stretch",
    "histogram",
    "equalization_lut",
    "equalize",
    "median_filter",
    "adaptive_filter",
    "wiener_filter",
    "compute_ssim",
    "ssim_map",
    "METHODS",
    "EnhancementResult",
    "enhance",
    "EnhancementError",
    "InvalidParameterError",
    "DimensionMismatchError",
    "ImageReadError",
    "ImageWriteError",
]
