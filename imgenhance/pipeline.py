"""Apply an enhancement method and score it against the original."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple

from .adaptive import adaptive_filter
from .buffer import ImageLike, PixelBuffer
from .contrast import linear_stretch
from .errors import InvalidParameterError
from .grayscale import to_grayscale
from .histogram import equalize
from .median import median_filter
from .similarity import compute_ssim

__all__ = ["Method", "METHODS", "EnhancementResult", "enhance", "get_method"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Method:
    name: str
    label: str
    func: Callable[..., PixelBuffer]
    params: Tuple[str, ...] = ()


METHODS: Dict[str, Method] = {
    "stretch": Method("stretch", "Linear contrast stretch", linear_stretch),
    "equalize": Method("equalize", "Histogram equalization", equalize),
    "median": Method("median", "Median filter", median_filter, ("radius",)),
    "wiener": Method("wiener", "Wiener filter", adaptive_filter, ("radius", "noise_variance")),
}


def get_method(name: str) -> Method:
    key = (name or "").lower()
    if key not in METHODS:
        raise InvalidParameterError(
            f"Unknown method: {name!r} (expected one of {', '.join(METHODS)})"
        )
    return METHODS[key]


@dataclass
class EnhancementResult:
    method: str
    label: str
    original: PixelBuffer
    enhanced: PixelBuffer
    ssim: float
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def title(self) -> str:
        """Short description, e.g. ``"Median filter (3x3), SSIM=0.9812"``."""
        label = self.label
        if self.method == "median":
            side = 2 * self.params["radius"] + 1
            label = f"{label} ({side}x{side})"
        elif self.method == "wiener":
            label = f"{label} (r={self.params['radius']}, σ²={self.params['noise_variance']})"
        return f"{label}, SSIM={self.ssim:.4f}"


def enhance(
    image: ImageLike,
    method: str,
    *,
    radius: int = 1,
    noise_variance: float = 10.0,
    window_size: int = 8,
) -> EnhancementResult:
    """Run *method* on *image* and score the result with SSIM.

    Only the parameters the chosen operator accepts are passed to it;
    ``window_size`` always goes to the similarity score.
    """
    chosen = get_method(method)
    available = {"radius": radius, "noise_variance": noise_variance}
    params = {name: available[name] for name in chosen.params}

    original = to_grayscale(image)
    enhanced = chosen.func(original, **params)
    score = compute_ssim(original, enhanced, window_size=window_size)
    logger.debug("%s %r on %dx%d image: SSIM=%.4f", chosen.name, params, original.width, original.height, score)
    return EnhancementResult(
        method=chosen.name,
        label=chosen.label,
        original=original,
        enhanced=enhanced,
        ssim=score,
        params=params,
    )
