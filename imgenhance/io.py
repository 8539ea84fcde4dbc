"""Decode/encode adapter between image files and pixel buffers."""
from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path
from typing import List, Union

import cv2
import numpy as np

from .buffer import PixelBuffer
from .errors import ImageReadError, ImageWriteError

__all__ = [
    "IMG_EXTS",
    "is_image_path",
    "gather_images",
    "load_image",
    "save_image",
    "unique_destination",
]

logger = logging.getLogger(__name__)

IMG_EXTS = {'.png', '.jpg', '.jpeg', '.bmp'}
_DEFAULT_EXT = '.png'

PathLike = Union[str, os.PathLike]


def is_image_path(path: PathLike) -> bool:
    ext = os.path.splitext(str(path))[1].lower()
    return ext in IMG_EXTS


def gather_images(root: PathLike) -> List[Path]:
    root = Path(root)
    if root.is_file():
        return [root] if is_image_path(root) else []
    images: List[Path] = []
    for dirpath, _, filenames in os.walk(root):
        for fn in filenames:
            path = Path(dirpath) / fn
            if is_image_path(path):
                images.append(path)
    images.sort()
    return images


def load_image(path: PathLike) -> PixelBuffer:
    """Read *path* into a :class:`PixelBuffer`.

    Single-channel files stay single-channel; colour files become RGB with
    any alpha channel dropped. 16-bit samples are reduced to 8 bits. Bytes
    are read with ``np.fromfile`` so that non-ASCII paths work on every
    platform.
    """
    try:
        data = np.fromfile(str(path), dtype=np.uint8)
    except OSError as exc:
        raise ImageReadError(f"Could not read {path}: {exc}") from exc
    if data.size == 0:
        raise ImageReadError(f"Empty image file: {path}")
    try:
        image = cv2.imdecode(data, cv2.IMREAD_UNCHANGED)
    except cv2.error as exc:
        raise ImageReadError(f"Could not decode image: {path}: {exc}") from exc
    if image is None:
        raise ImageReadError(f"Could not decode image: {path}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageReadError(f"Unsupported sample type {image.dtype} in {path}")

    if image.ndim == 3 and image.shape[2] == 1:
        image = image[:, :, 0]
    if image.ndim == 2:
        pixels = image
    elif image.shape[2] == 3:
        pixels = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    elif image.shape[2] == 4:
        pixels = cv2.cvtColor(image, cv2.COLOR_BGRA2RGB)
    else:
        raise ImageReadError(f"Unsupported channel count {image.shape[2]} in {path}")
    logger.debug("Loaded %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return PixelBuffer(pixels)


def save_image(buffer: PixelBuffer, path: PathLike) -> Path:
    """Encode *buffer* by file extension and write it to *path*.

    Unknown or missing extensions are written as PNG under a ``.png`` name.
    """
    path = Path(path)
    ext = path.suffix.lower()
    if ext not in IMG_EXTS:
        path = path.with_name(path.name + _DEFAULT_EXT)
        ext = _DEFAULT_EXT

    # cv2 needs a writable array
    pixels = buffer.pixels.copy()
    if not buffer.is_grayscale:
        pixels = cv2.cvtColor(pixels, cv2.COLOR_RGB2BGR)

    try:
        ok, encoded = cv2.imencode(ext, pixels)
    except cv2.error as exc:
        raise ImageWriteError(f"Could not encode {path}: {exc}") from exc
    if not ok:
        raise ImageWriteError(f"Could not encode {path}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        encoded.tofile(str(path))
    except OSError as exc:
        raise ImageWriteError(f"Could not write {path}: {exc}") from exc
    logger.debug("Saved %s", path)
    return path


def unique_destination(src: Path, dest_dir: Path, suffix: str = "", ext: str | None = None) -> Path:
    """Return a path in *dest_dir* named after *src* that does not exist yet."""
    dest_dir.mkdir(parents=True, exist_ok=True)
    ext = ext or src.suffix
    stem = f"{src.stem}{suffix}"
    candidate = dest_dir / f"{stem}{ext}"
    if not candidate.exists():
        return candidate
    for idx in itertools.count(1):
        candidate = dest_dir / f"{stem}_{idx}{ext}"
        if not candidate.exists():
            return candidate
    raise RuntimeError("Failed to create unique destination path")
