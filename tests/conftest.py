"""
Pytest configuration and fixtures for imgenhance tests.
"""

import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


@pytest.fixture
def rng() -> np.random.Generator:
    return np.random.default_rng(42)


@pytest.fixture
def color_image(rng: np.random.Generator) -> np.ndarray:
    """Random 24x32 RGB image."""
    return rng.integers(0, 256, size=(24, 32, 3), dtype=np.uint8)


@pytest.fixture
def gray_image(rng: np.random.Generator) -> np.ndarray:
    """Random 24x32 grayscale image."""
    return rng.integers(0, 256, size=(24, 32), dtype=np.uint8)


@pytest.fixture
def noisy_step_image(rng: np.random.Generator) -> np.ndarray:
    """Dark/bright halves with additive gaussian noise."""
    base = np.full((40, 40), 60.0)
    base[:, 20:] = 190.0
    noise = rng.normal(0, 12, base.shape)
    return np.clip(np.rint(base + noise), 0, 255).astype(np.uint8)


def write_image(path: Path, array: np.ndarray) -> Path:
    Image.fromarray(array).save(path)
    return path


@pytest.fixture
def image_dir(tmp_path: Path, color_image: np.ndarray, noisy_step_image: np.ndarray) -> Path:
    """Directory holding a colour PNG, a grayscale BMP and a non-image file."""
    images = tmp_path / "images"
    images.mkdir()
    write_image(images / "color.png", color_image)
    write_image(images / "step.bmp", noisy_step_image)
    (images / "notes.txt").write_text("not an image", encoding="utf-8")
    return images
