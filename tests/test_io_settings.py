import json
from pathlib import Path

import numpy as np
import pytest

from imgenhance.buffer import PixelBuffer
from imgenhance.errors import ImageReadError
from imgenhance.io import gather_images, is_image_path, load_image, save_image, unique_destination
from imgenhance.settings import Settings


def test_is_image_path():
    assert is_image_path("a/b/photo.PNG")
    assert is_image_path("scan.jpeg")
    assert is_image_path(Path("x.bmp"))
    assert not is_image_path("notes.txt")
    assert not is_image_path("archive")


def test_gather_images(image_dir: Path):
    found = gather_images(image_dir)
    assert [p.name for p in found] == ["color.png", "step.bmp"]
    assert gather_images(image_dir / "color.png") == [image_dir / "color.png"]
    assert gather_images(image_dir / "notes.txt") == []


def test_load_color_png_is_rgb(image_dir: Path, color_image: np.ndarray):
    buf = load_image(image_dir / "color.png")
    assert buf.channels == 3
    assert np.array_equal(buf.pixels, color_image)


def test_load_gray_bmp_stays_single_channel(image_dir: Path, noisy_step_image: np.ndarray):
    buf = load_image(image_dir / "step.bmp")
    assert buf.is_grayscale
    assert np.array_equal(buf.gray, noisy_step_image)


def test_save_round_trip(tmp_path: Path, gray_image: np.ndarray, color_image: np.ndarray):
    gray_path = save_image(PixelBuffer(gray_image), tmp_path / "out" / "gray.png")
    assert gray_path.exists()
    assert np.array_equal(load_image(gray_path).gray, gray_image)

    color_path = save_image(PixelBuffer(color_image), tmp_path / "color.bmp")
    assert np.array_equal(load_image(color_path).pixels, color_image)


def test_save_defaults_to_png(tmp_path: Path, gray_image: np.ndarray):
    written = save_image(PixelBuffer(gray_image), tmp_path / "result")
    assert written.name == "result.png"
    assert written.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_unreadable_files(tmp_path: Path):
    empty = tmp_path / "empty.png"
    empty.write_bytes(b"")
    garbage = tmp_path / "garbage.jpg"
    garbage.write_bytes(b"definitely not a jpeg")

    with pytest.raises(ImageReadError):
        load_image(empty)
    with pytest.raises(ImageReadError):
        load_image(garbage)
    with pytest.raises(ImageReadError):
        load_image(tmp_path / "missing.png")


def test_unique_destination(tmp_path: Path):
    src = Path("photos/cat.jpg")
    first = unique_destination(src, tmp_path, suffix="_enhanced", ext=".png")
    assert first.name == "cat_enhanced.png"
    first.write_bytes(b"x")
    second = unique_destination(src, tmp_path, suffix="_enhanced", ext=".png")
    assert second.name == "cat_enhanced_1.png"
    assert unique_destination(src, tmp_path).name == "cat.jpg"


def test_settings_defaults(tmp_path: Path):
    settings = Settings(tmp_path / "settings.json")
    assert settings.get("method") == "median"
    assert settings.as_params() == {"radius": 1, "noise_variance": 10.0, "window_size": 8}
    assert not (tmp_path / "settings.json").exists()


def test_settings_load_merges_known_keys(tmp_path: Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"method": "wiener", "radius": 2, "colour": "blue"}), encoding="utf-8")
    settings = Settings(path)
    assert settings.get("method") == "wiener"
    assert settings.get("radius") == 2
    assert settings.get("colour") is None
    assert settings.get("window_size") == 8


def test_settings_invalid_file_keeps_defaults(tmp_path: Path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level("WARNING"):
        settings = Settings(path)
    assert settings.settings == Settings.DEFAULT_SETTINGS
    assert "Failed to load settings" in caplog.text

    path.write_text("[1, 2]", encoding="utf-8")
    assert Settings(path).settings == Settings.DEFAULT_SETTINGS


def test_settings_set_persists(tmp_path: Path):
    path = tmp_path / "settings.json"
    Settings(path).set("noise_variance", 25.0)
    assert json.loads(path.read_text(encoding="utf-8"))["noise_variance"] == 25.0
    assert Settings(path).as_params()["noise_variance"] == 25.0
