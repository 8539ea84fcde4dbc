import numpy as np

from imgenhance.buffer import PixelBuffer
from imgenhance.contrast import linear_stretch
from imgenhance.grayscale import luma, to_grayscale


def rgb(*pixels):
    return np.array([list(pixels)], dtype=np.uint8)


def test_luma_weights_truncate():
    out = to_grayscale(rgb((10, 20, 30), (255, 0, 0), (0, 255, 0), (0, 0, 255), (0, 0, 0)))
    assert out.is_grayscale
    # 18.15, 76.245, 149.685, 29.07, 0
    assert out.gray.tolist() == [[18, 76, 149, 29, 0]]
    assert out.pixel(0, 0) == (18, 18, 18)


def test_luma_matches_formula_everywhere(color_image):
    r, g, b = (color_image[..., c].astype(np.float64) for c in range(3))
    expected = np.clip(np.trunc(0.299 * r + 0.587 * g + 0.114 * b), 0, 255)
    assert np.array_equal(luma(color_image), expected.astype(np.uint8))
    assert np.array_equal(to_grayscale(color_image).gray, expected.astype(np.uint8))


def test_grayscale_input_is_copied_unchanged(gray_image):
    buf = PixelBuffer(gray_image)
    out = to_grayscale(buf)
    assert out == buf
    assert out is not buf


def test_stretch_exact_endpoints():
    out = linear_stretch(np.array([[10, 200], [10, 200]], dtype=np.uint8))
    assert out.gray.tolist() == [[0, 255], [0, 255]]


def test_stretch_intermediate_values_round():
    out = linear_stretch(np.array([[0, 1, 2]], dtype=np.uint8))
    # 1/2 * 255 = 127.5 rounds to even
    assert out.gray.tolist() == [[0, 128, 255]]

    out = linear_stretch(np.array([[100, 110, 120]], dtype=np.uint8))
    assert out.gray.tolist() == [[0, 128, 255]]


def test_stretch_full_range_on_color_input(color_image):
    out = linear_stretch(color_image)
    assert out.is_grayscale
    assert out.shape == (24, 32)
    assert out.gray.min() == 0
    assert out.gray.max() == 255


def test_stretch_preserves_order(gray_image):
    src = gray_image // 4 + 40
    out = linear_stretch(src).gray
    order = np.argsort(src, axis=None, kind="stable")
    assert np.all(np.diff(out.ravel()[order].astype(int)) >= 0)


def test_stretch_constant_image_is_identity():
    src = np.full((5, 7), 123, dtype=np.uint8)
    out = linear_stretch(src)
    assert np.array_equal(out.gray, src)


def test_stretch_does_not_touch_input(color_image):
    before = color_image.copy()
    linear_stretch(color_image)
    assert np.array_equal(color_image, before)
