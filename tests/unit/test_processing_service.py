import numpy as np
import pytest

from portrait_studio.domain.services.processing_service import ProcessingService as PS


def test_fit_within_keeps_small_images():
    assert PS.fit_within(800, 600, 1024) == (800, 600)
    assert PS.fit_within(1024, 10, 1024) == (1024, 10)


def test_fit_within_bounds_longer_side():
    assert PS.fit_within(4000, 3000, 1024) == (1024, 768)
    assert PS.fit_within(3000, 4000, 1024) == (768, 1024)


def test_fit_within_never_collapses_to_zero():
    w, h = PS.fit_within(10000, 2, 100)
    assert w == 100
    assert h == 1


def test_fit_within_rejects_bad_input():
    with pytest.raises(ValueError):
        PS.fit_within(0, 10, 100)
    with pytest.raises(ValueError):
        PS.fit_within(10, 10, 0)


def test_brightness_clip():
    img = np.array([[0.0, 0.5], [0.9, 1.0]], dtype=np.float32)
    out = PS.adjust_brightness(img, 1.5)
    assert out.dtype == np.float32
    assert np.isclose(out[0, 1], 0.75)
    assert np.isclose(out[1, 1], 1.0)


def test_contrast_pivots_on_mid_gray():
    img = np.array([[0.25, 0.5, 0.75]], dtype=np.float32)
    out = PS.adjust_contrast(img, 2.0)
    assert np.allclose(out, [[0.0, 0.5, 1.0]])


def test_zero_saturation_is_grayscale():
    rgb = np.zeros((2, 2, 3), dtype=np.float32)
    rgb[..., 0] = 1.0
    out = PS.adjust_saturation(rgb, 0.0)
    assert np.allclose(out[..., 0], out[..., 1])
    assert np.allclose(out[..., 1], out[..., 2])
    assert np.isclose(out[0, 0, 0], 0.299)


def test_saturation_ignores_grayscale_input():
    gray = np.full((3, 3), 0.4, dtype=np.float32)
    assert np.allclose(PS.adjust_saturation(gray, 2.0), gray)


def test_tone_boost_keeps_shape():
    rgb = np.random.default_rng(0).random((5, 7, 3), dtype=np.float32)
    out = PS.tone_boost(rgb)
    assert out.shape == rgb.shape
    assert out.min() >= 0.0 and out.max() <= 1.0


def test_array_conversions_preserve_size():
    from PIL import Image

    img = Image.new("RGB", (6, 4), (255, 0, 0))
    arr = PS.to_array(img)
    assert arr.shape == (4, 6, 3)
    assert np.isclose(arr[0, 0, 0], 1.0)
    back = PS.from_array(arr)
    assert back.size == (6, 4)
    assert back.mode == "RGB"
    assert back.getpixel((0, 0)) == (255, 0, 0)
