import io

import pytest
from PIL import Image

from conftest import make_image_bytes
from portrait_studio.domain.entities.image_blob import ImageBlob
from portrait_studio.domain.errors import DecodeError
from portrait_studio.domain.services.normalizer_service import ImageNormalizer, read_dimensions


def _raw(data: bytes, mime: str = "image/png") -> ImageBlob:
    return ImageBlob(data=data, mime_type=mime)


def _decoded_size(blob: ImageBlob) -> tuple[int, int]:
    with Image.open(io.BytesIO(blob.data)) as img:
        assert img.format == "JPEG"
        return img.size


def test_large_image_is_bounded_to_limit():
    out = ImageNormalizer().normalize(_raw(make_image_bytes(4000, 3000)), 1024)
    assert (out.width, out.height) == (1024, 768)
    assert _decoded_size(out) == (1024, 768)
    assert out.mime_type == "image/jpeg"


@pytest.mark.parametrize(
    "size, limit, expected",
    [
        ((1200, 300), 600, (600, 150)),
        ((300, 1200), 600, (150, 600)),
        ((1001, 999), 1000, (1000, 998)),
    ],
)
def test_longer_side_equals_limit_and_aspect_kept(size, limit, expected):
    out = ImageNormalizer().normalize(_raw(make_image_bytes(*size)), limit)
    assert (out.width, out.height) == expected
    assert max(out.width, out.height) == limit


@pytest.mark.parametrize("size", [(1, 1), (640, 480), (1024, 1024), (100, 1024)])
def test_images_within_limit_keep_dimensions(size):
    out = ImageNormalizer().normalize(_raw(make_image_bytes(*size)), 1024)
    assert (out.width, out.height) == size


def test_never_upscales():
    out = ImageNormalizer().normalize(_raw(make_image_bytes(20, 10)), 4096)
    assert (out.width, out.height) == (20, 10)


def test_output_is_new_jpeg_even_for_jpeg_input():
    raw = _raw(make_image_bytes(50, 40, fmt="JPEG"), "image/jpeg")
    out = ImageNormalizer(quality=85).normalize(raw, 1024)
    assert out is not raw
    assert out.mime_type == "image/jpeg"
    assert out.data[:2] == b"\xff\xd8"


def test_transparent_png_is_flattened_onto_white():
    raw = _raw(make_image_bytes(8, 8, color=(0, 0, 0), mode="RGBA"))
    out = ImageNormalizer().normalize(raw, 1024)
    with Image.open(io.BytesIO(out.data)) as img:
        assert img.mode == "RGB"
        r, g, b = img.getpixel((4, 4))
        assert min(r, g, b) > 240


def test_exif_orientation_is_applied():
    img = Image.new("RGB", (40, 20), (90, 90, 90))
    exif = Image.Exif()
    exif[0x0112] = 6  # rotate 90 degrees clockwise on display
    buf = io.BytesIO()
    img.save(buf, format="JPEG", exif=exif)
    out = ImageNormalizer().normalize(_raw(buf.getvalue(), "image/jpeg"), 1024)
    assert (out.width, out.height) == (20, 40)


def test_tone_boost_keeps_dimensions():
    out = ImageNormalizer(tone_boost=True).normalize(_raw(make_image_bytes(300, 200)), 150)
    assert (out.width, out.height) == (150, 100)


def test_quality_is_clamped():
    assert ImageNormalizer(quality=100).quality == 95
    assert ImageNormalizer(quality=10).quality == 80
    assert ImageNormalizer(quality=90).quality == 90


@pytest.mark.parametrize("data", [b"", b"not an image at all", make_image_bytes(64, 64)[:40]])
def test_undecodable_input_raises_decode_error(data):
    with pytest.raises(DecodeError):
        ImageNormalizer().normalize(_raw(data), 1024)


def test_read_dimensions():
    assert read_dimensions(make_image_bytes(12, 7)) == (12, 7, "image/png")
    with pytest.raises(DecodeError):
        read_dimensions(b"garbage")
