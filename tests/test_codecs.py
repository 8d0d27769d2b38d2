import io

import pytest
from PIL import Image

from respimg.codecs import SUPPORTED_FORMATS, EncodeOptions, check_format, decode, encode, resize
from respimg.errors import DecodeError, UnsupportedFormatError


def _png_bytes(mode: str = "RGBA", size=(40, 20)) -> bytes:
    buf = io.BytesIO()
    Image.new(mode, size).save(buf, format="PNG")
    return buf.getvalue()


def test_supported_formats() -> None:
    assert set(SUPPORTED_FORMATS) == {"webp", "jpeg", "jpg", "png"}
    assert check_format("png") == "png"


def test_check_format_rejects_bmp() -> None:
    with pytest.raises(UnsupportedFormatError) as exc:
        check_format("bmp")
    assert exc.value.format == "bmp"


def test_decode_loads_pixels() -> None:
    im = decode(_png_bytes())
    assert im.size == (40, 20)


def test_decode_garbage_raises() -> None:
    with pytest.raises(DecodeError) as exc:
        decode(b"not an image", "broken.jpg")
    assert "broken.jpg" in str(exc.value)


@pytest.mark.parametrize("fmt,pil_format", [("webp", "WEBP"), ("jpeg", "JPEG"), ("jpg", "JPEG"), ("png", "PNG")])
def test_encode_dispatches_on_format(fmt: str, pil_format: str) -> None:
    buf = io.BytesIO()
    encode(buf, Image.new("RGBA", (10, 10), (1, 2, 3, 128)), fmt, EncodeOptions(quality=75))
    buf.seek(0)
    with Image.open(buf) as im:
        assert im.format == pil_format
        assert im.size == (10, 10)


def test_encode_lossless_webp() -> None:
    buf = io.BytesIO()
    encode(buf, Image.new("RGB", (8, 8), (10, 20, 30)), "webp", EncodeOptions(lossless=True))
    buf.seek(0)
    with Image.open(buf) as im:
        assert im.convert("RGB").getpixel((3, 3)) == (10, 20, 30)


def test_encode_unknown_format() -> None:
    with pytest.raises(UnsupportedFormatError):
        encode(io.BytesIO(), Image.new("RGB", (4, 4)), "bmp", EncodeOptions())


def test_resize_palette_image() -> None:
    im = Image.new("P", (20, 10))
    out = resize(im, 10, 5)
    assert out.size == (10, 5)
    assert out.mode == "RGBA"
