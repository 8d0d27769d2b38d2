"""
Pillow boundary: decode, resize and per-format encode.

This is the only module that knows about individual output formats.
"""

import io
from typing import BinaryIO, NamedTuple, Optional

from PIL import Image

from .errors import DecodeError, UnsupportedFormatError

# Modes each encoder can store as-is; anything else is converted first
JPEG_MODES = {"L", "RGB", "CMYK"}
PNG_MODES = {"1", "L", "LA", "I", "I;16", "P", "RGB", "RGBA"}


class EncodeOptions(NamedTuple):
    quality: float = 80.0
    lossless: bool = False


def check_format(fmt: str) -> str:
    if fmt not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(fmt)
    return fmt


def decode(data: bytes, path: Optional[str] = None) -> Image.Image:
    """Decode fully into memory. Image.open alone only reads the header."""
    try:
        im = Image.open(io.BytesIO(data))
        im.load()
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
        raise DecodeError(path or "<bytes>", e) from e
    return im


def resize(im: Image.Image, width: int, height: int) -> Image.Image:
    # Pillow falls back to NEAREST for palette and bilevel images
    if im.mode == "P":
        im = im.convert("RGBA")
    elif im.mode == "1":
        im = im.convert("L")
    return im.resize((width, height), Image.LANCZOS)


def _has_alpha(im: Image.Image) -> bool:
    return "A" in im.mode or im.info.get("transparency") is not None


def _encode_webp(stream: BinaryIO, im: Image.Image, options: EncodeOptions) -> None:
    im.save(stream, format="WEBP", quality=float(options.quality), lossless=options.lossless, method=4)


def _encode_jpeg(stream: BinaryIO, im: Image.Image, options: EncodeOptions) -> None:
    if im.mode not in JPEG_MODES:
        im = im.convert("RGB")
    im.save(stream, format="JPEG", quality=int(options.quality))


def _encode_png(stream: BinaryIO, im: Image.Image, options: EncodeOptions) -> None:
    if im.mode not in PNG_MODES:
        im = im.convert("RGBA" if _has_alpha(im) else "RGB")
    im.save(stream, format="PNG")


ENCODERS = {
    "webp": _encode_webp,
    "jpeg": _encode_jpeg,
    "jpg": _encode_jpeg,
    "png": _encode_png,
}
SUPPORTED_FORMATS = tuple(ENCODERS)


def encode(stream: BinaryIO, im: Image.Image, fmt: str, options: EncodeOptions) -> None:
    encoder = ENCODERS.get(fmt)
    if encoder is None:
        raise UnsupportedFormatError(fmt)
    encoder(stream, im, options)
