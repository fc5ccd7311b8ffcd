"""Header-only format probe."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError

from shrinkray.errors import DecodeError
from shrinkray.imaging.types import ImageFormat, ImageMetadata

# Pillow format names -> public format tags. MPO is the multi-picture JPEG
# variant many cameras write.
_PIL_FORMATS: dict[str, ImageFormat] = {
    "JPEG": ImageFormat.JPEG,
    "MPO": ImageFormat.JPEG,
    "PNG": ImageFormat.PNG,
    "WEBP": ImageFormat.WEBP,
    "GIF": ImageFormat.GIF,
    "BMP": ImageFormat.BMP,
    "TIFF": ImageFormat.TIFF,
    "ICO": ImageFormat.ICO,
}

ALPHA_MODES = frozenset({"RGBA", "LA", "PA", "RGBa", "La"})

_HEADER_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError)


def open_image(data: bytes) -> Image.Image:
    """Open ``data`` lazily; only the header is parsed."""
    if not data:
        raise DecodeError("Empty input buffer")
    try:
        return Image.open(io.BytesIO(data))
    except _HEADER_ERRORS as exc:
        raise DecodeError(f"Unable to read image header: {exc}") from exc


def has_alpha(image: Image.Image) -> bool:
    return image.mode in ALPHA_MODES or "transparency" in image.info


def metadata_of(image: Image.Image) -> ImageMetadata:
    width, height = image.size
    return ImageMetadata(
        width=width,
        height=height,
        format=_PIL_FORMATS.get(image.format or "", ImageFormat.UNKNOWN),
        has_alpha=has_alpha(image),
    )


def probe(data: bytes) -> ImageMetadata:
    """Report dimensions, format and alpha without decoding pixel data."""
    with open_image(data) as image:
        return metadata_of(image)
