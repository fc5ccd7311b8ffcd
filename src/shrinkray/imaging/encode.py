"""Format-specific encoders with a single dispatch table."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

from shrinkray.errors import InvalidOption, UnsupportedFormat, collaborator
from shrinkray.imaging.options import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_WEBP_QUALITY,
    EncoderOptions,
    JpegOptions,
    PngOptions,
    WebPOptions,
)
from shrinkray.imaging.types import OutputFormat

if TYPE_CHECKING:
    from collections.abc import Callable

    from PIL import Image


def _save(image: Image.Image, format_name: str, **params: object) -> bytes:
    buffer = io.BytesIO()
    with collaborator(f"{format_name} encode failed"):
        image.save(buffer, format=format_name, **params)
    return buffer.getvalue()


def encode_jpeg(image: Image.Image, options: JpegOptions | None = None) -> bytes:
    options = options or JpegOptions()
    # JPEG has no alpha channel
    rgb = image if image.mode == "RGB" else image.convert("RGB")
    return _save(rgb, "JPEG", quality=options.quality)


def encode_png(image: Image.Image, options: PngOptions | None = None) -> bytes:
    options = options or PngOptions()
    return _save(image, "PNG", compress_level=options.compression_level)


def encode_webp(image: Image.Image, options: WebPOptions | None = None) -> bytes:
    options = options or WebPOptions()
    return _save(image, "WEBP", quality=options.quality, lossless=options.lossless)


ENCODERS: dict[OutputFormat, tuple[Callable[..., bytes], type[EncoderOptions]]] = {
    OutputFormat.JPEG: (encode_jpeg, JpegOptions),
    OutputFormat.PNG: (encode_png, PngOptions),
    OutputFormat.WEBP: (encode_webp, WebPOptions),
}


def encoder_options(fmt: OutputFormat, quality: int | None = None, *, lossless: bool = False) -> EncoderOptions:
    """Build the options object for ``fmt`` from generic quality/lossless values."""
    if fmt is OutputFormat.JPEG:
        return JpegOptions(quality=quality if quality is not None else DEFAULT_JPEG_QUALITY)
    if fmt is OutputFormat.WEBP:
        return WebPOptions(quality=quality if quality is not None else DEFAULT_WEBP_QUALITY, lossless=lossless)
    return PngOptions()


def encode(image: Image.Image, fmt: OutputFormat | str, options: EncoderOptions | None = None) -> bytes:
    try:
        output = OutputFormat(str(fmt).lower())
    except ValueError:
        raise UnsupportedFormat(f"Encoding to {fmt!r} is not supported") from None

    encoder, options_cls = ENCODERS[output]
    if options is not None and not isinstance(options, options_cls):
        raise InvalidOption(f"{type(options).__name__} cannot be used for {output} output")
    return encoder(image, options)
