"""Thumbnail pipeline with shrink-on-load decoding and a tolerant fast mode.

probe -> target size -> (reduced) decode -> conditional resize -> encode.

Fast mode accepts a decoded size within 15% of the target and, when it does
resize, uses nearest-neighbour sampling; the reported width/height are always
those of the encoded output.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from shrinkray.imaging import geometry
from shrinkray.imaging.decode import decode, derive_dimensions, plan_decode
from shrinkray.imaging.encode import encode, encoder_options
from shrinkray.imaging.probe import probe
from shrinkray.imaging.resize import apply_resize
from shrinkray.imaging.types import FitMode, ImageFormat, OutputFormat, ThumbnailResult

if TYPE_CHECKING:
    from shrinkray.imaging.options import ThumbnailOptions

logger = logging.getLogger(__name__)

THUMBNAIL_QUALITY: int = 80
THUMBNAIL_FAST_QUALITY: int = 70
FALLBACK_FORMAT: OutputFormat = OutputFormat.JPEG
REDUCING_GAP: float = 2.0

_NATIVE_OUTPUT: dict[ImageFormat, OutputFormat] = {
    ImageFormat.JPEG: OutputFormat.JPEG,
    ImageFormat.PNG: OutputFormat.PNG,
    ImageFormat.WEBP: OutputFormat.WEBP,
}


def resolve_output_format(requested: OutputFormat | None, input_format: ImageFormat) -> OutputFormat:
    if requested is not None:
        return requested
    output = _NATIVE_OUTPUT.get(input_format)
    if output is None:
        logger.debug("No native thumbnail output for %s input, using %s", input_format, FALLBACK_FORMAT)
        return FALLBACK_FORMAT
    return output


def resolve_quality(requested: int | None, *, fast_mode: bool) -> int:
    if requested is not None:
        return requested
    return THUMBNAIL_FAST_QUALITY if fast_mode else THUMBNAIL_QUALITY


def generate_thumbnail(data: bytes, options: ThumbnailOptions) -> ThumbnailResult:
    metadata = probe(data)
    target_w, target_h = derive_dimensions(metadata.width, metadata.height, options.width, options.height)

    plan = plan_decode(metadata, target_w, target_h) if options.shrink_on_load else None
    image = decode(data, plan)
    shrink_on_load_used = options.shrink_on_load and (
        image.width < metadata.width or image.height < metadata.height
    )

    decision = geometry.decide(
        image.width,
        image.height,
        target_w,
        target_h,
        fast_mode=options.fast_mode,
        requested_filter=options.filter,
    )
    if decision.needs_resize:
        resize_plan = geometry.plan_resize(image.width, image.height, target_w, target_h, FitMode.FILL)
        image = apply_resize(
            image,
            resize_plan,
            decision.filter,
            reducing_gap=None if options.fast_mode else REDUCING_GAP,
        )
    else:
        logger.debug("Resize skipped: decoded %dx%d serves target %dx%d", image.width, image.height, target_w, target_h)

    output_format = resolve_output_format(options.format, metadata.format)
    quality = resolve_quality(options.quality, fast_mode=options.fast_mode)
    encoded = encode(image, output_format, encoder_options(output_format, quality, lossless=False))

    logger.debug(
        "Thumbnail %dx%d -> %dx%d %s (shrink_on_load=%s)",
        metadata.width,
        metadata.height,
        image.width,
        image.height,
        output_format,
        shrink_on_load_used,
    )
    return ThumbnailResult(
        data=encoded,
        width=image.width,
        height=image.height,
        format=output_format,
        shrink_on_load_used=shrink_on_load_used,
        original_width=metadata.width,
        original_height=metadata.height,
    )
