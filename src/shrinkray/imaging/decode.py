"""Decode strategy: full-resolution vs. shrink-on-load decoding.

Formats whose codec can decode at a reduced scale (JPEG, through Pillow's
``draft`` at 1/2, 1/4 or 1/8) are asked for a decode near the target size.
The codec may return an image larger than requested, never smaller, so
callers must check the decoded size rather than assume the target.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from PIL import Image

from shrinkray.errors import DecodeError
from shrinkray.imaging.options import check_dimension
from shrinkray.imaging.probe import has_alpha, open_image
from shrinkray.imaging.types import ImageFormat

if TYPE_CHECKING:
    from shrinkray.imaging.types import ImageMetadata

logger = logging.getLogger(__name__)

SCALED_DECODE_FORMATS = frozenset({ImageFormat.JPEG})

_DECODE_ERRORS = (Image.DecompressionBombError, OSError, SyntaxError, ValueError)


@dataclass(frozen=True)
class DecodePlan:
    target_width: int
    target_height: int
    use_reduced_decode: bool


def derive_dimensions(
    source_width: int,
    source_height: int,
    width: int | None,
    height: int | None,
) -> tuple[int, int]:
    """Fill in a missing side preserving the source aspect ratio (minimum 1)."""
    if width is not None and height is not None:
        return width, height
    if width is not None:
        return width, max(1, round(width * source_height / source_width))
    if height is not None:
        return max(1, round(height * source_width / source_height)), height
    return source_width, source_height


def plan_decode(metadata: ImageMetadata, width: int | None = None, height: int | None = None) -> DecodePlan:
    check_dimension("width", width)
    check_dimension("height", height)
    if width is None and height is None:
        return DecodePlan(metadata.width, metadata.height, use_reduced_decode=False)

    target_width, target_height = derive_dimensions(metadata.width, metadata.height, width, height)
    return DecodePlan(
        target_width=target_width,
        target_height=target_height,
        use_reduced_decode=metadata.format in SCALED_DECODE_FORMATS,
    )


def to_raster(image: Image.Image) -> Image.Image:
    """Normalise any decoded mode to RGB or RGBA."""
    if image.mode in ("RGB", "RGBA"):
        return image
    return image.convert("RGBA" if has_alpha(image) else "RGB")


def decode(data: bytes, plan: DecodePlan | None = None) -> Image.Image:
    """Decode ``data`` into an RGB/RGBA raster, honouring a reduced-decode plan."""
    image = open_image(data)
    try:
        if plan is not None and plan.use_reduced_decode:
            image.draft(None, (plan.target_width, plan.target_height))
        image.load()
    except _DECODE_ERRORS as exc:
        image.close()
        raise DecodeError(f"Unable to decode image: {exc}") from exc

    if plan is not None and plan.use_reduced_decode:
        logger.debug(
            "Reduced decode requested at %dx%d, got %dx%d",
            plan.target_width,
            plan.target_height,
            image.width,
            image.height,
        )
    return to_raster(image)
