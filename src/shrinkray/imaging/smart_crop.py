"""Content-aware cropping.

Target windows come from an explicit size (clamped to the source) or from an
aspect ratio, in which case the largest window of that ratio fitting inside
the source is used. Saliency scoring is delegated to ``smartcrop``.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import smartcrop

from shrinkray.errors import InvalidOption, collaborator
from shrinkray.imaging.types import SmartCropAnalysis

if TYPE_CHECKING:
    from PIL import Image

    from shrinkray.imaging.options import SmartCropOptions

logger = logging.getLogger(__name__)

_RATIO_PART = re.compile(r"\s*(\d+)\s*", re.ASCII)


def parse_aspect_ratio(text: str) -> tuple[int, int]:
    """Parse ``"W:H"`` into two positive integers."""
    parts = text.split(":")
    if len(parts) != 2:
        raise InvalidOption(f"Invalid aspect ratio format: {text!r}. Use a format like '16:9'")

    values: list[int] = []
    for part in parts:
        match = _RATIO_PART.fullmatch(part)
        if match is None:
            raise InvalidOption(f"Invalid number {part!r} in aspect ratio {text!r}")
        values.append(int(match.group(1)))

    ratio_w, ratio_h = values
    if ratio_w == 0 or ratio_h == 0:
        raise InvalidOption(f"Aspect ratio values must be greater than 0, got {text!r}")
    return ratio_w, ratio_h


def resolve_target(image_width: int, image_height: int, options: SmartCropOptions) -> tuple[int, int]:
    if options.aspect_ratio is not None:
        ratio_w, ratio_h = parse_aspect_ratio(options.aspect_ratio)
        scale = min(image_width / ratio_w, image_height / ratio_h)
        target_w = min(round(ratio_w * scale), image_width)
        target_h = min(round(ratio_h * scale), image_height)
    else:
        target_w = min(options.width if options.width is not None else image_width, image_width)
        target_h = min(options.height if options.height is not None else image_height, image_height)

    if target_w <= 0 or target_h <= 0:
        raise InvalidOption(f"Smart crop target must be > 0, got {target_w}x{target_h}")
    return target_w, target_h


def analyze(image: Image.Image, target_width: int, target_height: int) -> SmartCropAnalysis:
    """Find the most salient window of the target's aspect ratio."""
    rgb = image if image.mode == "RGB" else image.convert("RGB")
    with collaborator("Smart crop analysis failed"):
        result = smartcrop.SmartCrop().crop(rgb, target_width, target_height, min_scale=1.0)
        top = result["top_crop"]
        analysis = SmartCropAnalysis(
            x=int(top["x"]),
            y=int(top["y"]),
            width=int(top["width"]),
            height=int(top["height"]),
            score=float(top["score"]),
        )

    logger.debug(
        "Smart crop for %dx%d target: (%d, %d) %dx%d score=%.4f",
        target_width,
        target_height,
        analysis.x,
        analysis.y,
        analysis.width,
        analysis.height,
        analysis.score,
    )
    return analysis


def crop(image: Image.Image, target_width: int, target_height: int) -> tuple[Image.Image, SmartCropAnalysis]:
    """Analyse, then cut the chosen window out of the original raster."""
    analysis = analyze(image, target_width, target_height)
    box = (analysis.x, analysis.y, analysis.x + analysis.width, analysis.y + analysis.height)
    return image.crop(box), analysis
