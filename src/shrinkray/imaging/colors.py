"""Dominant colour extraction via Pillow's median-cut quantiser."""

from __future__ import annotations

import logging

from PIL import Image

from shrinkray.errors import InvalidOption, collaborator
from shrinkray.imaging.types import DominantColor, DominantColorsResult

logger = logging.getLogger(__name__)

DEFAULT_COLOR_COUNT: int = 5
FALLBACK_COLOR = DominantColor(r=0, g=0, b=0, hex="#000000")

# Quantise a reduced copy; the palette of a 256px sample matches the full image closely.
_SAMPLE_SIZE = (256, 256)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02X}{g:02X}{b:02X}"


def extract_colors(image: Image.Image, count: int | None = None) -> DominantColorsResult:
    """Return up to ``count`` colours ordered by pixel frequency (most common first)."""
    max_colors = DEFAULT_COLOR_COUNT if count is None else count
    if max_colors < 1:
        raise InvalidOption(f"count must be >= 1, got {max_colors}")

    sample = image.convert("RGB")
    sample.thumbnail(_SAMPLE_SIZE)
    with collaborator("Dominant colour extraction failed"):
        quantized = sample.quantize(colors=min(max_colors, 256), method=Image.Quantize.MEDIANCUT)
        palette = quantized.getpalette() or []
        used = sorted(quantized.getcolors() or [], key=lambda entry: entry[0], reverse=True)

    colors: list[DominantColor] = []
    for _count, index in used[:max_colors]:
        r, g, b = palette[index * 3 : index * 3 + 3]
        colors.append(DominantColor(r=r, g=g, b=b, hex=rgb_to_hex(r, g, b)))

    if not colors:
        logger.debug("No colours extracted, using black")
        colors = [FALLBACK_COLOR]
    return DominantColorsResult(colors=colors, primary=colors[0])
