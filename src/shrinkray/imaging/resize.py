"""Apply resize plans and rectangle crops to decoded rasters."""

from __future__ import annotations

from typing import TYPE_CHECKING

from PIL import Image

from shrinkray.errors import InvalidOption, collaborator
from shrinkray.imaging.geometry import DEFAULT_FILTER, PIL_FILTERS
from shrinkray.imaging.options import DEFAULT_BACKGROUND

if TYPE_CHECKING:
    from shrinkray.imaging.geometry import ResizePlan
    from shrinkray.imaging.options import CropOptions
    from shrinkray.imaging.types import ResizeFilter


def apply_resize(
    image: Image.Image,
    plan: ResizePlan,
    resize_filter: ResizeFilter = DEFAULT_FILTER,
    background: tuple[int, ...] = DEFAULT_BACKGROUND,
    *,
    reducing_gap: float | None = None,
) -> Image.Image:
    """Scale, then crop or pad, according to ``plan``.

    ``reducing_gap`` enables Pillow's multi-step reduction and only applies
    when shrinking on both axes.
    """
    with collaborator("Resize failed"):
        scaled = image
        target = (plan.scaled_width, plan.scaled_height)
        if image.size != target:
            shrinking = plan.scaled_width < image.width and plan.scaled_height < image.height
            scaled = image.resize(
                target,
                resample=PIL_FILTERS[resize_filter],
                reducing_gap=reducing_gap if shrinking else None,
            )

        if plan.crop_box is not None:
            return scaled.crop(plan.crop_box)

        if plan.offset is not None:
            mode = "RGBA" if scaled.mode == "RGBA" or background[3] < 255 else "RGB"
            fill = tuple(background) if mode == "RGBA" else tuple(background[:3])
            canvas = Image.new(mode, (plan.output_width, plan.output_height), fill)
            canvas.paste(scaled.convert(mode), plan.offset)
            return canvas

        return scaled


def crop_rect(image: Image.Image, options: CropOptions) -> Image.Image:
    """Cut an explicit rectangle; it must lie entirely inside the image."""
    width = options.width if options.width is not None else image.width - options.x
    height = options.height if options.height is not None else image.height - options.y
    right = options.x + width
    bottom = options.y + height
    if width <= 0 or height <= 0 or right > image.width or bottom > image.height:
        raise InvalidOption(
            f"Crop rectangle ({options.x}, {options.y}, {width}x{height}) "
            f"exceeds image bounds {image.width}x{image.height}"
        )
    return image.crop((options.x, options.y, right, bottom))
