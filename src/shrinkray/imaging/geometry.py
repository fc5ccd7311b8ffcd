"""Resize geometry: output sizes per fit mode and the resize/skip decision."""

from __future__ import annotations

from dataclasses import dataclass

from PIL import Image

from shrinkray.imaging.decode import derive_dimensions
from shrinkray.imaging.types import FitMode, ResizeFilter

DEFAULT_FILTER: ResizeFilter = ResizeFilter.LANCZOS3
FAST_FILTER: ResizeFilter = ResizeFilter.NEAREST

# Fast mode accepts a decoded size within this ratio window of the target.
FAST_TOLERANCE_MIN: float = 0.85
FAST_TOLERANCE_MAX: float = 1.15

# Pillow has no Mitchell kernel; its bicubic is the Catmull-Rom spline.
PIL_FILTERS: dict[ResizeFilter, Image.Resampling] = {
    ResizeFilter.NEAREST: Image.Resampling.NEAREST,
    ResizeFilter.BILINEAR: Image.Resampling.BILINEAR,
    ResizeFilter.CATMULL_ROM: Image.Resampling.BICUBIC,
    ResizeFilter.MITCHELL: Image.Resampling.BICUBIC,
    ResizeFilter.LANCZOS3: Image.Resampling.LANCZOS,
}


@dataclass(frozen=True)
class ResizeDecision:
    needs_resize: bool
    filter: ResizeFilter


@dataclass(frozen=True)
class ResizePlan:
    """How to turn a source raster into the requested output.

    The source is scaled to ``scaled_width x scaled_height``; ``crop_box`` (in
    scaled coordinates) is then cut out, or the scaled image is pasted at
    ``offset`` on an ``output_width x output_height`` canvas.
    """

    scaled_width: int
    scaled_height: int
    output_width: int
    output_height: int
    crop_box: tuple[int, int, int, int] | None = None
    offset: tuple[int, int] | None = None


def _within_tolerance(decoded: int, target: int) -> bool:
    return FAST_TOLERANCE_MIN <= decoded / target <= FAST_TOLERANCE_MAX


def needs_resize(decoded_width: int, decoded_height: int, target_width: int, target_height: int, *, fast_mode: bool) -> bool:
    if fast_mode:
        return not (
            _within_tolerance(decoded_width, target_width) and _within_tolerance(decoded_height, target_height)
        )
    return (decoded_width, decoded_height) != (target_width, target_height)


def select_filter(requested: ResizeFilter | None, *, fast_mode: bool) -> ResizeFilter:
    if fast_mode:
        return FAST_FILTER
    return requested or DEFAULT_FILTER


def decide(
    decoded_width: int,
    decoded_height: int,
    target_width: int,
    target_height: int,
    *,
    fast_mode: bool,
    requested_filter: ResizeFilter | None = None,
) -> ResizeDecision:
    return ResizeDecision(
        needs_resize=needs_resize(decoded_width, decoded_height, target_width, target_height, fast_mode=fast_mode),
        filter=select_filter(requested_filter, fast_mode=fast_mode),
    )


def plan_resize(
    source_width: int,
    source_height: int,
    width: int | None,
    height: int | None,
    fit: FitMode = FitMode.FILL,
) -> ResizePlan:
    """Compute the resize plan for one fit mode.

    With a single dimension the other is derived from the source aspect ratio
    and every fit mode yields exactly that size.
    """
    if width is None or height is None or fit is FitMode.FILL:
        out_w, out_h = derive_dimensions(source_width, source_height, width, height)
        return ResizePlan(out_w, out_h, out_w, out_h)

    ratio_w = width / source_width
    ratio_h = height / source_height
    scale = max(ratio_w, ratio_h) if fit in (FitMode.COVER, FitMode.OUTSIDE) else min(ratio_w, ratio_h)
    scaled_w = max(1, round(source_width * scale))
    scaled_h = max(1, round(source_height * scale))

    if fit is FitMode.COVER:
        scaled_w = max(scaled_w, width)
        scaled_h = max(scaled_h, height)
        left = (scaled_w - width) // 2
        top = (scaled_h - height) // 2
        return ResizePlan(scaled_w, scaled_h, width, height, crop_box=(left, top, left + width, top + height))

    if fit is FitMode.CONTAIN:
        scaled_w = min(scaled_w, width)
        scaled_h = min(scaled_h, height)
        offset = ((width - scaled_w) // 2, (height - scaled_h) // 2)
        return ResizePlan(scaled_w, scaled_h, width, height, offset=offset)

    # inside / outside: the scaled size is the output
    return ResizePlan(scaled_w, scaled_h, scaled_w, scaled_h)
