"""Tests for resize geometry, fit modes and resize application."""

from __future__ import annotations

import pytest
from PIL import Image

from shrinkray.errors import InvalidOption
from shrinkray.imaging.geometry import (
    DEFAULT_FILTER,
    FAST_FILTER,
    decide,
    needs_resize,
    plan_resize,
    select_filter,
)
from shrinkray.imaging.options import CropOptions, ResizeOptions
from shrinkray.imaging.resize import apply_resize, crop_rect
from shrinkray.imaging.types import FitMode, ResizeFilter

# ---------------------------------------------------------------------------
# Resize decision
# ---------------------------------------------------------------------------


class TestNeedsResize:
    def test_fast_mode_skips_within_tolerance(self) -> None:
        assert needs_resize(212, 200, 200, 200, fast_mode=True) is False

    def test_fast_mode_resizes_outside_tolerance(self) -> None:
        assert needs_resize(240, 200, 200, 200, fast_mode=True) is True

    def test_fast_mode_needs_both_axes_within_tolerance(self) -> None:
        assert needs_resize(210, 260, 200, 200, fast_mode=True) is True

    def test_exact_mode_requires_equality(self) -> None:
        assert needs_resize(201, 200, 200, 200, fast_mode=False) is True
        assert needs_resize(200, 200, 200, 200, fast_mode=False) is False

    def test_tolerance_bounds_are_inclusive(self) -> None:
        assert needs_resize(85, 115, 100, 100, fast_mode=True) is False


class TestSelectFilter:
    def test_fast_mode_forces_nearest(self) -> None:
        assert select_filter(ResizeFilter.LANCZOS3, fast_mode=True) is FAST_FILTER

    def test_requested_filter_wins_in_exact_mode(self) -> None:
        assert select_filter(ResizeFilter.BILINEAR, fast_mode=False) is ResizeFilter.BILINEAR

    def test_default_filter(self) -> None:
        assert select_filter(None, fast_mode=False) is DEFAULT_FILTER

    def test_decide_combines_both(self) -> None:
        decision = decide(240, 240, 200, 200, fast_mode=True, requested_filter=ResizeFilter.MITCHELL)
        assert decision.needs_resize is True
        assert decision.filter is ResizeFilter.NEAREST


# ---------------------------------------------------------------------------
# Fit modes
# ---------------------------------------------------------------------------


class TestPlanResize:
    def test_fill_stretches(self) -> None:
        plan = plan_resize(400, 200, 100, 100, FitMode.FILL)
        assert (plan.output_width, plan.output_height) == (100, 100)
        assert plan.crop_box is None
        assert plan.offset is None

    def test_cover_scales_then_crops_centre(self) -> None:
        plan = plan_resize(400, 200, 100, 100, FitMode.COVER)
        assert (plan.scaled_width, plan.scaled_height) == (200, 100)
        assert plan.crop_box == (50, 0, 150, 100)
        assert (plan.output_width, plan.output_height) == (100, 100)

    def test_contain_scales_then_pads(self) -> None:
        plan = plan_resize(400, 200, 100, 100, FitMode.CONTAIN)
        assert (plan.scaled_width, plan.scaled_height) == (100, 50)
        assert plan.offset == (0, 25)
        assert (plan.output_width, plan.output_height) == (100, 100)

    def test_inside_fits_within_box(self) -> None:
        plan = plan_resize(400, 200, 100, 100, FitMode.INSIDE)
        assert (plan.output_width, plan.output_height) == (100, 50)

    def test_outside_covers_box(self) -> None:
        plan = plan_resize(400, 200, 100, 100, FitMode.OUTSIDE)
        assert (plan.output_width, plan.output_height) == (200, 100)

    @pytest.mark.parametrize("fit", list(FitMode))
    def test_single_dimension_preserves_aspect(self, fit: FitMode) -> None:
        plan = plan_resize(400, 200, 100, None, fit)
        assert (plan.output_width, plan.output_height) == (100, 50)

    def test_no_dimensions_keeps_source(self) -> None:
        plan = plan_resize(400, 200, None, None, FitMode.COVER)
        assert (plan.output_width, plan.output_height) == (400, 200)


class TestApplyResize:
    def test_cover_output_size(self) -> None:
        image = Image.new("RGB", (400, 200), (10, 20, 30))
        result = apply_resize(image, plan_resize(400, 200, 100, 100, FitMode.COVER))
        assert result.size == (100, 100)

    def test_contain_pads_with_background(self) -> None:
        image = Image.new("RGB", (400, 200), (255, 255, 255))
        plan = plan_resize(400, 200, 100, 100, FitMode.CONTAIN)
        result = apply_resize(image, plan, background=(255, 0, 0, 255))
        assert result.size == (100, 100)
        assert result.mode == "RGB"
        assert result.getpixel((50, 5)) == (255, 0, 0)
        assert result.getpixel((50, 50)) == (255, 255, 255)

    def test_contain_transparent_background_gives_rgba(self) -> None:
        image = Image.new("RGB", (400, 200), (255, 255, 255))
        result = apply_resize(image, plan_resize(400, 200, 100, 100, FitMode.CONTAIN))
        assert result.mode == "RGBA"
        assert result.getpixel((50, 5))[3] == 0


# ---------------------------------------------------------------------------
# Options and rectangle crop
# ---------------------------------------------------------------------------


class TestResizeOptions:
    def test_string_enums_are_coerced(self) -> None:
        options = ResizeOptions(width=10, fit="Cover", filter="bilinear")
        assert options.fit is FitMode.COVER
        assert options.filter is ResizeFilter.BILINEAR

    def test_rgb_background_gets_opaque_alpha(self) -> None:
        assert ResizeOptions(background=(1, 2, 3)).background == (1, 2, 3, 255)

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(InvalidOption):
            ResizeOptions(width=-1)
        with pytest.raises(InvalidOption):
            ResizeOptions(fit="squash")
        with pytest.raises(InvalidOption):
            ResizeOptions(background=(0, 0, 300))


class TestCropRect:
    def test_crop_inside_bounds(self) -> None:
        image = Image.new("RGB", (100, 80))
        assert crop_rect(image, CropOptions(x=10, y=10, width=50, height=40)).size == (50, 40)

    def test_missing_size_extends_to_edge(self) -> None:
        image = Image.new("RGB", (100, 80))
        assert crop_rect(image, CropOptions(x=20, y=30)).size == (80, 50)

    def test_out_of_bounds_rejected(self) -> None:
        image = Image.new("RGB", (100, 80))
        with pytest.raises(InvalidOption):
            crop_rect(image, CropOptions(x=60, y=0, width=50, height=10))
