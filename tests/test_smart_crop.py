"""Tests for smart-crop target resolution and cropping."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from shrinkray.errors import InvalidOption, ProcessingError
from shrinkray.imaging import smart_crop
from shrinkray.imaging.options import SmartCropOptions


def _top_crop(x: int, y: int, width: int, height: int, total: float = 0.5) -> dict:
    return {"top_crop": {"x": x, "y": y, "width": width, "height": height, "score": total}}


# ---------------------------------------------------------------------------
# Aspect ratio parsing
# ---------------------------------------------------------------------------


class TestParseAspectRatio:
    def test_valid_ratio(self) -> None:
        assert smart_crop.parse_aspect_ratio("16:9") == (16, 9)

    def test_whitespace_tolerated(self) -> None:
        assert smart_crop.parse_aspect_ratio(" 4 : 3 ") == (4, 3)

    @pytest.mark.parametrize("text", ["16:9:1", "0:9", "16:0", "a:9", "16", "", "1.5:1", "-4:3"])
    def test_invalid_ratios(self, text: str) -> None:
        with pytest.raises(InvalidOption):
            smart_crop.parse_aspect_ratio(text)


# ---------------------------------------------------------------------------
# Target resolution
# ---------------------------------------------------------------------------


class TestResolveTarget:
    def test_aspect_ratio_on_square_source(self) -> None:
        assert smart_crop.resolve_target(1000, 1000, SmartCropOptions(aspect_ratio="16:9")) == (1000, 562)

    def test_aspect_ratio_wins_over_explicit_size(self) -> None:
        options = SmartCropOptions(width=10, height=10, aspect_ratio="1:1")
        assert smart_crop.resolve_target(1600, 900, options) == (900, 900)

    def test_explicit_size_is_clamped(self) -> None:
        assert smart_crop.resolve_target(300, 200, SmartCropOptions(width=500, height=100)) == (300, 100)

    def test_missing_size_defaults_to_source(self) -> None:
        assert smart_crop.resolve_target(300, 200, SmartCropOptions(width=120)) == (120, 200)

    def test_zero_size_rejected(self) -> None:
        with pytest.raises(InvalidOption):
            SmartCropOptions(width=0)


# ---------------------------------------------------------------------------
# Analysis and crop
# ---------------------------------------------------------------------------


class TestAnalyze:
    @patch("shrinkray.imaging.smart_crop.smartcrop.SmartCrop")
    def test_returns_top_crop_verbatim(self, mock_cls: MagicMock) -> None:
        mock_cls.return_value.crop.return_value = _top_crop(12, 4, 80, 60, total=1.25)
        image = Image.new("RGBA", (200, 100))

        analysis = smart_crop.analyze(image, 80, 60)

        assert (analysis.x, analysis.y, analysis.width, analysis.height) == (12, 4, 80, 60)
        assert analysis.score == 1.25
        analysed = mock_cls.return_value.crop.call_args.args[0]
        assert analysed.mode == "RGB"

    @patch("shrinkray.imaging.smart_crop.smartcrop.SmartCrop")
    def test_crop_keeps_original_channels(self, mock_cls: MagicMock) -> None:
        mock_cls.return_value.crop.return_value = _top_crop(10, 20, 50, 40)
        image = Image.new("RGBA", (200, 100), (1, 2, 3, 4))

        cropped, analysis = smart_crop.crop(image, 50, 40)

        assert cropped.mode == "RGBA"
        assert cropped.size == (50, 40)
        assert analysis.x == 10

    @patch("shrinkray.imaging.smart_crop.smartcrop.SmartCrop")
    def test_collaborator_failure_is_wrapped(self, mock_cls: MagicMock) -> None:
        mock_cls.return_value.crop.side_effect = ValueError("boom")
        with pytest.raises(ProcessingError, match="Smart crop analysis failed"):
            smart_crop.analyze(Image.new("RGB", (64, 64)), 32, 32)

    def test_real_analysis_stays_in_bounds(self) -> None:
        image = Image.new("RGB", (160, 120), (40, 40, 40))
        image.paste((250, 200, 30), (100, 30, 150, 90))

        analysis = smart_crop.analyze(image, 120, 120)

        assert analysis.width > 0
        assert analysis.height > 0
        assert analysis.x + analysis.width <= 160
        assert analysis.y + analysis.height <= 120
