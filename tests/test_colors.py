"""Tests for dominant colour extraction."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from PIL import Image

from shrinkray.errors import InvalidOption
from shrinkray.imaging.colors import FALLBACK_COLOR, extract_colors, rgb_to_hex


def test_hex_is_uppercase() -> None:
    assert rgb_to_hex(171, 205, 239) == "#ABCDEF"


def test_all_black_image() -> None:
    result = extract_colors(Image.new("RGB", (32, 32), (0, 0, 0)))
    assert result.primary.hex == "#000000"
    assert len(result.colors) == 1


def test_most_frequent_colour_first() -> None:
    image = Image.new("RGB", (100, 100), (0, 0, 255))
    image.paste((255, 0, 0), (0, 0, 100, 20))

    result = extract_colors(image, 2)

    assert [c.hex for c in result.colors] == ["#0000FF", "#FF0000"]
    assert result.primary == result.colors[0]


def test_count_limits_results() -> None:
    image = Image.new("RGB", (90, 30), (255, 0, 0))
    image.paste((0, 255, 0), (30, 0, 60, 30))
    image.paste((0, 0, 255), (60, 0, 90, 30))
    assert len(extract_colors(image, 2).colors) <= 2


def test_invalid_count() -> None:
    with pytest.raises(InvalidOption):
        extract_colors(Image.new("RGB", (4, 4)), 0)


def test_fallback_when_nothing_extracted() -> None:
    with patch("shrinkray.imaging.colors.Image.Image.getcolors", return_value=None):
        result = extract_colors(Image.new("RGB", (4, 4), (9, 9, 9)))
    assert result.colors == [FALLBACK_COLOR]
    assert result.primary == FALLBACK_COLOR
