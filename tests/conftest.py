"""Shared fixtures: synthetic images generated with Pillow."""

from __future__ import annotations

import io
from typing import TYPE_CHECKING

import numpy as np
import pytest
from PIL import Image

if TYPE_CHECKING:
    from collections.abc import Callable


def _pattern(width: int, height: int, mode: str) -> Image.Image:
    """Gradient with a bright square, so hashes and saliency have content."""
    xs = np.linspace(0, 255, width, dtype=np.float32)
    ys = np.linspace(0, 255, height, dtype=np.float32)
    red = np.broadcast_to(xs, (height, width))
    green = np.broadcast_to(ys[:, None], (height, width))
    blue = np.full((height, width), 96, dtype=np.float32)
    pixels = np.stack([red, green, blue], axis=2).astype(np.uint8)
    pixels[height // 3 : height // 2, width // 3 : width // 2] = 255

    image = Image.fromarray(pixels, "RGB")
    if mode == "RGBA":
        alpha = Image.new("L", (width, height), 255)
        alpha.paste(0, (0, 0, width // 4, height // 4))
        image.putalpha(alpha)
    return image


def encode_image(image: Image.Image, fmt: str, **params: object) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format=fmt, **params)
    return buffer.getvalue()


@pytest.fixture()
def make_image() -> Callable[..., bytes]:
    """Factory: ``make_image(width, height, fmt="JPEG", mode="RGB")`` -> encoded bytes."""

    def _make(width: int, height: int, fmt: str = "JPEG", mode: str = "RGB", **params: object) -> bytes:
        return encode_image(_pattern(width, height, mode), fmt, **params)

    return _make


@pytest.fixture()
def jpeg_bytes(make_image: Callable[..., bytes]) -> bytes:
    """1600x1200 JPEG."""
    return make_image(1600, 1200, "JPEG", quality=90)


@pytest.fixture()
def png_rgba_bytes(make_image: Callable[..., bytes]) -> bytes:
    """400x300 PNG with a transparent corner."""
    return make_image(400, 300, "PNG", mode="RGBA")


@pytest.fixture()
def webp_bytes(make_image: Callable[..., bytes]) -> bytes:
    """320x240 WebP."""
    return make_image(320, 240, "WEBP")


@pytest.fixture()
def gif_bytes() -> bytes:
    """120x80 GIF."""
    return encode_image(_pattern(120, 80, "RGB").convert("P"), "GIF")


@pytest.fixture()
def black_png_bytes() -> bytes:
    return encode_image(Image.new("RGB", (64, 64), (0, 0, 0)), "PNG")
