"""Request option values with named defaults.

Every option class validates itself on construction and raises
``InvalidOption`` for malformed input; string values for enum fields are
coerced so callers (and the HTTP layer) may pass plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TypeVar

from shrinkray.errors import InvalidOption
from shrinkray.imaging.types import (
    FitMode,
    OutputFormat,
    ResizeFilter,
    TensorDtype,
    TensorLayout,
    TensorNormalization,
)

E = TypeVar("E", bound=Enum)

DEFAULT_JPEG_QUALITY: int = 80
DEFAULT_WEBP_QUALITY: int = 80
DEFAULT_PNG_COMPRESSION: int = 6
DEFAULT_FIT: FitMode = FitMode.FILL
DEFAULT_BACKGROUND: tuple[int, int, int, int] = (0, 0, 0, 0)


def coerce_enum(enum_cls: type[E], value: object, name: str) -> E:
    """Convert ``value`` to ``enum_cls`` or raise InvalidOption."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        value = value.lower()
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(str(member.value) for member in enum_cls)
        raise InvalidOption(f"Invalid {name} {value!r}; expected one of: {allowed}") from None


def check_dimension(name: str, value: int | None) -> None:
    if value is not None and value <= 0:
        raise InvalidOption(f"{name} must be > 0, got {value}")


def check_quality(value: int | None) -> None:
    if value is not None and not 1 <= value <= 100:
        raise InvalidOption(f"quality must be between 1 and 100, got {value}")


def _set(obj: object, name: str, value: object) -> None:
    object.__setattr__(obj, name, value)


# ---------------------------------------------------------------------------
# Encoder options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JpegOptions:
    quality: int = DEFAULT_JPEG_QUALITY

    def __post_init__(self) -> None:
        check_quality(self.quality)


@dataclass(frozen=True)
class PngOptions:
    compression_level: int = DEFAULT_PNG_COMPRESSION

    def __post_init__(self) -> None:
        if not 0 <= self.compression_level <= 9:
            raise InvalidOption(f"compression_level must be between 0 and 9, got {self.compression_level}")


@dataclass(frozen=True)
class WebPOptions:
    quality: int = DEFAULT_WEBP_QUALITY
    lossless: bool = False

    def __post_init__(self) -> None:
        check_quality(self.quality)


EncoderOptions = JpegOptions | PngOptions | WebPOptions


# ---------------------------------------------------------------------------
# Geometry options
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ResizeOptions:
    """Resize request. With neither dimension set the source size is kept."""

    width: int | None = None
    height: int | None = None
    filter: ResizeFilter | None = None
    fit: FitMode = DEFAULT_FIT
    background: tuple[int, ...] = DEFAULT_BACKGROUND

    def __post_init__(self) -> None:
        check_dimension("width", self.width)
        check_dimension("height", self.height)
        if self.filter is not None:
            _set(self, "filter", coerce_enum(ResizeFilter, self.filter, "filter"))
        _set(self, "fit", coerce_enum(FitMode, self.fit, "fit"))

        background = tuple(self.background)
        if len(background) == 3:
            background = (*background, 255)
        if len(background) != 4 or any(not 0 <= channel <= 255 for channel in background):
            raise InvalidOption(f"background must be 3 or 4 channel values in 0-255, got {self.background!r}")
        _set(self, "background", background)


@dataclass(frozen=True)
class CropOptions:
    """Explicit crop rectangle; a missing size extends to the image edge."""

    x: int = 0
    y: int = 0
    width: int | None = None
    height: int | None = None

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise InvalidOption(f"crop offset must be >= 0, got ({self.x}, {self.y})")
        check_dimension("width", self.width)
        check_dimension("height", self.height)


@dataclass(frozen=True)
class ThumbnailOptions:
    width: int
    height: int | None = None
    format: OutputFormat | None = None
    quality: int | None = None
    fast_mode: bool = False
    shrink_on_load: bool = True
    filter: ResizeFilter | None = None

    def __post_init__(self) -> None:
        if self.width is None:
            raise InvalidOption("width is required")
        check_dimension("width", self.width)
        check_dimension("height", self.height)
        check_quality(self.quality)
        if self.format is not None:
            _set(self, "format", coerce_enum(OutputFormat, self.format, "format"))
        if self.filter is not None:
            _set(self, "filter", coerce_enum(ResizeFilter, self.filter, "filter"))


@dataclass(frozen=True)
class SmartCropOptions:
    """Smart crop target; ``aspect_ratio`` ("W:H") wins over width/height."""

    width: int | None = None
    height: int | None = None
    aspect_ratio: str | None = None

    def __post_init__(self) -> None:
        check_dimension("width", self.width)
        check_dimension("height", self.height)


@dataclass(frozen=True)
class TensorOptions:
    """Tensor conversion request; unset fields are resolved by the converter."""

    dtype: TensorDtype | None = None
    layout: TensorLayout | None = None
    normalization: TensorNormalization | None = None
    width: int | None = None
    height: int | None = None
    batch: bool | None = None

    def __post_init__(self) -> None:
        if self.dtype is not None:
            _set(self, "dtype", coerce_enum(TensorDtype, self.dtype, "dtype"))
        if self.layout is not None:
            _set(self, "layout", coerce_enum(TensorLayout, self.layout, "layout"))
        if self.normalization is not None:
            _set(self, "normalization", coerce_enum(TensorNormalization, self.normalization, "normalization"))
        check_dimension("width", self.width)
        check_dimension("height", self.height)


@dataclass(frozen=True)
class ExifFields:
    """EXIF fields to write. ``None`` leaves the existing tag untouched."""

    image_description: str | None = None
    artist: str | None = None
    copyright: str | None = None
    software: str | None = None
    date_time: str | None = None
    date_time_original: str | None = None
    user_comment: str | None = None
    make: str | None = None
    model: str | None = None
    orientation: int | None = None

    def __post_init__(self) -> None:
        if self.orientation is not None and not 1 <= self.orientation <= 8:
            raise InvalidOption(f"orientation must be between 1 and 8, got {self.orientation}")


# ---------------------------------------------------------------------------
# Transform
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OutputOptions:
    format: OutputFormat = OutputFormat.JPEG
    quality: int | None = None
    lossless: bool = False

    def __post_init__(self) -> None:
        _set(self, "format", coerce_enum(OutputFormat, self.format, "format"))
        check_quality(self.quality)


@dataclass(frozen=True)
class TransformOptions:
    """Operations applied in order: resize, rotate, flips, colour, filters, encode."""

    resize: ResizeOptions | None = None
    rotate: int | None = None
    flip_horizontal: bool = False
    flip_vertical: bool = False
    grayscale: bool = False
    blur: float | None = None
    sharpen: float | None = None
    brightness: float | None = None
    contrast: float | None = None
    output: OutputOptions = field(default_factory=OutputOptions)

    def __post_init__(self) -> None:
        if self.rotate is not None and self.rotate % 90 != 0:
            raise InvalidOption(f"rotate must be a multiple of 90, got {self.rotate}")
        for name in ("blur", "sharpen"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise InvalidOption(f"{name} must be > 0, got {value}")
        for name in ("brightness", "contrast"):
            value = getattr(self, name)
            if value is not None and value < 0:
                raise InvalidOption(f"{name} must be >= 0, got {value}")
