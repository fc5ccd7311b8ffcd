"""Enumerations and result types shared across the imaging modules."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum

import numpy as np


class ImageFormat(StrEnum):
    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"
    GIF = "gif"
    BMP = "bmp"
    TIFF = "tiff"
    ICO = "ico"
    UNKNOWN = "unknown"


class OutputFormat(StrEnum):
    """Formats the encoders can produce."""

    JPEG = "jpeg"
    PNG = "png"
    WEBP = "webp"


class ResizeFilter(StrEnum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    CATMULL_ROM = "catmull_rom"
    MITCHELL = "mitchell"
    LANCZOS3 = "lanczos3"


class FitMode(StrEnum):
    FILL = "fill"
    COVER = "cover"
    CONTAIN = "contain"
    INSIDE = "inside"
    OUTSIDE = "outside"


class HashAlgorithm(StrEnum):
    PHASH = "phash"
    DHASH = "dhash"
    AHASH = "ahash"
    BLOCKHASH = "blockhash"


class HashSize(IntEnum):
    SIZE_8 = 8
    SIZE_16 = 16
    SIZE_32 = 32


class TensorDtype(StrEnum):
    FLOAT32 = "float32"
    UINT8 = "uint8"


class TensorLayout(StrEnum):
    CHW = "chw"
    HWC = "hwc"


class TensorNormalization(StrEnum):
    NONE = "none"
    IMAGENET = "imagenet"
    ZERO_ONE = "zero_one"
    NEG_ONE_ONE = "neg_one_one"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ImageMetadata:
    """Header-level facts about an encoded image."""

    width: int
    height: int
    format: ImageFormat
    has_alpha: bool


@dataclass(frozen=True)
class ThumbnailResult:
    data: bytes
    width: int
    height: int
    format: OutputFormat
    shrink_on_load_used: bool
    original_width: int
    original_height: int


@dataclass(frozen=True)
class SmartCropAnalysis:
    """Best crop window in source pixel coordinates.

    ``score`` is opaque: higher is better, but it has no fixed scale.
    """

    x: int
    y: int
    width: int
    height: int
    score: float


@dataclass(frozen=True)
class ImageHashResult:
    hash: str
    width: int
    height: int
    hash_size: int
    algorithm: str


@dataclass(frozen=True)
class BlurHashResult:
    hash: str
    width: int
    height: int


@dataclass(frozen=True)
class ThumbHashResult:
    """Thumbhash of an image.

    ``width``/``height``/``has_alpha`` describe the original image, while the
    hash itself was computed from a reduced (at most 100px) raster.
    """

    hash: bytes
    width: int
    height: int
    has_alpha: bool


@dataclass(frozen=True)
class ThumbHashDecodeResult:
    rgba: bytes
    width: int
    height: int


@dataclass(frozen=True)
class DominantColor:
    r: int
    g: int
    b: int
    hex: str


@dataclass(frozen=True)
class DominantColorsResult:
    colors: list[DominantColor]
    primary: DominantColor


@dataclass(frozen=True)
class TensorResult:
    """Packed pixel data plus the description needed to rebuild the array."""

    data: bytes
    shape: tuple[int, ...]
    dtype: TensorDtype
    layout: TensorLayout
    width: int
    height: int
    channels: int

    def to_numpy(self) -> np.ndarray:
        """Return a read-only numpy view over ``data`` with ``shape``."""
        return np.frombuffer(self.data, dtype=np.dtype(self.dtype.value)).reshape(self.shape)
