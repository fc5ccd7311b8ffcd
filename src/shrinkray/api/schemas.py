"""Pydantic request/response schemas for the Shrinkray API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from shrinkray.imaging.types import FitMode, OutputFormat, ResizeFilter


class ImageMetadataResponse(BaseModel):
    """Header-level facts about an image."""

    width: int
    height: int
    format: str = Field(description="Detected container format, or 'unknown'")
    has_alpha: bool


class SmartCropAnalysisResponse(BaseModel):
    """Best crop window found by saliency analysis, in source pixels."""

    x: int
    y: int
    width: int
    height: int
    score: float


class DominantColor(BaseModel):
    r: int = Field(ge=0, le=255)
    g: int = Field(ge=0, le=255)
    b: int = Field(ge=0, le=255)
    hex: str = Field(description="Uppercase '#RRGGBB'")


class DominantColorsResponse(BaseModel):
    """Colours ordered by pixel frequency, most frequent first."""

    colors: list[DominantColor]
    primary: DominantColor


class ImageHashResponse(BaseModel):
    hash: str = Field(description="Base64-encoded hash bits")
    width: int
    height: int
    hash_size: int
    algorithm: str


class HashDistanceRequest(BaseModel):
    hash1: str
    hash2: str


class HashDistanceResponse(BaseModel):
    distance: int = Field(ge=0, description="Hamming distance; 0 means identical")


class BlurHashResponse(BaseModel):
    hash: str
    width: int
    height: int


class ThumbHashResponse(BaseModel):
    hash: str = Field(description="Base64-encoded thumbhash bytes")
    width: int = Field(description="Original image width")
    height: int = Field(description="Original image height")
    has_alpha: bool
    data_url: str = Field(description="PNG data URL of the decoded placeholder")


class ThumbHashDecodeRequest(BaseModel):
    hash: str = Field(description="Base64-encoded thumbhash bytes")


class ThumbHashDecodeResponse(BaseModel):
    width: int
    height: int
    data_url: str


class ResizeRequest(BaseModel):
    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    filter: ResizeFilter | None = None
    fit: FitMode = FitMode.FILL
    background: list[int] | None = Field(default=None, description="RGB or RGBA, each 0-255")


class OutputRequest(BaseModel):
    format: OutputFormat = OutputFormat.JPEG
    quality: int | None = Field(default=None, ge=1, le=100)
    lossless: bool = False


class TransformRequest(BaseModel):
    """Steps applied in order: resize, rotate, flips, grayscale, brightness, contrast, blur, sharpen."""

    resize: ResizeRequest | None = None
    rotate: int | None = Field(default=None, description="Clockwise degrees, multiple of 90")
    flip_horizontal: bool = False
    flip_vertical: bool = False
    grayscale: bool = False
    blur: float | None = None
    sharpen: float | None = None
    brightness: float | None = None
    contrast: float | None = None
    output: OutputRequest = Field(default_factory=OutputRequest)


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    active_tasks: int
    queue_depth: int


class VersionResponse(BaseModel):
    version: str


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str | None = None
