"""Blocking operation surface.

Each function is the single implementation of its operation; the async
surface in ``shrinkray.aio`` runs these same functions on a worker pool.
"""

from __future__ import annotations

import dataclasses
import logging
from importlib.metadata import version as package_version

from shrinkray.imaging import colors, exif, hashing, smart_crop as smart_crop_planner
from shrinkray.imaging.decode import decode, derive_dimensions, plan_decode
from shrinkray.imaging.encode import encode, encode_jpeg, encode_png, encode_webp, encoder_options
from shrinkray.imaging.geometry import DEFAULT_FILTER, plan_resize
from shrinkray.imaging.options import (
    CropOptions,
    ExifFields,
    JpegOptions,
    PngOptions,
    ResizeOptions,
    SmartCropOptions,
    TensorOptions,
    ThumbnailOptions,
    TransformOptions,
    WebPOptions,
    coerce_enum,
)
from shrinkray.imaging.probe import probe
from shrinkray.imaging.resize import apply_resize, crop_rect
from shrinkray.imaging.tensor import pack, resolve_tensor_options
from shrinkray.imaging.thumbnail import generate_thumbnail
from shrinkray.imaging.transform import apply_transform
from shrinkray.imaging.types import (
    BlurHashResult,
    DominantColorsResult,
    HashAlgorithm,
    HashSize,
    ImageHashResult,
    ImageMetadata,
    OutputFormat,
    SmartCropAnalysis,
    TensorResult,
    ThumbHashDecodeResult,
    ThumbHashResult,
    ThumbnailResult,
)

logger = logging.getLogger(__name__)

PACKAGE_NAME = "shrinkray"


def metadata(data: bytes) -> ImageMetadata:
    return probe(data)


def resize(data: bytes, options: ResizeOptions) -> bytes:
    """Resize with shrink-on-load decoding; the output is PNG."""
    meta = probe(data)
    width, height = options.width, options.height
    if (width is None) != (height is None):
        width, height = derive_dimensions(meta.width, meta.height, width, height)

    image = decode(data, plan_decode(meta, width, height))
    plan = plan_resize(image.width, image.height, width, height, options.fit)
    resized = apply_resize(image, plan, options.filter or DEFAULT_FILTER, options.background)
    return encode_png(resized)


def crop(data: bytes, options: CropOptions) -> bytes:
    return encode_png(crop_rect(decode(data), options))


def to_jpeg(data: bytes, options: JpegOptions | None = None) -> bytes:
    return encode_jpeg(decode(data), options)


def to_png(data: bytes, options: PngOptions | None = None) -> bytes:
    return encode_png(decode(data), options)


def to_webp(data: bytes, options: WebPOptions | None = None) -> bytes:
    return encode_webp(decode(data), options)


def transform(data: bytes, options: TransformOptions) -> bytes:
    plan = None
    if options.resize is not None and (options.resize.width is not None or options.resize.height is not None):
        plan = plan_decode(probe(data), options.resize.width, options.resize.height)
    image = apply_transform(decode(data, plan), options)
    output = options.output
    return encode(image, output.format, encoder_options(output.format, output.quality, lossless=output.lossless))


def thumbnail(data: bytes, options: ThumbnailOptions) -> ThumbnailResult:
    return generate_thumbnail(data, options)


def thumbnail_buffer(data: bytes, options: ThumbnailOptions) -> bytes:
    return generate_thumbnail(data, options).data


def smart_crop_analyze(data: bytes, options: SmartCropOptions) -> SmartCropAnalysis:
    image = decode(data)
    target_w, target_h = smart_crop_planner.resolve_target(image.width, image.height, options)
    return smart_crop_planner.analyze(image, target_w, target_h)


def smart_crop(
    data: bytes,
    options: SmartCropOptions,
    output_format: OutputFormat | str = OutputFormat.PNG,
) -> bytes:
    """Crop to the most salient window; PNG unless another format is requested."""
    output = coerce_enum(OutputFormat, output_format, "format")
    image = decode(data)
    target_w, target_h = smart_crop_planner.resolve_target(image.width, image.height, options)
    cropped, _analysis = smart_crop_planner.crop(image, target_w, target_h)
    return encode(cropped, output)


def dominant_colors(data: bytes, count: int | None = None) -> DominantColorsResult:
    return colors.extract_colors(decode(data), count)


def image_hash(
    data: bytes,
    algorithm: HashAlgorithm | str | None = None,
    size: HashSize | int | None = None,
) -> ImageHashResult:
    # Resolve first so bad options fail before the decode.
    algorithm, size = hashing.resolve_hash_options(algorithm, size)
    return hashing.perceptual_hash(decode(data), algorithm, size)


def image_hash_distance(hash1: str, hash2: str) -> int:
    return hashing.hash_distance(hash1, hash2)


def blurhash(data: bytes, components_x: int | None = None, components_y: int | None = None) -> BlurHashResult:
    return hashing.blur_hash(decode(data), components_x, components_y)


def thumbhash(data: bytes) -> ThumbHashResult:
    return hashing.thumb_hash(data)


def thumbhash_to_rgba(hash_data: bytes) -> ThumbHashDecodeResult:
    return hashing.thumbhash_to_rgba(hash_data)


def thumbhash_to_data_url(hash_data: bytes) -> str:
    return hashing.thumbhash_to_data_url(hash_data)


def to_tensor(data: bytes, options: TensorOptions | None = None) -> TensorResult:
    resolved = resolve_tensor_options(options)
    plan = None
    if resolved.width is not None or resolved.height is not None:
        meta = probe(data)
        width, height = derive_dimensions(meta.width, meta.height, resolved.width, resolved.height)
        resolved = dataclasses.replace(resolved, width=width, height=height)
        plan = plan_decode(meta, width, height)
    return pack(decode(data, plan), resolved)


def write_exif(data: bytes, fields: ExifFields) -> bytes:
    return exif.write_exif(data, fields)


def strip_exif(data: bytes) -> bytes:
    return exif.strip_exif(data)


def version() -> str:
    return package_version(PACKAGE_NAME)
