"""API route definitions.

Images are uploaded as a multipart ``file``; scalar options travel as query
parameters. Image results are returned as raw bytes with the matching media
type; structured results as JSON.
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import Response
from pydantic import ValidationError

from shrinkray import operations
from shrinkray.api.middleware import verify_api_key
from shrinkray.api.schemas import (
    BlurHashResponse,
    DominantColor,
    DominantColorsResponse,
    ErrorResponse,
    HashDistanceRequest,
    HashDistanceResponse,
    HealthResponse,
    ImageHashResponse,
    ImageMetadataResponse,
    ResizeRequest,
    SmartCropAnalysisResponse,
    ThumbHashDecodeRequest,
    ThumbHashDecodeResponse,
    ThumbHashResponse,
    TransformRequest,
    VersionResponse,
)
from shrinkray.errors import InvalidHashData, InvalidOption
from shrinkray.imaging.options import (
    CropOptions,
    ExifFields,
    JpegOptions,
    OutputOptions,
    PngOptions,
    ResizeOptions,
    SmartCropOptions,
    TensorOptions,
    ThumbnailOptions,
    TransformOptions,
    WebPOptions,
)
from shrinkray.imaging.types import (
    FitMode,
    HashAlgorithm,
    OutputFormat,
    ResizeFilter,
    TensorDtype,
    TensorLayout,
    TensorNormalization,
)

if TYPE_CHECKING:
    from shrinkray.aio import AsyncImageOps
    from shrinkray.config import Settings
    from shrinkray.workers import WorkerPool

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

MEDIA_TYPES: dict[OutputFormat, str] = {
    OutputFormat.JPEG: "image/jpeg",
    OutputFormat.PNG: "image/png",
    OutputFormat.WEBP: "image/webp",
}

_ERRORS = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_413_CONTENT_TOO_LARGE: {"model": ErrorResponse},
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: {"model": ErrorResponse},
    status.HTTP_422_UNPROCESSABLE_CONTENT: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_worker_pool(request: Request) -> WorkerPool:
    pool: WorkerPool = request.app.state.worker_pool
    return pool


def _get_ops(request: Request) -> AsyncImageOps:
    ops: AsyncImageOps = request.app.state.image_ops
    return ops


async def _read_upload(request: Request, file: UploadFile) -> bytes:
    """Read the uploaded image, enforcing the configured size limit."""
    limit = _get_settings(request).max_file_size
    data = await file.read()
    if len(data) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_CONTENT_TOO_LARGE,
            detail=f"Upload exceeds {limit} bytes",
        )
    return data


def _image_response(data: bytes, fmt: OutputFormat, headers: dict[str, str] | None = None) -> Response:
    return Response(content=data, media_type=MEDIA_TYPES[fmt], headers=headers)


def _decode_base64(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise InvalidHashData(f"hash is not valid base64: {exc}") from exc


def _resize_options(request: ResizeRequest) -> ResizeOptions:
    kwargs: dict[str, object] = {
        "width": request.width,
        "height": request.height,
        "filter": request.filter,
        "fit": request.fit,
    }
    if request.background is not None:
        kwargs["background"] = tuple(request.background)
    return ResizeOptions(**kwargs)


def _parse_background(text: str | None) -> tuple[int, ...] | None:
    """Parse ``r,g,b`` or ``r,g,b,a``; range checks are left to ``ResizeOptions``."""
    if text is None:
        return None
    try:
        return tuple(int(part) for part in text.split(","))
    except ValueError as exc:
        raise InvalidOption(f"background must be comma-separated integers, got {text!r}") from exc


# ---------------------------------------------------------------------------
# Inspection
# ---------------------------------------------------------------------------


@router.post(
    "/metadata",
    response_model=ImageMetadataResponse,
    responses=_ERRORS,
    summary="Read image dimensions and format",
)
async def metadata(request: Request, file: UploadFile) -> ImageMetadataResponse:
    meta = await _get_ops(request).metadata(await _read_upload(request, file))
    return ImageMetadataResponse(
        width=meta.width,
        height=meta.height,
        format=str(meta.format),
        has_alpha=meta.has_alpha,
    )


@router.post(
    "/dominant-colors",
    response_model=DominantColorsResponse,
    responses=_ERRORS,
    summary="Extract dominant colours",
)
async def dominant_colors(
    request: Request,
    file: UploadFile,
    count: Annotated[int | None, Query(description="Number of colours (default 5)")] = None,
) -> DominantColorsResponse:
    result = await _get_ops(request).dominant_colors(await _read_upload(request, file), count)
    return DominantColorsResponse(
        colors=[DominantColor(r=c.r, g=c.g, b=c.b, hex=c.hex) for c in result.colors],
        primary=DominantColor(r=result.primary.r, g=result.primary.g, b=result.primary.b, hex=result.primary.hex),
    )


# ---------------------------------------------------------------------------
# Geometry and encoding
# ---------------------------------------------------------------------------


@router.post(
    "/resize",
    response_class=Response,
    responses=_ERRORS,
    summary="Resize an image (PNG output)",
)
async def resize(
    request: Request,
    file: UploadFile,
    width: Annotated[int | None, Query()] = None,
    height: Annotated[int | None, Query()] = None,
    filter: Annotated[ResizeFilter | None, Query()] = None,  # noqa: A002
    fit: Annotated[FitMode, Query()] = FitMode.FILL,
    background: Annotated[str | None, Query(description="Padding colour as r,g,b or r,g,b,a")] = None,
) -> Response:
    kwargs: dict[str, object] = {"width": width, "height": height, "filter": filter, "fit": fit}
    parsed = _parse_background(background)
    if parsed is not None:
        kwargs["background"] = parsed
    options = ResizeOptions(**kwargs)
    data = await _get_ops(request).resize(await _read_upload(request, file), options)
    return _image_response(data, OutputFormat.PNG)


@router.post(
    "/crop",
    response_class=Response,
    responses=_ERRORS,
    summary="Crop a rectangle (PNG output)",
)
async def crop(
    request: Request,
    file: UploadFile,
    x: Annotated[int, Query()] = 0,
    y: Annotated[int, Query()] = 0,
    width: Annotated[int | None, Query()] = None,
    height: Annotated[int | None, Query()] = None,
) -> Response:
    options = CropOptions(x=x, y=y, width=width, height=height)
    data = await _get_ops(request).crop(await _read_upload(request, file), options)
    return _image_response(data, OutputFormat.PNG)


@router.post(
    "/convert/{output_format}",
    response_class=Response,
    responses=_ERRORS,
    summary="Re-encode an image to JPEG, PNG or WebP",
)
async def convert(
    request: Request,
    output_format: OutputFormat,
    file: UploadFile,
    quality: Annotated[int | None, Query(description="JPEG/WebP quality 1-100")] = None,
    lossless: Annotated[bool, Query(description="WebP only")] = False,
    compression_level: Annotated[int | None, Query(description="PNG only, 0-9")] = None,
) -> Response:
    data = await _read_upload(request, file)
    ops = _get_ops(request)
    if output_format is OutputFormat.JPEG:
        result = await ops.to_jpeg(data, JpegOptions() if quality is None else JpegOptions(quality=quality))
    elif output_format is OutputFormat.PNG:
        png = PngOptions() if compression_level is None else PngOptions(compression_level=compression_level)
        result = await ops.to_png(data, png)
    else:
        webp = WebPOptions(lossless=lossless) if quality is None else WebPOptions(quality=quality, lossless=lossless)
        result = await ops.to_webp(data, webp)
    return _image_response(result, output_format)


@router.post(
    "/transform",
    response_class=Response,
    responses=_ERRORS,
    summary="Apply several edits and encode once",
)
async def transform(
    request: Request,
    file: UploadFile,
    options: Annotated[str, Form(description="TransformRequest as JSON")] = "{}",
) -> Response:
    try:
        parsed = TransformRequest.model_validate_json(options)
    except ValidationError as exc:
        raise InvalidOption(f"invalid transform options: {exc}") from exc

    transform_options = TransformOptions(
        resize=None if parsed.resize is None else _resize_options(parsed.resize),
        rotate=parsed.rotate,
        flip_horizontal=parsed.flip_horizontal,
        flip_vertical=parsed.flip_vertical,
        grayscale=parsed.grayscale,
        blur=parsed.blur,
        sharpen=parsed.sharpen,
        brightness=parsed.brightness,
        contrast=parsed.contrast,
        output=OutputOptions(
            format=parsed.output.format,
            quality=parsed.output.quality,
            lossless=parsed.output.lossless,
        ),
    )
    data = await _get_ops(request).transform(await _read_upload(request, file), transform_options)
    return _image_response(data, transform_options.output.format)


@router.post(
    "/thumbnail",
    response_class=Response,
    responses=_ERRORS,
    summary="Generate a thumbnail using shrink-on-load",
)
async def thumbnail(
    request: Request,
    file: UploadFile,
    width: Annotated[int, Query()],
    height: Annotated[int | None, Query()] = None,
    format: Annotated[OutputFormat | None, Query()] = None,  # noqa: A002
    quality: Annotated[int | None, Query()] = None,
    fast_mode: Annotated[bool, Query()] = False,
    shrink_on_load: Annotated[bool, Query()] = True,
    filter: Annotated[ResizeFilter | None, Query()] = None,  # noqa: A002
) -> Response:
    options = ThumbnailOptions(
        width=width,
        height=height,
        format=format,
        quality=quality,
        fast_mode=fast_mode,
        shrink_on_load=shrink_on_load,
        filter=filter,
    )
    result = await _get_ops(request).thumbnail(await _read_upload(request, file), options)
    return _image_response(
        result.data,
        result.format,
        headers={
            "X-Image-Width": str(result.width),
            "X-Image-Height": str(result.height),
            "X-Original-Width": str(result.original_width),
            "X-Original-Height": str(result.original_height),
            "X-Shrink-On-Load": str(result.shrink_on_load_used).lower(),
        },
    )


@router.post(
    "/smart-crop",
    response_class=Response,
    responses=_ERRORS,
    summary="Crop to the most salient region",
)
async def smart_crop(
    request: Request,
    file: UploadFile,
    width: Annotated[int | None, Query()] = None,
    height: Annotated[int | None, Query()] = None,
    aspect_ratio: Annotated[str | None, Query(description="'W:H', wins over width/height")] = None,
    format: Annotated[OutputFormat, Query()] = OutputFormat.PNG,  # noqa: A002
) -> Response:
    options = SmartCropOptions(width=width, height=height, aspect_ratio=aspect_ratio)
    data = await _get_ops(request).smart_crop(await _read_upload(request, file), options, format)
    return _image_response(data, format)


@router.post(
    "/smart-crop/analyze",
    response_model=SmartCropAnalysisResponse,
    responses=_ERRORS,
    summary="Find the most salient crop window without cropping",
)
async def smart_crop_analyze(
    request: Request,
    file: UploadFile,
    width: Annotated[int | None, Query()] = None,
    height: Annotated[int | None, Query()] = None,
    aspect_ratio: Annotated[str | None, Query()] = None,
) -> SmartCropAnalysisResponse:
    options = SmartCropOptions(width=width, height=height, aspect_ratio=aspect_ratio)
    analysis = await _get_ops(request).smart_crop_analyze(await _read_upload(request, file), options)
    return SmartCropAnalysisResponse(
        x=analysis.x,
        y=analysis.y,
        width=analysis.width,
        height=analysis.height,
        score=analysis.score,
    )


# ---------------------------------------------------------------------------
# Fingerprints
# ---------------------------------------------------------------------------


@router.post(
    "/hash",
    response_model=ImageHashResponse,
    responses=_ERRORS,
    summary="Compute a perceptual hash",
)
async def image_hash(
    request: Request,
    file: UploadFile,
    algorithm: Annotated[HashAlgorithm | None, Query()] = None,
    size: Annotated[int | None, Query(description="8, 16 or 32")] = None,
) -> ImageHashResponse:
    result = await _get_ops(request).image_hash(await _read_upload(request, file), algorithm, size)
    return ImageHashResponse(
        hash=result.hash,
        width=result.width,
        height=result.height,
        hash_size=int(result.hash_size),
        algorithm=str(result.algorithm),
    )


@router.post(
    "/hash/distance",
    response_model=HashDistanceResponse,
    responses=_ERRORS,
    summary="Hamming distance between two perceptual hashes",
)
async def image_hash_distance(request: Request, body: HashDistanceRequest) -> HashDistanceResponse:
    distance = await _get_ops(request).image_hash_distance(body.hash1, body.hash2)
    return HashDistanceResponse(distance=distance)


@router.post(
    "/blurhash",
    response_model=BlurHashResponse,
    responses=_ERRORS,
    summary="Compute a blurhash placeholder",
)
async def blurhash(
    request: Request,
    file: UploadFile,
    components_x: Annotated[int | None, Query()] = None,
    components_y: Annotated[int | None, Query()] = None,
) -> BlurHashResponse:
    result = await _get_ops(request).blurhash(await _read_upload(request, file), components_x, components_y)
    return BlurHashResponse(hash=result.hash, width=result.width, height=result.height)


@router.post(
    "/thumbhash",
    response_model=ThumbHashResponse,
    responses=_ERRORS,
    summary="Compute a thumbhash placeholder",
)
async def thumbhash(request: Request, file: UploadFile) -> ThumbHashResponse:
    ops = _get_ops(request)
    result = await ops.thumbhash(await _read_upload(request, file))
    return ThumbHashResponse(
        hash=base64.b64encode(result.hash).decode("ascii"),
        width=result.width,
        height=result.height,
        has_alpha=result.has_alpha,
        data_url=await ops.thumbhash_to_data_url(result.hash),
    )


@router.post(
    "/thumbhash/decode",
    response_model=ThumbHashDecodeResponse,
    responses=_ERRORS,
    summary="Decode a thumbhash back to a placeholder image",
)
async def thumbhash_decode(request: Request, body: ThumbHashDecodeRequest) -> ThumbHashDecodeResponse:
    ops = _get_ops(request)
    hash_data = _decode_base64(body.hash)
    decoded = await ops.thumbhash_to_rgba(hash_data)
    return ThumbHashDecodeResponse(
        width=decoded.width,
        height=decoded.height,
        data_url=await ops.thumbhash_to_data_url(hash_data),
    )


# ---------------------------------------------------------------------------
# Tensor and EXIF
# ---------------------------------------------------------------------------


@router.post(
    "/tensor",
    response_class=Response,
    responses=_ERRORS,
    summary="Convert an image to a packed tensor",
)
async def to_tensor(
    request: Request,
    file: UploadFile,
    dtype: Annotated[TensorDtype | None, Query()] = None,
    layout: Annotated[TensorLayout | None, Query()] = None,
    normalization: Annotated[TensorNormalization | None, Query()] = None,
    width: Annotated[int | None, Query()] = None,
    height: Annotated[int | None, Query()] = None,
    batch: Annotated[bool | None, Query()] = None,
) -> Response:
    options = TensorOptions(
        dtype=dtype,
        layout=layout,
        normalization=normalization,
        width=width,
        height=height,
        batch=batch,
    )
    result = await _get_ops(request).to_tensor(await _read_upload(request, file), options)
    return Response(
        content=result.data,
        media_type="application/octet-stream",
        headers={
            "X-Tensor-Shape": ",".join(str(dim) for dim in result.shape),
            "X-Tensor-Dtype": str(result.dtype),
            "X-Tensor-Layout": str(result.layout),
        },
    )


@router.post(
    "/exif",
    response_class=Response,
    responses=_ERRORS,
    summary="Write EXIF fields (JPEG and WebP only)",
)
async def write_exif(
    request: Request,
    file: UploadFile,
    image_description: Annotated[str | None, Query()] = None,
    artist: Annotated[str | None, Query()] = None,
    copyright: Annotated[str | None, Query()] = None,  # noqa: A002
    software: Annotated[str | None, Query()] = None,
    date_time: Annotated[str | None, Query()] = None,
    date_time_original: Annotated[str | None, Query()] = None,
    user_comment: Annotated[str | None, Query()] = None,
    make: Annotated[str | None, Query()] = None,
    model: Annotated[str | None, Query()] = None,
    orientation: Annotated[int | None, Query()] = None,
) -> Response:
    fields = ExifFields(
        image_description=image_description,
        artist=artist,
        copyright=copyright,
        software=software,
        date_time=date_time,
        date_time_original=date_time_original,
        user_comment=user_comment,
        make=make,
        model=model,
        orientation=orientation,
    )
    data = await _read_upload(request, file)
    meta = await _get_ops(request).metadata(data)
    result = await _get_ops(request).write_exif(data, fields)
    return Response(content=result, media_type=f"image/{meta.format}")


@router.post(
    "/exif/strip",
    response_class=Response,
    responses=_ERRORS,
    summary="Remove EXIF metadata (JPEG and WebP only)",
)
async def strip_exif(request: Request, file: UploadFile) -> Response:
    data = await _read_upload(request, file)
    meta = await _get_ops(request).metadata(data)
    result = await _get_ops(request).strip_exif(data)
    return Response(content=result, media_type=f"image/{meta.format}")


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    pool = _get_worker_pool(request)
    return HealthResponse(
        status="ok",
        version=operations.version(),
        active_tasks=pool.active_count,
        queue_depth=pool.queue_depth,
    )


@router.get(
    "/version",
    response_model=VersionResponse,
    summary="Library version",
)
async def version() -> VersionResponse:
    return VersionResponse(version=operations.version())
