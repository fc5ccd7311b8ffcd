"""Non-blocking operation surface.

Every method offloads the matching function from ``shrinkray.operations`` to
a ``WorkerPool`` and awaits it; there is no second implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from shrinkray import operations

if TYPE_CHECKING:
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
    )
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
    from shrinkray.workers import WorkerPool


class AsyncImageOps:
    """Awaitable twins of the blocking operations, backed by a worker pool."""

    def __init__(self, pool: WorkerPool) -> None:
        self._pool = pool

    async def metadata(self, data: bytes) -> ImageMetadata:
        return await self._pool.run(operations.metadata, data)

    async def resize(self, data: bytes, options: ResizeOptions) -> bytes:
        return await self._pool.run(operations.resize, data, options)

    async def crop(self, data: bytes, options: CropOptions) -> bytes:
        return await self._pool.run(operations.crop, data, options)

    async def to_jpeg(self, data: bytes, options: JpegOptions | None = None) -> bytes:
        return await self._pool.run(operations.to_jpeg, data, options)

    async def to_png(self, data: bytes, options: PngOptions | None = None) -> bytes:
        return await self._pool.run(operations.to_png, data, options)

    async def to_webp(self, data: bytes, options: WebPOptions | None = None) -> bytes:
        return await self._pool.run(operations.to_webp, data, options)

    async def transform(self, data: bytes, options: TransformOptions) -> bytes:
        return await self._pool.run(operations.transform, data, options)

    async def thumbnail(self, data: bytes, options: ThumbnailOptions) -> ThumbnailResult:
        return await self._pool.run(operations.thumbnail, data, options)

    async def thumbnail_buffer(self, data: bytes, options: ThumbnailOptions) -> bytes:
        return await self._pool.run(operations.thumbnail_buffer, data, options)

    async def smart_crop_analyze(self, data: bytes, options: SmartCropOptions) -> SmartCropAnalysis:
        return await self._pool.run(operations.smart_crop_analyze, data, options)

    async def smart_crop(
        self,
        data: bytes,
        options: SmartCropOptions,
        output_format: OutputFormat | str = "png",
    ) -> bytes:
        return await self._pool.run(operations.smart_crop, data, options, output_format)

    async def dominant_colors(self, data: bytes, count: int | None = None) -> DominantColorsResult:
        return await self._pool.run(operations.dominant_colors, data, count)

    async def image_hash(
        self,
        data: bytes,
        algorithm: HashAlgorithm | str | None = None,
        size: HashSize | int | None = None,
    ) -> ImageHashResult:
        return await self._pool.run(operations.image_hash, data, algorithm, size)

    async def image_hash_distance(self, hash1: str, hash2: str) -> int:
        return await self._pool.run(operations.image_hash_distance, hash1, hash2)

    async def blurhash(
        self,
        data: bytes,
        components_x: int | None = None,
        components_y: int | None = None,
    ) -> BlurHashResult:
        return await self._pool.run(operations.blurhash, data, components_x, components_y)

    async def thumbhash(self, data: bytes) -> ThumbHashResult:
        return await self._pool.run(operations.thumbhash, data)

    async def thumbhash_to_rgba(self, hash_data: bytes) -> ThumbHashDecodeResult:
        return await self._pool.run(operations.thumbhash_to_rgba, hash_data)

    async def thumbhash_to_data_url(self, hash_data: bytes) -> str:
        return await self._pool.run(operations.thumbhash_to_data_url, hash_data)

    async def to_tensor(self, data: bytes, options: TensorOptions | None = None) -> TensorResult:
        return await self._pool.run(operations.to_tensor, data, options)

    async def write_exif(self, data: bytes, fields: ExifFields) -> bytes:
        return await self._pool.run(operations.write_exif, data, fields)

    async def strip_exif(self, data: bytes) -> bytes:
        return await self._pool.run(operations.strip_exif, data)
