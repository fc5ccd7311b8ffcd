"""Tensor conversion: option resolution plus numpy packing."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from PIL import Image

from shrinkray.errors import InvalidOption, collaborator
from shrinkray.imaging.decode import derive_dimensions
from shrinkray.imaging.options import TensorOptions
from shrinkray.imaging.types import TensorDtype, TensorLayout, TensorNormalization, TensorResult

if TYPE_CHECKING:
    from numpy.typing import NDArray

DEFAULT_DTYPE: TensorDtype = TensorDtype.FLOAT32
DEFAULT_LAYOUT: TensorLayout = TensorLayout.CHW
CHANNELS: int = 3

IMAGENET_MEAN = np.array([0.485, 0.456, 0.406], dtype=np.float32)
IMAGENET_STD = np.array([0.229, 0.224, 0.225], dtype=np.float32)


@dataclass(frozen=True)
class ResolvedTensorOptions:
    dtype: TensorDtype
    layout: TensorLayout
    normalization: TensorNormalization
    width: int | None
    height: int | None
    batch: bool


def resolve_tensor_options(options: TensorOptions | None = None) -> ResolvedTensorOptions:
    """Fill defaults: float32 / CHW / ImageNet normalisation (none for uint8), no batch axis."""
    options = options or TensorOptions()
    dtype = options.dtype or DEFAULT_DTYPE

    if options.normalization is None:
        normalization = TensorNormalization.IMAGENET if dtype is TensorDtype.FLOAT32 else TensorNormalization.NONE
    elif dtype is TensorDtype.UINT8 and options.normalization is not TensorNormalization.NONE:
        raise InvalidOption(f"{options.normalization} normalization requires float32 output")
    else:
        normalization = options.normalization

    return ResolvedTensorOptions(
        dtype=dtype,
        layout=options.layout or DEFAULT_LAYOUT,
        normalization=normalization,
        width=options.width,
        height=options.height,
        batch=bool(options.batch),
    )


def _normalize(pixels: NDArray[np.uint8], normalization: TensorNormalization) -> NDArray[np.float32]:
    values = pixels.astype(np.float32)
    if normalization is TensorNormalization.ZERO_ONE:
        return values / 255.0
    if normalization is TensorNormalization.NEG_ONE_ONE:
        return values / 127.5 - 1.0
    if normalization is TensorNormalization.IMAGENET:
        return (values / 255.0 - IMAGENET_MEAN) / IMAGENET_STD
    return values


def pack(image: Image.Image, options: ResolvedTensorOptions) -> TensorResult:
    rgb = image.convert("RGB")
    if options.width is not None or options.height is not None:
        size = derive_dimensions(rgb.width, rgb.height, options.width, options.height)
        if size != rgb.size:
            rgb = rgb.resize(size, resample=Image.Resampling.BILINEAR)

    with collaborator("Tensor packing failed"):
        array: NDArray = np.asarray(rgb, dtype=np.uint8)
        if options.dtype is TensorDtype.FLOAT32:
            array = _normalize(array, options.normalization)
        if options.layout is TensorLayout.CHW:
            array = array.transpose(2, 0, 1)
        if options.batch:
            array = array[np.newaxis, ...]
        array = np.ascontiguousarray(array)

    return TensorResult(
        data=array.tobytes(),
        shape=tuple(int(dim) for dim in array.shape),
        dtype=options.dtype,
        layout=options.layout,
        width=rgb.width,
        height=rgb.height,
        channels=CHANNELS,
    )
