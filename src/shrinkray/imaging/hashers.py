"""Perceptual hasher kinds.

Gradient, double-gradient and mean hashes come from ``imagehash``.
``imagehash`` has no block-mean hash, so the blockhash kind is computed here
with numpy (the "quick" variant: block sums compared against the median of
their horizontal band).
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import imagehash
import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray
    from PIL import Image

_BLOCKHASH_BANDS = 4
# Fully transparent pixels count as white (3 x 255).
_TRANSPARENT_LUMA = 765.0


class HasherKind(StrEnum):
    GRADIENT = "gradient"
    DOUBLE_GRADIENT = "double_gradient"
    MEAN = "mean"
    BLOCKHASH = "blockhash"


def _blockhash(image: Image.Image, bits: int) -> NDArray[np.bool_]:
    if image.width < bits or image.height < bits:
        image = image.resize((max(image.width, bits), max(image.height, bits)))
    rgba = np.asarray(image.convert("RGBA"), dtype=np.float64)
    luma = rgba[..., :3].sum(axis=2)
    luma[rgba[..., 3] == 0] = _TRANSPARENT_LUMA

    blocks = np.array(
        [[block.sum() for block in np.array_split(band, bits, axis=1)] for band in np.array_split(luma, bits, axis=0)]
    ).ravel()
    hashed = np.concatenate([band > np.median(band) for band in np.array_split(blocks, _BLOCKHASH_BANDS)])
    return hashed.reshape(bits, bits)


def compute_hash(image: Image.Image, kind: HasherKind, size: int) -> NDArray[np.bool_]:
    """Return the hash bits for ``image`` as a boolean array."""
    if kind is HasherKind.GRADIENT:
        return imagehash.dhash(image, hash_size=size).hash
    if kind is HasherKind.DOUBLE_GRADIENT:
        rows = imagehash.dhash(image, hash_size=size).hash
        columns = imagehash.dhash_vertical(image, hash_size=size).hash
        return np.concatenate([rows.ravel(), columns.ravel()])
    if kind is HasherKind.MEAN:
        return imagehash.average_hash(image, hash_size=size).hash
    return _blockhash(image, size)
