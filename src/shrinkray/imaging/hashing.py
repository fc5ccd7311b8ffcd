"""Image fingerprints: perceptual hashes, blurhash and thumbhash.

Perceptual hashes are serialised as base64 of the packed hash bits, so two
hashes compare by Hamming distance over those bits.

Thumbhash is computed from a raster of at most 100px per side, decoded with
shrink-on-load. The result reports the original dimensions and alpha flag,
but the hash itself describes the reduced raster.
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import TYPE_CHECKING

import blurhash
import numpy as np
import thumbhash
from PIL import Image

from shrinkray.errors import InvalidHash, InvalidHashData, InvalidOption, collaborator
from shrinkray.imaging.decode import decode, plan_decode
from shrinkray.imaging.encode import encode_png
from shrinkray.imaging.hashers import HasherKind, compute_hash
from shrinkray.imaging.options import coerce_enum
from shrinkray.imaging.probe import probe
from shrinkray.imaging.types import (
    BlurHashResult,
    HashAlgorithm,
    HashSize,
    ImageHashResult,
    ThumbHashDecodeResult,
    ThumbHashResult,
)

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM: HashAlgorithm = HashAlgorithm.PHASH
DEFAULT_HASH_SIZE: HashSize = HashSize.SIZE_8

# Fixed mapping; not configurable.
ALGORITHM_KINDS: dict[HashAlgorithm, HasherKind] = {
    HashAlgorithm.PHASH: HasherKind.GRADIENT,
    HashAlgorithm.DHASH: HasherKind.DOUBLE_GRADIENT,
    HashAlgorithm.AHASH: HasherKind.MEAN,
    HashAlgorithm.BLOCKHASH: HasherKind.BLOCKHASH,
}

DEFAULT_COMPONENTS_X: int = 4
DEFAULT_COMPONENTS_Y: int = 3
_COMPONENT_RANGE = range(1, 10)

THUMBHASH_MAX_SIDE: int = 100
# Header size of a thumbhash (24-bit + 16-bit fields).
_THUMBHASH_MIN_BYTES = 5


# ---------------------------------------------------------------------------
# Perceptual hash
# ---------------------------------------------------------------------------


def resolve_hash_options(
    algorithm: HashAlgorithm | str | None,
    size: HashSize | int | str | None,
) -> tuple[HashAlgorithm, HashSize]:
    """Apply defaults for unset values; reject unknown ones."""
    resolved_algorithm = DEFAULT_ALGORITHM if algorithm is None else coerce_enum(HashAlgorithm, algorithm, "algorithm")
    if size is None:
        resolved_size = DEFAULT_HASH_SIZE
    else:
        if isinstance(size, str) and size.isdigit():
            size = int(size)
        resolved_size = coerce_enum(HashSize, size, "hash size")
    return resolved_algorithm, resolved_size


def encode_hash_bits(bits: NDArray[np.bool_]) -> str:
    return base64.b64encode(np.packbits(np.asarray(bits, dtype=bool).ravel()).tobytes()).decode("ascii")


def decode_hash(text: str, label: str = "hash") -> NDArray[np.uint8]:
    if not text:
        raise InvalidHash(f"Invalid {label}: empty string")
    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidHash(f"Invalid {label}: {exc}") from exc
    if not raw:
        raise InvalidHash(f"Invalid {label}: no hash bytes")
    return np.frombuffer(raw, dtype=np.uint8)


def perceptual_hash(
    image: Image.Image,
    algorithm: HashAlgorithm | str | None = None,
    size: HashSize | int | str | None = None,
) -> ImageHashResult:
    resolved_algorithm, resolved_size = resolve_hash_options(algorithm, size)
    with collaborator("Perceptual hash failed"):
        bits = compute_hash(image, ALGORITHM_KINDS[resolved_algorithm], int(resolved_size))
    return ImageHashResult(
        hash=encode_hash_bits(bits),
        width=image.width,
        height=image.height,
        hash_size=int(resolved_size),
        algorithm=resolved_algorithm.value,
    )


def hash_distance(hash1: str, hash2: str) -> int:
    """Hamming distance between two hashes.

    0 means identical; as a rough guide, <5 is very similar, <10 similar and
    anything above 10 a different image.
    """
    first = decode_hash(hash1, "hash1")
    second = decode_hash(hash2, "hash2")
    if first.size != second.size:
        raise InvalidHash(f"Hashes differ in length ({first.size * 8} vs {second.size * 8} bits)")
    return int(np.unpackbits(np.bitwise_xor(first, second)).sum())


# ---------------------------------------------------------------------------
# Blurhash
# ---------------------------------------------------------------------------


def blur_hash(
    image: Image.Image,
    components_x: int | None = None,
    components_y: int | None = None,
) -> BlurHashResult:
    cx = DEFAULT_COMPONENTS_X if components_x is None else components_x
    cy = DEFAULT_COMPONENTS_Y if components_y is None else components_y
    if cx not in _COMPONENT_RANGE or cy not in _COMPONENT_RANGE:
        raise InvalidOption(f"Blurhash components must be between 1 and 9, got {cx}x{cy}")

    rgba = image.convert("RGBA")
    with collaborator("Blurhash failed"):
        encoded = blurhash.encode(rgba, cx, cy)
    return BlurHashResult(hash=encoded, width=rgba.width, height=rgba.height)


# ---------------------------------------------------------------------------
# Thumbhash
# ---------------------------------------------------------------------------


def thumbhash_target(width: int, height: int) -> tuple[int, int]:
    """Bound the larger side to 100px, preserving aspect ratio (minimum 1)."""
    if width <= THUMBHASH_MAX_SIDE and height <= THUMBHASH_MAX_SIDE:
        return width, height
    scale = THUMBHASH_MAX_SIDE / max(width, height)
    return max(1, round(width * scale)), max(1, round(height * scale))


def thumb_hash(data: bytes) -> ThumbHashResult:
    metadata = probe(data)
    target_w, target_h = thumbhash_target(metadata.width, metadata.height)
    image = decode(data, plan_decode(metadata, target_w, target_h))

    # Scaled decoding stops at 1/8; the packer only takes rasters up to 100px.
    if image.width > THUMBHASH_MAX_SIDE or image.height > THUMBHASH_MAX_SIDE:
        image = image.resize((target_w, target_h), resample=Image.Resampling.BILINEAR)

    rgba = image.convert("RGBA")
    logger.debug(
        "Thumbhash from %dx%d raster (original %dx%d)", rgba.width, rgba.height, metadata.width, metadata.height
    )
    with collaborator("Thumbhash failed"):
        packed = thumbhash.rgba_to_thumb_hash(rgba.width, rgba.height, rgba.tobytes())
    return ThumbHashResult(
        hash=bytes(packed),
        width=metadata.width,
        height=metadata.height,
        has_alpha=metadata.has_alpha,
    )


def thumbhash_to_rgba(hash_data: bytes) -> ThumbHashDecodeResult:
    if len(hash_data) < _THUMBHASH_MIN_BYTES:
        raise InvalidHashData(f"Invalid thumbhash data: expected at least {_THUMBHASH_MIN_BYTES} bytes")
    try:
        width, height, rgba = thumbhash.thumb_hash_to_rgba(bytes(hash_data))
        pixels = np.asarray(rgba, dtype=np.uint8).tobytes()
    except Exception as exc:
        raise InvalidHashData(f"Invalid thumbhash data: {exc}") from exc
    if len(pixels) != width * height * 4:
        raise InvalidHashData("Invalid thumbhash data: decoded pixel count does not match dimensions")
    return ThumbHashDecodeResult(rgba=pixels, width=int(width), height=int(height))


def thumbhash_to_data_url(hash_data: bytes) -> str:
    """Render a thumbhash placeholder as a PNG data URL."""
    decoded = thumbhash_to_rgba(hash_data)
    image = Image.frombytes("RGBA", (decoded.width, decoded.height), decoded.rgba)
    return "data:image/png;base64," + base64.b64encode(encode_png(image)).decode("ascii")
