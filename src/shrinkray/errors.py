"""Error taxonomy shared by every operation.

Each error carries a short ``code`` tag so callers (and the HTTP layer) can
branch on the failure kind without matching on message text.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class ImageError(Exception):
    """Base class for all shrinkray failures."""

    code: str = "image_error"


class DecodeError(ImageError):
    """The header is unreadable or the payload is corrupt."""

    code = "decode_error"


class UnsupportedFormat(ImageError):
    """The operation is not valid for the detected format."""

    code = "unsupported_format"


class InvalidOption(ImageError):
    """A request option is malformed or out of range."""

    code = "invalid_option"


class ProcessingError(ImageError):
    """An external collaborator (codec, hasher, cropper, ...) failed."""

    code = "processing_error"


class TaskError(ImageError):
    """An asynchronous task could not be run to completion."""

    code = "task_error"


class InvalidHash(ImageError):
    """A perceptual hash string could not be decoded."""

    code = "invalid_hash"


class InvalidHashData(ImageError):
    """Thumbhash bytes could not be decoded."""

    code = "invalid_hash_data"


@contextmanager
def collaborator(context: str) -> Iterator[None]:
    """Re-raise any non-shrinkray failure inside the block as ProcessingError."""
    try:
        yield
    except ImageError:
        raise
    except Exception as exc:
        raise ProcessingError(f"{context}: {exc}") from exc
