"""EXIF write/strip for JPEG and WebP containers.

Only the fields present in ``ExifFields`` are written; every other tag and
all non-EXIF container data are kept. Tag serialisation, insertion and
removal are done by piexif.
"""

from __future__ import annotations

import io
import logging
from typing import TYPE_CHECKING

import piexif
import piexif.helper

from shrinkray.errors import UnsupportedFormat, collaborator
from shrinkray.imaging.probe import probe
from shrinkray.imaging.types import ImageFormat

if TYPE_CHECKING:
    from shrinkray.imaging.options import ExifFields

logger = logging.getLogger(__name__)

EXIF_FORMATS = frozenset({ImageFormat.JPEG, ImageFormat.WEBP})

_ZEROTH_TEXT_TAGS: dict[str, int] = {
    "image_description": piexif.ImageIFD.ImageDescription,
    "artist": piexif.ImageIFD.Artist,
    "copyright": piexif.ImageIFD.Copyright,
    "software": piexif.ImageIFD.Software,
    "date_time": piexif.ImageIFD.DateTime,
    "make": piexif.ImageIFD.Make,
    "model": piexif.ImageIFD.Model,
}


def _require_exif_container(data: bytes, action: str) -> ImageFormat:
    image_format = probe(data).format
    if image_format not in EXIF_FORMATS:
        raise UnsupportedFormat(f"EXIF {action} is only supported for JPEG and WebP, got {image_format}")
    return image_format


def merge_fields(exif_dict: dict, fields: ExifFields) -> dict:
    """Copy the set fields of ``fields`` into a piexif dictionary."""
    zeroth = exif_dict.setdefault("0th", {})
    exif_ifd = exif_dict.setdefault("Exif", {})

    for name, tag in _ZEROTH_TEXT_TAGS.items():
        value = getattr(fields, name)
        if value is not None:
            zeroth[tag] = value.encode("utf-8")
    if fields.orientation is not None:
        zeroth[piexif.ImageIFD.Orientation] = fields.orientation
    if fields.date_time_original is not None:
        exif_ifd[piexif.ExifIFD.DateTimeOriginal] = fields.date_time_original.encode("utf-8")
    if fields.user_comment is not None:
        exif_ifd[piexif.ExifIFD.UserComment] = piexif.helper.UserComment.dump(fields.user_comment, encoding="unicode")
    return exif_dict


def empty_exif() -> dict:
    return {"0th": {}, "Exif": {}, "GPS": {}, "Interop": {}, "1st": {}, "thumbnail": None}


def _load_existing(data: bytes, image_format: ImageFormat) -> dict:
    # piexif raises for a WebP without an EXIF chunk instead of returning empty IFDs
    try:
        return piexif.load(data)
    except ValueError:
        if image_format is not ImageFormat.WEBP:
            raise
        return empty_exif()


def write_exif(data: bytes, fields: ExifFields) -> bytes:
    image_format = _require_exif_container(data, "writing")
    with collaborator("EXIF write failed"):
        exif_dict = merge_fields(_load_existing(data, image_format), fields)
        exif_bytes = piexif.dump(exif_dict)
        output = io.BytesIO()
        piexif.insert(exif_bytes, data, output)
    logger.debug("Wrote EXIF block of %d bytes into %s image", len(exif_bytes), image_format)
    return output.getvalue()


def strip_exif(data: bytes) -> bytes:
    """Remove every EXIF segment/chunk; pixel data is left byte-identical."""
    _require_exif_container(data, "stripping")
    current = data
    with collaborator("EXIF strip failed"):
        while True:
            output = io.BytesIO()
            piexif.remove(current, output)
            stripped = output.getvalue()
            if stripped == current:
                break
            current = stripped
    logger.debug("Stripped %d bytes of EXIF data", len(data) - len(current))
    return current
