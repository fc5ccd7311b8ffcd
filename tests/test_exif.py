"""Tests for EXIF write/strip."""

from __future__ import annotations

import io

import piexif
import piexif.helper
import pytest
from PIL import Image

from shrinkray.errors import InvalidOption, UnsupportedFormat
from shrinkray.imaging import exif
from shrinkray.imaging.options import ExifFields


def _fields() -> ExifFields:
    return ExifFields(
        artist="Ada",
        copyright="CC-BY",
        software="shrinkray",
        date_time_original="2024:01:02 03:04:05",
        user_comment="hello",
        orientation=6,
    )


class TestExifFields:
    @pytest.mark.parametrize("orientation", [0, 9])
    def test_orientation_range(self, orientation: int) -> None:
        with pytest.raises(InvalidOption):
            ExifFields(orientation=orientation)

    def test_merge_only_sets_present_fields(self) -> None:
        existing = {"0th": {piexif.ImageIFD.Make: b"Canon"}, "Exif": {}}
        merged = exif.merge_fields(existing, ExifFields(artist="Ada"))
        assert merged["0th"][piexif.ImageIFD.Make] == b"Canon"
        assert merged["0th"][piexif.ImageIFD.Artist] == b"Ada"
        assert piexif.ImageIFD.Software not in merged["0th"]


class TestWriteExif:
    def test_fields_round_trip_on_jpeg(self, jpeg_bytes: bytes) -> None:
        written = exif.write_exif(jpeg_bytes, _fields())

        loaded = piexif.load(written)
        assert loaded["0th"][piexif.ImageIFD.Artist] == b"Ada"
        assert loaded["0th"][piexif.ImageIFD.Orientation] == 6
        assert loaded["Exif"][piexif.ExifIFD.DateTimeOriginal] == b"2024:01:02 03:04:05"
        assert piexif.helper.UserComment.load(loaded["Exif"][piexif.ExifIFD.UserComment]) == "hello"

    def test_existing_tags_are_kept(self, jpeg_bytes: bytes) -> None:
        first = exif.write_exif(jpeg_bytes, ExifFields(make="Canon"))
        second = exif.write_exif(first, ExifFields(model="EOS"))

        loaded = piexif.load(second)
        assert loaded["0th"][piexif.ImageIFD.Make] == b"Canon"
        assert loaded["0th"][piexif.ImageIFD.Model] == b"EOS"

    def test_png_is_unsupported(self, png_rgba_bytes: bytes) -> None:
        with pytest.raises(UnsupportedFormat):
            exif.write_exif(png_rgba_bytes, _fields())


class TestStripExif:
    def test_strip_removes_all_fields(self, jpeg_bytes: bytes) -> None:
        stripped = exif.strip_exif(exif.write_exif(jpeg_bytes, _fields()))

        loaded = piexif.load(stripped)
        assert not loaded["0th"]
        assert not loaded["Exif"]

    def test_strip_without_exif_is_identity(self, jpeg_bytes: bytes) -> None:
        assert exif.strip_exif(jpeg_bytes) == jpeg_bytes

    def test_gif_is_unsupported(self, gif_bytes: bytes) -> None:
        with pytest.raises(UnsupportedFormat):
            exif.strip_exif(gif_bytes)

    def test_jpeg_strip_leaves_other_segments(self, jpeg_bytes: bytes) -> None:
        written = exif.write_exif(jpeg_bytes, _fields())
        assert written[2:4] == b"\xff\xe1"
        app1_length = 2 + int.from_bytes(written[4:6], "big")

        stripped = exif.strip_exif(written)

        assert b"Exif\x00\x00" not in stripped
        assert stripped == written[:2] + written[2 + app1_length :]


class TestWebPExif:
    def test_write_into_webp_without_exif(self, webp_bytes: bytes) -> None:
        written = exif.write_exif(webp_bytes, ExifFields(artist="Ada"))

        assert piexif.load(written)["0th"][piexif.ImageIFD.Artist] == b"Ada"
        with Image.open(io.BytesIO(written)) as image:
            assert image.size == (320, 240)

    def test_write_over_existing_exif(self, webp_bytes: bytes) -> None:
        first = exif.write_exif(webp_bytes, ExifFields(make="Canon"))
        second = exif.write_exif(first, ExifFields(model="EOS"))

        loaded = piexif.load(second)
        assert loaded["0th"][piexif.ImageIFD.Make] == b"Canon"
        assert loaded["0th"][piexif.ImageIFD.Model] == b"EOS"

    def test_strip(self, webp_bytes: bytes) -> None:
        stripped = exif.strip_exif(exif.write_exif(webp_bytes, _fields()))

        loaded = piexif.load(stripped)
        assert not loaded["0th"]
        assert not loaded["Exif"]
        with Image.open(io.BytesIO(stripped)) as image:
            image.load()
            assert image.size == (320, 240)
