import io

import piexif
import pytest
from PIL import Image


def make_jpeg(zeroth=None, exif=None, size=(64, 48)):
	"""Encode a small JPEG carrying the given 0th/Exif IFD entries."""
	exif_bytes = piexif.dump({"0th": zeroth or {}, "Exif": exif or {}, "GPS": {}, "1st": {}, "thumbnail": None})
	buf = io.BytesIO()
	Image.new("RGB", size, (128, 128, 128)).save(buf, format="JPEG", exif=exif_bytes)
	return buf.getvalue()


def plain_jpeg(size=(32, 24)):
	buf = io.BytesIO()
	Image.new("RGB", size, (10, 20, 30)).save(buf, format="JPEG")
	return buf.getvalue()


@pytest.fixture
def camera_jpeg():
	return make_jpeg(
		zeroth={
			piexif.ImageIFD.Make: b"Canon",
			piexif.ImageIFD.Model: b"Canon EOS R6",
			piexif.ImageIFD.Software: b"Firmware 1.5.0",
			piexif.ImageIFD.Orientation: 1,
		},
		exif={
			piexif.ExifIFD.FNumber: (28, 10),
			piexif.ExifIFD.ExposureTime: (1, 100),
			piexif.ExifIFD.ISOSpeedRatings: 100,
			piexif.ExifIFD.DateTimeOriginal: b"2024:05:01 10:00:00",
			piexif.ExifIFD.PixelXDimension: 64,
			piexif.ExifIFD.PixelYDimension: 48,
		},
	)


@pytest.fixture
def no_iso_jpeg():
	return make_jpeg(
		zeroth={piexif.ImageIFD.Make: b"Canon"},
		exif={
			piexif.ExifIFD.FNumber: (40, 10),
			piexif.ExifIFD.ExposureTime: (1, 250),
		},
	)


@pytest.fixture
def apex_jpeg():
	return make_jpeg(
		exif={
			piexif.ExifIFD.ApertureValue: (3, 1),
			piexif.ExifIFD.ShutterSpeedValue: (8, 1),
			piexif.ExifIFD.ISOSpeedRatings: 400,
		},
	)
