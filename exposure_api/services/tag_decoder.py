from __future__ import annotations

import io
import logging
from typing import Any, Dict, Optional, Tuple

import piexif
from PIL import ExifTags, Image
from PIL.TiffImagePlugin import IFDRational

from exposure_api.services.numeric import round_half_up
from exposure_api.services.tags import DecodeError, DecodeResult, Rational, RawTagCollection, TagRecord

logger = logging.getLogger(__name__)

EXIF_IFD_POINTER = 0x8769

_RATIONAL_TYPES = {piexif.TYPES.Rational, piexif.TYPES.SRational}
_INTEGER_TYPES = {piexif.TYPES.Byte, piexif.TYPES.Short, piexif.TYPES.Long, piexif.TYPES.SLong}

# EXIF 2.3 names used by other decoders for the same pixel-size tags
_ALIASES = {
	"PixelXDimension": "ExifImageWidth",
	"PixelYDimension": "ExifImageHeight",
}

_PIEXIF_IFDS = (("0th", "Image"), ("Exif", "Exif"))


def _is_piexif_input(data: bytes) -> bool:
	return (
		data[:2] == b"\xff\xd8"
		or data[:4] in (b"II*\x00", b"MM\x00*")
		or (data[:4] == b"RIFF" and data[8:12] == b"WEBP")
		or data[:6] == b"Exif\x00\x00"
	)


def _bytes_to_str(v: Any) -> Optional[str]:
	if isinstance(v, bytes):
		return v.decode("utf-8", errors="ignore").strip("\x00").strip()
	if isinstance(v, str):
		return v.strip("\x00").strip()
	return None


def _piexif_value(value: Any, type_: int) -> Optional[Any]:
	if type_ in _RATIONAL_TYPES:
		if isinstance(value, tuple) and value and isinstance(value[0], tuple):
			value = value[0]
		if isinstance(value, tuple) and len(value) == 2:
			return Rational(int(value[0]), int(value[1]))
		return None
	if type_ in _INTEGER_TYPES:
		if isinstance(value, tuple):
			return int(value[0]) if value else None
		return int(value)
	if type_ == piexif.TYPES.Ascii:
		return _bytes_to_str(value)
	return None


def _pillow_value(value: Any) -> Optional[Any]:
	if isinstance(value, tuple) and value:
		value = value[0]
	if isinstance(value, IFDRational):
		return Rational(int(value.numerator), int(value.denominator))
	if isinstance(value, (bytes, str)):
		return _bytes_to_str(value)
	if isinstance(value, (int, float)):
		return value
	return None


def _fraction_text(num: int, den: int) -> str:
	t = num / den
	if num > 0 and t < 0.25:
		return f"1/{round_half_up(den / num)}"
	return f"{t:g}"


def _describe(name: str, value: Any) -> Optional[str]:
	if not isinstance(value, Rational) or not value.den:
		return None
	try:
		x = value.num / value.den
		if name == "FNumber":
			return f"f/{round(x, 1):g}"
		if name == "ApertureValue":
			return f"f/{round(2.0 ** (x / 2.0), 1):g}"
		if name == "ExposureTime":
			return _fraction_text(value.num, value.den)
		if name == "ShutterSpeedValue":
			return f"1/{round_half_up(2.0 ** x)}"
	except OverflowError:
		return None
	return None


def _add(tags: RawTagCollection, name: str, value: Any) -> None:
	if value is None or value == "":
		return
	record = TagRecord(value=value, description=_describe(name, value))
	tags[name] = record
	alias = _ALIASES.get(name)
	if alias and alias not in tags:
		tags[alias] = record


def _decode_piexif(data: bytes) -> RawTagCollection:
	ex = piexif.load(data)
	tags: RawTagCollection = {}
	for ifd_name, table in _PIEXIF_IFDS:
		for tag_id, value in (ex.get(ifd_name) or {}).items():
			info = piexif.TAGS[table].get(tag_id)
			if info is None:
				continue
			_add(tags, info["name"], _piexif_value(value, info["type"]))
	return tags


def _decode_pillow(data: bytes) -> RawTagCollection:
	tags: RawTagCollection = {}
	with Image.open(io.BytesIO(data)) as img:
		exif = img.getexif()
		entries: Dict[int, Any] = dict(exif)
		entries.update(exif.get_ifd(EXIF_IFD_POINTER))
	for tag_id, value in entries.items():
		name = ExifTags.TAGS.get(tag_id)
		if name is None:
			continue
		_add(tags, name, _pillow_value(value))
	return tags


def image_size(data: bytes) -> Optional[Tuple[int, int]]:
	try:
		with Image.open(io.BytesIO(data)) as img:
			return img.size
	except Exception:
		return None


def decode_tags(data: bytes) -> DecodeResult:
	"""
	Decode the EXIF tags of an image held in memory.

	JPEG, TIFF and WebP go through piexif; other formats Pillow can open
	(PNG eXIf chunks, HEIF with a plugin) go through Pillow. Decoder
	failures are returned in the result rather than raised.
	"""
	size = image_size(data)
	try:
		if _is_piexif_input(data):
			tags = _decode_piexif(data)
		else:
			tags = _decode_pillow(data)
	except Exception as e:
		logger.warning("Could not decode metadata (%s): %s", type(e).__name__, e)
		return DecodeResult.failed(DecodeError(str(e) or type(e).__name__), size=size)
	logger.debug("Decoded tags: %s", sorted(tags))
	return DecodeResult.ok(tags, size=size)
