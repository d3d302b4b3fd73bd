from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional, Tuple, Union

from exposure_api.services.numeric import round_half_up
from exposure_api.services.tags import (
	DecodeResult,
	RationalValue,
	RawTagCollection,
	ScalarValue,
	classify,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]
Resolver = Callable[[RawTagCollection], Optional[Any]]


def _now_iso() -> str:
	return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class DeviceInfo:
	make: Optional[str] = None
	model: Optional[str] = None
	software: Optional[str] = None


@dataclass(frozen=True)
class ImageInfo:
	width: Optional[int] = None
	height: Optional[int] = None
	orientation: Optional[int] = None
	created: str = field(default_factory=_now_iso)


@dataclass(frozen=True)
class CameraSettings:
	exposure_time: Optional[Union[Number, str]] = None
	f_number: Optional[Union[Number, str]] = None
	iso: Optional[Union[Number, str]] = None


@dataclass(frozen=True)
class ExposureMetadata:
	device: DeviceInfo = field(default_factory=DeviceInfo)
	image: ImageInfo = field(default_factory=ImageInfo)
	camera: CameraSettings = field(default_factory=CameraSettings)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"device": {
				"make": self.device.make,
				"model": self.device.model,
				"software": self.device.software,
			},
			"image": {
				"width": self.image.width,
				"height": self.image.height,
				"orientation": self.image.orientation,
				"created": self.image.created,
			},
			"camera": {
				"exposureTime": self.camera.exposure_time,
				"fNumber": self.camera.f_number,
				"iso": self.camera.iso,
			},
		}

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "ExposureMetadata":
		device = data.get("device") or {}
		image = data.get("image") or {}
		camera = data.get("camera") or {}
		return cls(
			device=DeviceInfo(device.get("make"), device.get("model"), device.get("software")),
			image=ImageInfo(
				width=image.get("width"),
				height=image.get("height"),
				orientation=image.get("orientation"),
				created=image.get("created") or _now_iso(),
			),
			camera=CameraSettings(
				exposure_time=camera.get("exposureTime"),
				f_number=camera.get("fNumber"),
				iso=camera.get("iso"),
			),
		)


def first_of(*resolvers: Resolver) -> Resolver:
	"""Combine resolvers; the first one returning something other than None wins."""
	def resolve(tags: RawTagCollection) -> Optional[Any]:
		for r in resolvers:
			value = r(tags)
			if value is not None:
				return value
		return None
	return resolve


def get_value(tags: RawTagCollection, name: str) -> Optional[Any]:
	rec = tags.get(name)
	if rec is not None and rec.value:
		return rec.value
	return None


def tag_value(name: str) -> Resolver:
	return lambda tags: get_value(tags, name)


def raw_value(name: str) -> Resolver:
	def resolve(tags: RawTagCollection) -> Optional[Any]:
		rec = tags.get(name)
		return rec.value if rec is not None else None
	return resolve


def _apex_to_fnumber(apex: float) -> Optional[float]:
	# APEX Av = 2 * log2(N)
	try:
		return round(2.0 ** (apex / 2.0), 1)
	except OverflowError:
		return None


def _apex_to_shutter(apex: float) -> Optional[str]:
	# APEX Tv = -log2(t), so t = 1 / 2**Tv
	try:
		return f"1/{round_half_up(2.0 ** apex)}"
	except OverflowError:
		return None


def _fnumber_from_fnumber(tags: RawTagCollection) -> Optional[Any]:
	rec = tags.get("FNumber")
	if rec is None:
		return None
	v = classify(rec)
	if isinstance(v, RationalValue):
		return v.as_float()
	if isinstance(v, ScalarValue):
		return v.description or v.value
	return v.text


def _fnumber_from_aperture_value(tags: RawTagCollection) -> Optional[Any]:
	rec = tags.get("ApertureValue")
	if rec is None:
		return None
	logger.debug("FNumber missing, using ApertureValue: %r", rec)
	v = classify(rec)
	if isinstance(v, RationalValue):
		apex = v.as_float()
		return _apex_to_fnumber(apex) if apex is not None else None
	if isinstance(v, ScalarValue):
		return v.description
	return v.text


def _exposure_from_exposure_time(tags: RawTagCollection) -> Optional[Any]:
	rec = tags.get("ExposureTime")
	if rec is None:
		return None
	if isinstance(rec.description, str) and rec.description:
		return rec.description
	v = classify(rec)
	if isinstance(v, RationalValue):
		return f"{v.num}/{v.den}"
	if isinstance(v, ScalarValue):
		return v.value
	return v.text


def _exposure_from_shutter_speed(tags: RawTagCollection) -> Optional[Any]:
	rec = tags.get("ShutterSpeedValue")
	if rec is None:
		return None
	logger.debug("ExposureTime missing, using ShutterSpeedValue: %r", rec)
	v = classify(rec)
	if isinstance(v, RationalValue):
		apex = v.as_float()
		return _apex_to_shutter(apex) if apex is not None else None
	if isinstance(v, ScalarValue):
		return v.description
	return v.text


resolve_f_number = first_of(_fnumber_from_fnumber, _fnumber_from_aperture_value)
resolve_exposure_time = first_of(_exposure_from_exposure_time, _exposure_from_shutter_speed)
resolve_iso = first_of(raw_value("ISOSpeedRatings"), raw_value("PhotographicSensitivity"))
resolve_width = first_of(tag_value("ImageWidth"), tag_value("ExifImageWidth"))
resolve_height = first_of(tag_value("ImageHeight"), tag_value("ExifImageHeight"))
resolve_created = first_of(tag_value("DateTimeOriginal"), lambda tags: _now_iso())


def normalize(tags: RawTagCollection) -> ExposureMetadata:
	"""
	Turn a raw tag collection into canonical exposure metadata.

	Never raises: missing or malformed fields come back as None, and the
	creation time falls back to the current instant.
	"""
	tags = tags or {}
	logger.debug("Normalizing %d tags: %s", len(tags), sorted(tags))
	return ExposureMetadata(
		device=DeviceInfo(
			make=get_value(tags, "Make"),
			model=get_value(tags, "Model"),
			software=get_value(tags, "Software"),
		),
		image=ImageInfo(
			width=resolve_width(tags),
			height=resolve_height(tags),
			orientation=get_value(tags, "Orientation"),
			created=resolve_created(tags),
		),
		camera=CameraSettings(
			exposure_time=resolve_exposure_time(tags),
			f_number=resolve_f_number(tags),
			iso=resolve_iso(tags),
		),
	)


def metadata_from_decode(result: DecodeResult, fallback_size: Optional[Tuple[int, int]] = None) -> ExposureMetadata:
	"""
	Normalize a decode result. A failed decode still yields well-formed
	metadata: no device, no camera settings, the capture size (or 0x0)
	and the current time.
	"""
	if result.succeeded:
		return normalize(result.tags)
	logger.warning("Metadata decode failed, using defaults: %s", result.error)
	width, height = fallback_size or result.size or (0, 0)
	return ExposureMetadata(
		device=DeviceInfo(),
		image=ImageInfo(width=width, height=height, orientation=None, created=_now_iso()),
		camera=CameraSettings(),
	)
