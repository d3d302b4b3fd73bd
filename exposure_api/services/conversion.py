from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional, Tuple, Union

import numpy as np

from exposure_api.services.metadata import ExposureMetadata, metadata_from_decode, normalize
from exposure_api.services.numeric import parse_float, parse_int
from exposure_api.services.tag_decoder import decode_tags
from exposure_api.services.tags import RawTagCollection

logger = logging.getLogger(__name__)

ByteSource = Union[str, Path, bytes, BinaryIO]


class MissingMetadata(RuntimeError):
	"""
	A conversion needed source exposure settings that are not available.

	``reason`` is "no_metadata" when nothing has been extracted yet and
	"incomplete" when metadata exists but lacks fields listed in ``missing``.
	"""

	NO_METADATA = "no_metadata"
	INCOMPLETE = "incomplete"

	def __init__(self, reason: str, missing: Optional[List[str]] = None):
		self.reason = reason
		self.missing = list(missing or [])
		if reason == self.NO_METADATA:
			message = "No metadata available. Extract metadata from a photo first."
		else:
			message = "Incomplete camera metadata. Missing: " + ", ".join(self.missing) + "."
		super().__init__(message)


@dataclass(frozen=True)
class ExposureTriple:
	f_number: Any
	exposure_time: Any
	iso: Any

	def to_dict(self) -> Dict[str, Any]:
		return {"fNumber": self.f_number, "exposureTime": self.exposure_time, "iso": self.iso}


@dataclass(frozen=True)
class ConversionResult:
	factor: float
	stops: float
	original: ExposureTriple
	target: ExposureTriple

	def to_dict(self) -> Dict[str, Any]:
		return {
			"factor": self.factor,
			"stops": self.stops,
			"original": self.original.to_dict(),
			"target": self.target.to_dict(),
		}


def parse_exposure_time(value: Any) -> float:
	"""
	Exposure time in seconds from a number, "n/d" or a plain decimal string.
	Input that does not parse gives 0; a zero denominator gives inf (or nan).
	"""
	if isinstance(value, bool):
		return 0
	if isinstance(value, (int, float)):
		return value
	if not isinstance(value, str):
		return 0
	if "/" in value:
		num_s, _, den_s = value.partition("/")
		num = parse_float(num_s)
		den = parse_float(den_s)
		if math.isnan(num) or math.isnan(den):
			return 0
		# "1/0" is inf and "0/0" is nan, as for any float division
		with np.errstate(divide="ignore", invalid="ignore"):
			return float(np.float64(num) / np.float64(den))
	seconds = parse_float(value)
	return 0 if math.isnan(seconds) else seconds


def parse_f_number(value: Any) -> float:
	# descriptions look like "f/2.8"
	if isinstance(value, str) and value.strip().lower().startswith("f/"):
		value = value.strip()[2:]
	return parse_float(value)


def compute_factor(f_number1: Any, f_number2: Any, exposure_time1: Any, exposure_time2: Any, iso1: Any, iso2: Any) -> float:
	"""
	Ratio of light captured with the first settings to light captured with
	the second. Time and ISO terms are source over target; the aperture term
	is target over source (f_number2² / f_number1²) because the light a lens
	passes goes with 1/N². Zero or unparsable targets give inf/nan, never an
	exception.
	"""
	f1 = np.float64(parse_f_number(f_number1))
	f2 = np.float64(parse_f_number(f_number2))
	t1 = np.float64(parse_exposure_time(exposure_time1))
	t2 = np.float64(parse_exposure_time(exposure_time2))
	i1 = np.float64(parse_int(iso1))
	i2 = np.float64(parse_int(iso2))
	with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
		# light through the lens goes with 1/N^2
		factor = (f2 ** 2 / f1 ** 2) * (t1 / t2) * (i1 / i2)
	if not np.isfinite(factor):
		logger.warning("Non-finite conversion factor %s for f/%s %s ISO %s -> f/%s %s ISO %s",
			factor, f_number1, exposure_time1, iso1, f_number2, exposure_time2, iso2)
	return float(factor)


def compute_stops(factor: float) -> float:
	with np.errstate(divide="ignore", invalid="ignore"):
		stops = float(np.log2(np.float64(factor)))
	if not math.isfinite(stops):
		return stops
	return round(stops, 2)


def convert(original: ExposureTriple, target: ExposureTriple) -> ConversionResult:
	factor = compute_factor(
		original.f_number,
		target.f_number,
		original.exposure_time,
		target.exposure_time,
		original.iso,
		target.iso,
	)
	return ConversionResult(factor=factor, stops=compute_stops(factor), original=original, target=target)


def _is_missing(value: Any) -> bool:
	return value is None or value == "" or value == 0


def _read_all(source: ByteSource) -> bytes:
	if isinstance(source, bytes):
		return source
	if isinstance(source, (str, Path)):
		with open(source, "rb") as f:
			return f.read()
	return source.read()


class ExposureConverter:
	"""
	Holds the most recently extracted metadata and converts it to target
	settings. Not meant to be shared between concurrent extractions.
	"""

	def __init__(self, metadata: Optional[ExposureMetadata] = None):
		self.metadata = metadata

	def normalize(self, tags: RawTagCollection) -> ExposureMetadata:
		self.metadata = normalize(tags)
		return self.metadata

	def extract_metadata(self, source: ByteSource, fallback_size: Optional[Tuple[int, int]] = None) -> ExposureMetadata:
		# read errors propagate unchanged
		data = _read_all(source)
		self.metadata = metadata_from_decode(decode_tags(data), fallback_size=fallback_size)
		return self.metadata

	def source_triple(self) -> ExposureTriple:
		if self.metadata is None or self.metadata.camera is None:
			raise MissingMetadata(MissingMetadata.NO_METADATA)
		camera = self.metadata.camera
		missing = [
			name for name, value in (
				("fNumber", camera.f_number),
				("exposureTime", camera.exposure_time),
				("iso", camera.iso),
			) if _is_missing(value)
		]
		if missing:
			raise MissingMetadata(MissingMetadata.INCOMPLETE, missing)
		return ExposureTriple(camera.f_number, camera.exposure_time, camera.iso)

	def convert_from_metadata(self, target_f_number: Any, target_exposure_time: Any, target_iso: Any) -> ConversionResult:
		return convert(self.source_triple(), ExposureTriple(target_f_number, target_exposure_time, target_iso))
