from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, NamedTuple, Optional, Tuple, Union


class Rational(NamedTuple):
	num: int
	den: int


TagValue = Union[int, float, str, Rational]


@dataclass(frozen=True)
class TagRecord:
	value: Optional[TagValue] = None
	description: Optional[str] = None


RawTagCollection = Dict[str, TagRecord]


# Explicit cases a TagRecord is inspected through.

@dataclass(frozen=True)
class RationalValue:
	num: int
	den: int
	description: Optional[str] = None

	def as_float(self) -> Optional[float]:
		if not self.den:
			return None
		try:
			return self.num / self.den
		except (OverflowError, ZeroDivisionError):
			return None


@dataclass(frozen=True)
class ScalarValue:
	value: Union[int, float]
	description: Optional[str] = None


@dataclass(frozen=True)
class DescribedValue:
	text: Optional[str]


TagVariant = Union[RationalValue, ScalarValue, DescribedValue]


def classify(record: TagRecord) -> TagVariant:
	v = record.value
	if isinstance(v, tuple) and len(v) == 2 and all(isinstance(p, int) and not isinstance(p, bool) for p in v):
		return RationalValue(int(v[0]), int(v[1]), record.description)
	if isinstance(v, (int, float)) and not isinstance(v, bool):
		return ScalarValue(v, record.description)
	if isinstance(v, str):
		return DescribedValue(record.description if record.description else v)
	return DescribedValue(record.description)


def tags_from_mapping(raw: Dict[str, Dict]) -> RawTagCollection:
	"""
	Build a tag collection from plain ``{"Tag": {"value": ..., "description": ...}}``
	mappings. Two-element integer lists are read as rationals.
	"""
	out: RawTagCollection = {}
	for name, rec in raw.items():
		if not isinstance(rec, dict):
			continue
		value = rec.get("value")
		if isinstance(value, (list, tuple)) and len(value) == 2 and all(isinstance(p, int) and not isinstance(p, bool) for p in value):
			value = Rational(value[0], value[1])
		elif isinstance(value, (list, tuple)):
			value = value[0] if value else None
		out[name] = TagRecord(value=value, description=rec.get("description"))
	return out


class DecodeError(Exception):
	"""The metadata segment of an image could not be parsed."""


@dataclass(frozen=True)
class DecodeResult:
	tags: Optional[RawTagCollection] = None
	error: Optional[DecodeError] = None
	size: Optional[Tuple[int, int]] = None  # (width, height) as reported by the image itself

	@classmethod
	def ok(cls, tags: RawTagCollection, size: Optional[Tuple[int, int]] = None) -> "DecodeResult":
		return cls(tags=tags, size=size)

	@classmethod
	def failed(cls, error: DecodeError, size: Optional[Tuple[int, int]] = None) -> "DecodeResult":
		return cls(error=error, size=size)

	@property
	def succeeded(self) -> bool:
		return self.error is None and self.tags is not None
