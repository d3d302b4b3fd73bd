from __future__ import annotations

import math
import re
from typing import Any, Union

_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")


def parse_float(value: Any) -> float:
	"""
	Parse the leading decimal number of a value, like a lenient ``float()``.
	"250s" gives 250.0, "2.8" gives 2.8; anything without a numeric prefix is NaN.
	"""
	if isinstance(value, bool):
		return math.nan
	if isinstance(value, (int, float)):
		return float(value)
	if not isinstance(value, str):
		return math.nan
	m = _FLOAT_PREFIX.match(value)
	if m is None:
		return math.nan
	return float(m.group(1))


def parse_int(value: Any) -> Union[int, float]:
	"""
	Parse the leading integer of a value; numbers are truncated toward zero.
	Returns NaN when there is no integer prefix.
	"""
	if isinstance(value, bool):
		return math.nan
	if isinstance(value, float):
		if not math.isfinite(value):
			return math.nan
		return int(value)
	if isinstance(value, int):
		return value
	if not isinstance(value, str):
		return math.nan
	m = _INT_PREFIX.match(value)
	if m is None:
		return math.nan
	return int(m.group(1))


def round_half_up(x: float) -> int:
	# ties go up (0.5 -> 1, -0.5 -> 0)
	return int(math.floor(x + 0.5))
