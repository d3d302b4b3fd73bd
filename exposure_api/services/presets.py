from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from exposure_api.services.conversion import ExposureTriple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Lens:
	name: str
	f_number: Optional[Any] = None
	exposure_time: Optional[Any] = None
	iso: Optional[Any] = None

	def target_triple(self) -> Optional[ExposureTriple]:
		if self.f_number is None or self.exposure_time is None or self.iso is None:
			return None
		return ExposureTriple(self.f_number, self.exposure_time, self.iso)

	def to_dict(self) -> Dict[str, Any]:
		return {"name": self.name, "fNumber": self.f_number, "exposureTime": self.exposure_time, "iso": self.iso}


@dataclass(frozen=True)
class Camera:
	id: str
	name: str
	lenses: List[Lens] = field(default_factory=list)

	def to_dict(self) -> Dict[str, Any]:
		return {"id": self.id, "name": self.name, "lenses": [l.to_dict() for l in self.lenses]}


def _lens_from_dict(d: Any) -> Lens:
	if isinstance(d, str):
		return Lens(name=d)
	return Lens(
		name=str(d.get("name", "")),
		f_number=d.get("fNumber"),
		exposure_time=d.get("exposureTime"),
		iso=d.get("iso"),
	)


def load_cameras(path: Path) -> List[Camera]:
	"""
	Read the camera register JSON ({"cameras": [...]}).
	OSError for an unreadable file, ValueError for malformed JSON.
	"""
	with Path(path).open("r", encoding="utf-8") as f:
		data = json.load(f)
	cameras = []
	for c in data.get("cameras") or []:
		cameras.append(Camera(
			id=str(c.get("id", "")),
			name=str(c.get("name", "")),
			lenses=[_lens_from_dict(l) for l in c.get("lenses") or []],
		))
	logger.info("Loaded %d cameras from %s", len(cameras), path)
	return cameras


class CameraRegister:
	def __init__(self, cameras: List[Camera]):
		self.cameras = list(cameras)
		self.selected_camera: Optional[Camera] = self.cameras[0] if self.cameras else None
		self.selected_lens: Optional[Lens] = None

	@classmethod
	def from_file(cls, path: Path) -> "CameraRegister":
		return cls(load_cameras(path))

	def select_camera(self, index: int) -> Optional[Camera]:
		if 0 <= index < len(self.cameras):
			self.selected_camera = self.cameras[index]
			return self.selected_camera
		return None

	def select_lens(self, index: int) -> Optional[Lens]:
		if self.selected_camera is not None and 0 <= index < len(self.selected_camera.lenses):
			self.selected_lens = self.selected_camera.lenses[index]
			return self.selected_lens
		self.selected_lens = None
		return None
