from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from exposure_api.config import get_settings
from exposure_api.services.metadata import ExposureMetadata


def _session_path(session_id: str, base_dir: Optional[Path] = None) -> Path:
	base = base_dir if base_dir is not None else get_settings().sessions_dir
	return base / f"{session_id}.json"


def write_metadata(session_id: str, metadata: ExposureMetadata, base_dir: Optional[Path] = None) -> Path:
	path = _session_path(session_id, base_dir)
	path.parent.mkdir(parents=True, exist_ok=True)
	with path.open("w", encoding="utf-8") as f:
		json.dump(metadata.to_dict(), f, indent=2)
	return path


def read_metadata(session_id: str, base_dir: Optional[Path] = None) -> Optional[ExposureMetadata]:
	path = _session_path(session_id, base_dir)
	if not path.exists():
		return None
	with path.open("r", encoding="utf-8") as f:
		return ExposureMetadata.from_dict(json.load(f))
