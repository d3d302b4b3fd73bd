from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

DEFAULT_CAMERA_REGISTER = Path(__file__).resolve().parent / "data" / "CameraRegister.json"


def _split(value: str) -> List[str]:
	return [v.strip() for v in value.split(",") if v.strip()]


@dataclass
class Settings:
	sessions_dir: Path = Path("sessions")
	camera_register: Path = DEFAULT_CAMERA_REGISTER
	log_level: str = "INFO"
	cors_origins: List[str] = field(default_factory=lambda: ["*"])


def get_settings() -> Settings:
	"""Settings from EXPOSURE_* environment variables, read on every call."""
	return Settings(
		sessions_dir=Path(os.environ.get("EXPOSURE_SESSIONS_DIR", "sessions")),
		camera_register=Path(os.environ.get("EXPOSURE_CAMERA_REGISTER", str(DEFAULT_CAMERA_REGISTER))),
		log_level=os.environ.get("EXPOSURE_LOG_LEVEL", "INFO").upper(),
		cors_origins=_split(os.environ.get("EXPOSURE_CORS_ORIGINS", "*")) or ["*"],
	)
