from __future__ import annotations

import math
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, File, Form, HTTPException, UploadFile

from exposure_api.config import get_settings
from exposure_api.services.conversion import ExposureConverter, ExposureTriple, MissingMetadata, convert
from exposure_api.services.metadata_store import read_metadata, write_metadata
from exposure_api.services.presets import load_cameras
from exposure_api.services.tags import tags_from_mapping


router = APIRouter(prefix="/exposure", tags=["exposure"])


def _slugify(text: str) -> str:
	return "".join(ch if (ch.isalnum() or ch in ("-", "_")) else "-" for ch in text).strip("-_").lower()


def _new_session_id(filename: Optional[str]) -> str:
	stem = _slugify(Path(filename).stem) if filename else ""
	return f"{stem or 'photo'}_{uuid.uuid4().hex[:8]}"


def _json_safe(value: Any) -> Any:
	# inf/nan are not valid JSON
	if isinstance(value, float) and not math.isfinite(value):
		return None
	if isinstance(value, dict):
		return {k: _json_safe(v) for k, v in value.items()}
	if isinstance(value, (list, tuple)):
		return [_json_safe(v) for v in value]
	return value


def _missing_metadata_error(e: MissingMetadata) -> HTTPException:
	status = 409 if e.reason == MissingMetadata.NO_METADATA else 422
	return HTTPException(status_code=status, detail={"reason": e.reason, "missing": e.missing, "message": str(e)})


@router.post("/metadata", summary="Upload a photo and extract its exposure metadata")
async def extract(
	file: UploadFile = File(...),
	session: str = Form(""),
	capture_width: int = Form(0),
	capture_height: int = Form(0),
):
	data = await file.read()
	session_id = _slugify(session) or _new_session_id(file.filename)
	fallback_size = (capture_width, capture_height) if capture_width > 0 and capture_height > 0 else None
	converter = ExposureConverter()
	metadata = converter.extract_metadata(data, fallback_size=fallback_size)
	write_metadata(session_id, metadata)
	return _json_safe({"session_id": session_id, "metadata": metadata.to_dict()})


@router.post("/metadata/tags", summary="Normalize an already decoded tag collection")
def normalize_tags(tags: Dict[str, Any] = Body(...), session: str = ""):
	session_id = _slugify(session) or _new_session_id(None)
	converter = ExposureConverter()
	metadata = converter.normalize(tags_from_mapping(tags))
	write_metadata(session_id, metadata)
	return _json_safe({"session_id": session_id, "metadata": metadata.to_dict()})


@router.get("/metadata/{session_id}", summary="Get stored metadata for a session")
def stored_metadata(session_id: str):
	metadata = read_metadata(_slugify(session_id))
	if metadata is None:
		raise HTTPException(status_code=404, detail=f"No metadata for session {session_id}")
	return _json_safe({"session_id": session_id, "metadata": metadata.to_dict()})


@router.post("/convert/{session_id}", summary="Convert stored metadata to target settings")
def convert_from_session(
	session_id: str,
	f_number: str = Form(...),
	exposure_time: str = Form(...),
	iso: str = Form(...),
):
	converter = ExposureConverter(read_metadata(_slugify(session_id)))
	try:
		result = converter.convert_from_metadata(f_number, exposure_time, iso)
	except MissingMetadata as e:
		raise _missing_metadata_error(e) from e
	return _json_safe(result.to_dict())


@router.post("/factor", summary="Convert between two explicit exposure triples")
def factor(
	source_f_number: str = Form(...),
	source_exposure_time: str = Form(...),
	source_iso: str = Form(...),
	target_f_number: str = Form(...),
	target_exposure_time: str = Form(...),
	target_iso: str = Form(...),
):
	result = convert(
		ExposureTriple(source_f_number, source_exposure_time, source_iso),
		ExposureTriple(target_f_number, target_exposure_time, target_iso),
	)
	return _json_safe(result.to_dict())


@router.get("/cameras", summary="List camera and lens presets")
def cameras():
	path = get_settings().camera_register
	try:
		items = load_cameras(path)
	except (OSError, ValueError) as e:
		raise HTTPException(status_code=503, detail=f"Camera register unavailable: {e}") from e
	return {"cameras": [c.to_dict() for c in items]}
