import pytest
from fastapi.testclient import TestClient

from exposure_api.main import create_app


@pytest.fixture
def client(tmp_path, monkeypatch):
	monkeypatch.setenv("EXPOSURE_SESSIONS_DIR", str(tmp_path))
	return TestClient(create_app())


def _upload(client, data, **form):
	return client.post("/exposure/metadata", files={"file": ("IMG_0001.JPG", data, "image/jpeg")}, data=form)


def test_upload_and_convert(client, camera_jpeg):
	r = _upload(client, camera_jpeg)
	assert r.status_code == 200
	body = r.json()
	assert body["session_id"].startswith("img_0001_")
	assert body["metadata"]["camera"] == {"exposureTime": "1/100", "fNumber": 2.8, "iso": 100}
	assert body["metadata"]["device"]["make"] == "Canon"

	r = client.post(f"/exposure/convert/{body['session_id']}", data={"f_number": "1.4", "exposure_time": "1/100", "iso": "100"})
	assert r.status_code == 200
	result = r.json()
	assert result["factor"] == pytest.approx(0.25)
	assert result["stops"] == -2.0
	assert result["target"] == {"fNumber": "1.4", "exposureTime": "1/100", "iso": "100"}


def test_named_session(client, camera_jpeg):
	r = _upload(client, camera_jpeg, session="Kitchen Shot")
	assert r.json()["session_id"] == "kitchen-shot"
	r = client.get("/exposure/metadata/kitchen-shot")
	assert r.status_code == 200
	assert r.json()["metadata"]["camera"]["iso"] == 100


def test_unknown_session_metadata(client):
	assert client.get("/exposure/metadata/unknown").status_code == 404


def test_convert_without_metadata(client):
	r = client.post("/exposure/convert/unknown", data={"f_number": "2.8", "exposure_time": "1/100", "iso": "100"})
	assert r.status_code == 409
	assert r.json()["detail"]["reason"] == "no_metadata"


def test_convert_with_incomplete_metadata(client, no_iso_jpeg):
	session_id = _upload(client, no_iso_jpeg).json()["session_id"]
	r = client.post(f"/exposure/convert/{session_id}", data={"f_number": "2.8", "exposure_time": "1/100", "iso": "100"})
	assert r.status_code == 422
	detail = r.json()["detail"]
	assert detail["reason"] == "incomplete"
	assert detail["missing"] == ["iso"]


def test_corrupt_upload_falls_back(client):
	r = _upload(client, b"not an image", capture_width="1280", capture_height="720")
	assert r.status_code == 200
	md = r.json()["metadata"]
	assert md["image"]["width"] == 1280
	assert md["image"]["height"] == 720
	assert md["camera"] == {"exposureTime": None, "fNumber": None, "iso": None}


def test_normalize_decoded_tags(client):
	tags = {
		"ApertureValue": {"value": [5, 1], "description": "5.00"},
		"ShutterSpeedValue": {"value": [7, 1]},
		"PhotographicSensitivity": {"value": 800},
	}
	r = client.post("/exposure/metadata/tags", params={"session": "decoded"}, json=tags)
	assert r.status_code == 200
	assert r.json()["metadata"]["camera"] == {"exposureTime": "1/128", "fNumber": 5.7, "iso": 800}


def test_factor_endpoint(client):
	form = {
		"source_f_number": "2.8", "source_exposure_time": "1/100", "source_iso": "200",
		"target_f_number": "2.8", "target_exposure_time": "1/100", "target_iso": "100",
	}
	r = client.post("/exposure/factor", data=form)
	assert r.status_code == 200
	assert r.json()["factor"] == 2.0
	assert r.json()["stops"] == 1.0


def test_factor_endpoint_non_finite(client):
	form = {
		"source_f_number": "2.8", "source_exposure_time": "1/100", "source_iso": "100",
		"target_f_number": "2.8", "target_exposure_time": "1/100", "target_iso": "0",
	}
	r = client.post("/exposure/factor", data=form)
	assert r.status_code == 200
	assert r.json()["factor"] is None
	assert r.json()["stops"] is None


def test_cameras(client):
	r = client.get("/exposure/cameras")
	assert r.status_code == 200
	assert len(r.json()["cameras"]) > 0


def test_cameras_unavailable(client, tmp_path, monkeypatch):
	monkeypatch.setenv("EXPOSURE_CAMERA_REGISTER", str(tmp_path / "missing.json"))
	assert client.get("/exposure/cameras").status_code == 503


def test_normalize_oversized_rational(client):
	r = client.post("/exposure/metadata/tags", json={"FNumber": {"value": [10 ** 400, 1]}, "ISOSpeedRatings": {"value": 100}})
	assert r.status_code == 200
	assert r.json()["metadata"]["camera"]["fNumber"] is None
