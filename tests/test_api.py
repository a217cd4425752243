import pytest
from fastapi.testclient import TestClient

from conftest import decode_rgba, make_quadrant_image, to_bytes
from photoshape.config import settings
from photoshape.main import create_app


@pytest.fixture
def client(storage_root):
    return TestClient(create_app())


def _upload(client, *, data=None, content=None, content_type="image/png", filename="photo.png"):
    form = {"session": "sess_abcd123", "x": "50", "y": "50", "zoom": "1", "shape": "circle"}
    if data:
        form.update(data)
    payload = content if content is not None else to_bytes(make_quadrant_image(300, 200))
    return client.post(
        "/api/v1/customizer/upload",
        data=form,
        files={"file": (filename, payload, content_type)},
    )


def test_health(client):
    res = client.get("/api/v1/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_upload_stores_original_and_shaped(client, storage_root):
    res = _upload(client, data={"shape": "Heart"})
    assert res.status_code == 201, res.text
    body = res.json()["data"]
    assert body["original_file_id"] == "customizer/sess_abcd123/original.png"
    assert body["shaped_file_id"] == "customizer/sess_abcd123/heart.png"
    assert (body["width"], body["height"]) == (500, 500)

    shaped = storage_root / "customizer" / "sess_abcd123" / "heart.png"
    assert shaped.is_file()
    assert (storage_root / "customizer" / "sess_abcd123" / "original.png").is_file()
    assert decode_rgba(shaped.read_bytes()).shape == (500, 500, 4)

    download = client.get(body["shaped_url"])
    assert download.status_code == 200
    assert download.content == shaped.read_bytes()


def test_upload_accepts_jpeg(client):
    content = to_bytes(make_quadrant_image(120, 90), "JPEG")
    res = _upload(client, content=content, content_type="image/jpeg", filename="photo.jpg")
    assert res.status_code == 201, res.text


def test_upload_requires_fields(client):
    res = client.post(
        "/api/v1/customizer/upload",
        data={"session": "s1", "x": "50"},
        files={"file": ("photo.png", to_bytes(make_quadrant_image(10, 10)), "image/png")},
    )
    assert res.status_code == 400
    assert res.json()["detail"] == "Missing required fields: x, y, zoom, shape"


def test_upload_requires_session(client):
    res = _upload(client, data={"session": "  "})
    assert res.status_code == 400
    assert res.json()["detail"] == "Session ID is required"


def test_upload_rejects_session_ids_with_path_characters(client, storage_root):
    assert _upload(client, data={"session": "alice_1", "shape": "heart"}).status_code == 201

    res = _upload(client, data={"session": "alice/1"})
    assert res.status_code == 400
    assert res.json()["detail"].startswith("Invalid session ID")

    cleanup = client.delete("/api/v1/customizer/cleanup/alice_1")
    assert cleanup.json()["files_deleted"] == 2
    assert not (storage_root / "customizer" / "alice_1" / "circle.png").exists()


def test_upload_rejects_unknown_shape(client):
    res = _upload(client, data={"shape": "star"})
    assert res.status_code == 400
    assert "circle, heart, rectangle" in res.json()["detail"]


def test_upload_rejects_non_numeric_zoom(client):
    res = _upload(client, data={"zoom": "big"})
    assert res.status_code == 400


def test_upload_rejects_wrong_content_type(client):
    res = _upload(client, content=b"GIF89a", content_type="image/gif", filename="a.gif")
    assert res.status_code == 400
    assert res.json()["detail"] == "Only PNG and JPG files are allowed"


def test_upload_rejects_undecodable_payload(client):
    res = _upload(client, content=b"definitely not a png")
    assert res.status_code == 400


def test_upload_rejects_oversized_file(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_bytes", 16)
    res = _upload(client)
    assert res.status_code == 413


def test_out_of_range_values_are_clamped_by_default(client):
    res = _upload(client, data={"x": "150", "zoom": "9"})
    assert res.status_code == 201, res.text


def test_strict_mode_rejects_out_of_range_values(client, monkeypatch):
    monkeypatch.setattr(settings, "strict_parameters", True)
    res = _upload(client, data={"zoom": "9"})
    assert res.status_code == 400
    assert "zoom" in res.json()["detail"]


def test_empty_visible_region_is_reported(client, monkeypatch):
    monkeypatch.setattr(settings, "canvas_width", 4)
    monkeypatch.setattr(settings, "canvas_height", 4)
    res = _upload(client, data={"zoom": "0.1"})
    assert res.status_code == 400
    assert "visible" in res.json()["detail"]


def test_cleanup_removes_session_folder(client, storage_root):
    assert _upload(client).status_code == 201
    res = client.delete("/api/v1/customizer/cleanup/sess_abcd123")
    assert res.status_code == 200
    assert res.json()["files_deleted"] == 2
    assert not (storage_root / "customizer" / "sess_abcd123").exists()

    again = client.delete("/api/v1/customizer/cleanup/sess_abcd123")
    assert again.json() == {"success": True, "message": "No files to delete", "files_deleted": 0}


def test_session_info(client):
    res = client.post("/api/v1/customizer/session/sess_xyz")
    assert res.status_code == 200
    assert res.json() == {"session_id": "sess_xyz", "folder_path": "customizer/sess_xyz"}


def test_download_missing_file(client):
    res = client.get("/api/v1/customizer/files/nobody/circle.png")
    assert res.status_code == 404
