"""
Tests for the HTTP API.
"""

import io
import json

import pytest
from fastapi.testclient import TestClient
from PIL import Image

from backend.main import app
from backend.api import sessions


@pytest.fixture
def client():
    sessions.reset_workspace()
    yield TestClient(app)
    sessions.reset_workspace()


def upload(client, data, name="photo.png", content_type="image/png"):
    return client.post("/api/sessions", files={"file": (name, data, content_type)})


class TestSessionEndpoints:
    """Tests for the sessions router."""

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"

    def test_upload_creates_default_shape(self, client, png_bytes):
        response = upload(client, png_bytes)

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "annotated"
        assert body["image_name"] == "photo.png"
        assert body["dimensions"] == {"width": 600.0, "height": 400.0}
        assert len(body["points"]) == 16
        assert "Default circle annotation" in body["message"]

    def test_third_upload_refused(self, client, png_bytes):
        upload(client, png_bytes, "a.png")
        upload(client, png_bytes, "b.png")

        response = upload(client, png_bytes, "c.png")

        assert response.status_code == 409
        assert response.json()["detail"] == "Maximum 2 images allowed!"
        assert [s["image_name"] for s in client.get("/api/sessions").json()] == ["a.png", "b.png"]

    def test_undecodable_upload_stays_loading(self, client):
        response = upload(client, b"not an image", "bad.png")

        assert response.status_code == 201
        body = response.json()
        assert body["state"] == "loading"
        assert body["points"] == []

        sid = body["id"]
        assert client.post(f"/api/sessions/{sid}/reset").status_code == 409
        assert client.get(f"/api/export/{sid}/image").status_code == 400

    def test_drag(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        body = client.put(f"/api/sessions/{sid}/points/3", json={"x": 12.5, "y": -4}).json()

        assert body["points"][3] == {"x": 12.5, "y": -4.0}
        assert body["state"] == "editing"

        body = client.put(
            f"/api/sessions/{sid}/points/3", json={"x": 13, "y": -4, "final": True}
        ).json()
        assert body["state"] == "annotated"

    @pytest.mark.parametrize("body", [
        b'{"x": NaN, "y": 1}',
        b'{"x": 1, "y": Infinity}',
        b'{"x": -Infinity, "y": 1, "final": true}',
    ])
    def test_drag_rejects_non_finite_coordinates(self, client, png_bytes, body):
        created = upload(client, png_bytes).json()
        sid = created["id"]

        response = client.put(
            f"/api/sessions/{sid}/points/0", content=body,
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 422
        assert client.get(f"/api/sessions/{sid}").json()["points"] == created["points"]

    def test_drag_out_of_range_is_noop(self, client, png_bytes):
        created = upload(client, png_bytes).json()

        response = client.put(f"/api/sessions/{created['id']}/points/99", json={"x": 1, "y": 1})

        assert response.status_code == 200
        assert response.json()["points"] == created["points"]

    def test_insert(self, client, png_bytes):
        created = upload(client, png_bytes).json()
        a, b = created["points"][0], created["points"][1]
        click = {"x": (a["x"] + b["x"]) / 2, "y": (a["y"] + b["y"]) / 2}

        body = client.post(f"/api/sessions/{created['id']}/insert", json=click).json()

        assert body["inserted"]
        assert body["edge_index"] == 0
        assert len(body["session"]["points"]) == 17
        assert body["session"]["message"] == "New node added! Total 17 nodes"

    def test_insert_miss(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        body = client.post(f"/api/sessions/{sid}/insert", json={"x": 300, "y": 200}).json()

        assert not body["inserted"]
        assert len(body["session"]["points"]) == 16

    def test_insert_rejects_non_finite_click(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        response = client.post(
            f"/api/sessions/{sid}/insert", content=b'{"x": NaN, "y": NaN}',
            headers={"content-type": "application/json"},
        )

        assert response.status_code == 422
        assert len(client.get(f"/api/sessions/{sid}").json()["points"]) == 16

    def test_reset(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]
        client.put(f"/api/sessions/{sid}/points/0", json={"x": 0, "y": 0})
        client.put(f"/api/sessions/{sid}/selection", json={"index": 2})

        body = client.post(f"/api/sessions/{sid}/reset").json()

        assert body["points"][0] == {"x": 440.0, "y": 200.0}
        assert body["selected_index"] is None

    def test_selection(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        assert client.put(f"/api/sessions/{sid}/selection", json={"index": 5}).json()["selected_index"] == 5
        assert client.put(f"/api/sessions/{sid}/selection", json={"index": 50}).status_code == 404
        assert client.delete(f"/api/sessions/{sid}/selection").json()["selected_index"] is None

    def test_snapshot(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        body = client.get(f"/api/sessions/{sid}/snapshot").json()

        assert set(body) == {"imageName", "points", "dimensions"}
        assert body["imageName"] == "photo.png"

    def test_original_image(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        response = client.get(f"/api/sessions/{sid}/image")

        assert response.content == png_bytes
        assert response.headers["content-type"] == "image/png"

    def test_save(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        body = client.post(f"/api/sessions/{sid}/save").json()

        assert body["image"] == "photo.png"
        assert len(body["points"]) == 16

    def test_delete(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]

        assert client.delete(f"/api/sessions/{sid}").json()["status"] == "deleted"
        assert client.get(f"/api/sessions/{sid}").status_code == 404
        assert client.get("/api/sessions").json() == []


class TestExportEndpoints:
    """Tests for the export router."""

    def test_export_json(self, client, png_bytes, make_image_bytes):
        upload(client, png_bytes, "a.png")
        upload(client, make_image_bytes(400, 400, 'green', 'JPEG'), "b.jpg", "image/jpeg")

        response = client.get("/api/export/json")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert "annotations-" in response.headers["content-disposition"]
        data = json.loads(response.content)
        assert [d["imageName"] for d in data] == ["a.png", "b.jpg"]
        assert data[1]["imageData"].startswith("data:image/jpeg;base64,")

    def test_export_json_is_strict_json(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]
        client.put(
            f"/api/sessions/{sid}/points/0", content=b'{"x": NaN, "y": 1}',
            headers={"content-type": "application/json"},
        )

        response = client.get("/api/export/json")

        def reject(token):
            raise AssertionError(f"non-standard JSON token {token}")

        assert response.status_code == 200
        data = json.loads(response.content, parse_constant=reject)
        assert data[0]["annotations"]["points"][0] == {"x": 440.0, "y": 200.0}

    def test_export_json_empty(self, client):
        response = client.get("/api/export/json")

        assert response.status_code == 400
        assert response.json()["detail"] == "No images to export!"

    def test_export_image(self, client, png_bytes):
        sid = upload(client, png_bytes, "holiday photo.png").json()["id"]

        response = client.get(f"/api/export/{sid}/image")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert "holiday%20photo_annotated.png" in response.headers["content-disposition"]
        assert Image.open(io.BytesIO(response.content)).size == (600, 400)

    def test_export_unknown_session(self, client):
        assert client.get("/api/export/nope/image").status_code == 404

    def test_validate(self, client, png_bytes):
        sid = upload(client, png_bytes).json()["id"]
        client.put(f"/api/sessions/{sid}/points/0", json={"x": 700, "y": 10})

        body = client.get("/api/export/validate").json()

        assert body["total_sessions"] == 1
        assert body["is_valid"]
        assert [w["code"] for w in body["warnings"]] == ["POLYGON_POINT_OUT_OF_BOUNDS"]
