"""Tests for normalized error responses."""

from fastapi.testclient import TestClient

from glyph.main import app


def test_validation_error_has_standard_shape():
    client = TestClient(app)
    resp = client.post(
        "/v1/glyphs",
        json={"latitude": 95, "longitude": 0, "text": "off the map"},
    )
    assert resp.status_code == 400
    body = resp.json()
    rid = resp.headers.get("x-request-id")
    assert body["error"]["code"] == "validation_error"
    assert body["error"]["request_id"] == rid
    assert body["detail"] == body["error"]["message"]


def test_permission_error_normalized():
    client = TestClient(app)
    create_resp = client.post(
        "/v1/glyphs",
        headers={"X-User-Id": "owner"},
        json={"latitude": 40.7, "longitude": -74.0, "text": "mine", "category": "Secret"},
    )
    glyph_id = create_resp.json()["data"]["id"]

    delete_resp = client.delete(f"/v1/glyphs/{glyph_id}", headers={"X-User-Id": "other"})
    assert delete_resp.status_code == 403
    body = delete_resp.json()
    assert body["error"]["code"] == "forbidden"
    assert body["error"]["request_id"] == delete_resp.headers.get("x-request-id")


def test_out_of_range_rating_is_validation_error():
    client = TestClient(app)
    glyph_id = client.post(
        "/v1/glyphs",
        json={"latitude": 40.7, "longitude": -74.0, "text": "rate me"},
    ).json()["data"]["id"]

    resp = client.post(f"/v1/glyphs/{glyph_id}/ratings", headers={"X-User-Id": "u1"}, json={"rating": 6})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "validation_error"


def test_incoming_request_id_is_echoed():
    client = TestClient(app)
    resp = client.get("/v1/glyphs/missing", headers={"x-request-id": "trace-123"})
    assert resp.status_code == 404
    assert resp.headers["x-request-id"] == "trace-123"
    assert resp.json()["error"]["request_id"] == "trace-123"
