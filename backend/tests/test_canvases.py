"""Test Canvases API 저장/조회/삭제 동작과 회귀 시나리오를 검증하는 자동화 테스트입니다."""

import hashlib
import json

from canvasbook.config import settings
from canvasbook.models.canvas import CanvasDocument
from tests.conftest import data_url

PNG_PAYLOAD = "iVBORw0KGgo="


def _canvas(*payloads):
    return {"pages": [{"shapes": [{"type": "image", "src": data_url(p)} for p in payloads]}]}


def test_save_canvas_stores_images_and_returns_references(client, storage_root):
    resp = client.put("/api/canvases/u1/b1", json={"data": _canvas(PNG_PAYLOAD, PNG_PAYLOAD)})
    assert resp.status_code == 200, resp.text
    body = resp.json()

    filename = f"{hashlib.sha256(PNG_PAYLOAD.encode()).hexdigest()}.png"
    shapes = body["data"]["pages"][0]["shapes"]
    assert [s["src"] for s in shapes] == [f"/api/images/u1/b1/{filename}"] * 2
    assert body["owner_id"] == "u1"
    assert body["book_id"] == "b1"
    assert body["warnings"] == []
    assert [p.name for p in (storage_root / "u1" / "b1").iterdir()] == [filename]


def test_get_canvas_inlines_images(client):
    original = _canvas(PNG_PAYLOAD, "AAAA")
    client.put("/api/canvases/u1/b1", json={"data": original})

    resp = client.get("/api/canvases/u1/b1")
    assert resp.status_code == 200
    assert resp.json()["data"] == original
    assert resp.json()["warnings"] == []


def test_get_canvas_without_inline_returns_stored_references(client, db):
    client.put("/api/canvases/u1/b1", json={"data": _canvas(PNG_PAYLOAD)})

    resp = client.get("/api/canvases/u1/b1?inline=false")
    assert resp.status_code == 200
    row = db.query(CanvasDocument).filter(CanvasDocument.owner_id == "u1").one()
    assert resp.json()["data"] == json.loads(row.data)
    assert resp.json()["data"]["pages"][0]["shapes"][0]["src"].startswith("/api/images/u1/b1/")


def test_save_canvas_twice_updates_same_row(client, db):
    first = client.put("/api/canvases/u1/b1", json={"data": _canvas(PNG_PAYLOAD)}).json()
    second = client.put("/api/canvases/u1/b1", json={"data": {"pages": []}}).json()

    assert first["canvas_id"] == second["canvas_id"]
    assert db.query(CanvasDocument).count() == 1
    assert client.get("/api/canvases/u1/b1").json()["data"] == {"pages": []}


def test_save_canvas_rejects_malformed_image(client):
    resp = client.put("/api/canvases/u1/b1", json={"data": {"src": "data:image/png;base64"}})
    assert resp.status_code == 400

    assert client.get("/api/canvases/u1/b1").status_code == 404


def test_save_canvas_rejects_oversized_body(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_CANVAS_SIZE", 16)
    resp = client.put("/api/canvases/u1/b1", json={"data": _canvas(PNG_PAYLOAD)})
    assert resp.status_code == 413


def test_get_canvas_reports_missing_image(client, db):
    reference = "/api/images/u1/b1/deadbeef.png"
    db.add(CanvasDocument(owner_id="u1", book_id="b1", data=json.dumps({"shapes": [{"src": reference}]})))
    db.commit()

    resp = client.get("/api/canvases/u1/b1")
    assert resp.status_code == 200
    body = resp.json()
    assert body["data"]["shapes"][0]["src"] == reference
    assert body["warnings"][0]["location"] == "shapes/0/src"
    assert body["warnings"][0]["reference"] == reference


def test_get_missing_canvas_returns_404(client):
    assert client.get("/api/canvases/u1/none").status_code == 404


def test_delete_canvas_keeps_stored_images(client, storage_root):
    client.put("/api/canvases/u1/b1", json={"data": _canvas(PNG_PAYLOAD)})

    resp = client.delete("/api/canvases/u1/b1")
    assert resp.status_code == 200
    assert client.get("/api/canvases/u1/b1").status_code == 404
    assert len(list((storage_root / "u1" / "b1").iterdir())) == 1
    assert client.delete("/api/canvases/u1/b1").status_code == 404


def test_unsafe_scope_is_rejected(client, tmp_path):
    (tmp_path / "secret.txt").write_text("TOPSECRET")

    resp = client.put("/api/canvases/%2E%2E/%2E%2E", json={"data": {"src": "/api/images/../../secret.txt"}})
    assert resp.status_code == 400
    assert client.put("/api/canvases/u1/%2E%2E", json={"data": {"src": data_url("AAAA")}}).status_code == 400
    assert client.get("/api/canvases/%2E%2E/%2E%2E").status_code == 400
    assert [p.name for p in tmp_path.iterdir()] == ["secret.txt"]


def test_get_canvas_with_corrupt_reference_still_loads(client, db):
    reference = "/api/images/u1/b1/a\x00b.png"
    db.add(CanvasDocument(owner_id="u1", book_id="b1", data=json.dumps({"shapes": [{"src": reference}]})))
    db.commit()

    resp = client.get("/api/canvases/u1/b1")
    assert resp.status_code == 200
    assert resp.json()["data"]["shapes"][0]["src"] == reference
    assert resp.json()["warnings"][0]["location"] == "shapes/0/src"
