from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from fleetdb.apps.units import models
from fleetdb.apps.units import router as units_router


def test_static_routes_registered_before_unit_id():
    paths = [route.path for route in units_router.router.routes]

    assert "/units/summary" in paths
    assert "/units/brands" in paths
    assert paths.index("/units/summary") < paths.index("/units/{unit_id}")
    assert paths.index("/units/brands") < paths.index("/units/{unit_id}")


def test_create_and_fetch_unit(client):
    payload = {
        "unit_number": "FL-010",
        "brand": "Linde",
        "model": "E20",
        "serial_number": "LN-1",
        "year": 2019,
        "capacity_kg": 2000,
        "fuel_type": "electric",
        "current_hours": 50,
    }
    resp = client.post("/units/", json=payload)
    assert resp.status_code == 201
    body = resp.json()
    assert body["next_service_hours"] == 300.0
    assert body["has_image"] is False

    dup = client.post("/units/", json=payload)
    assert dup.status_code == 409

    detail = client.get(f"/units/{body['id']}/detail")
    assert detail.status_code == 200
    assert detail.json()["unit"]["unit_number"] == "FL-010"
    assert detail.json()["services"] == []


def test_list_units_accepts_all_filter(client, make_unit, db_session):
    make_unit(unit_number="FL-001")
    db_session.commit()

    resp = client.get("/units/", params={"status": "all", "fuel_type": ""})
    assert resp.status_code == 200
    assert [u["unit_number"] for u in resp.json()] == ["FL-001"]

    bad = client.get("/units/", params={"status": "broken"})
    assert bad.status_code == 422


def test_unknown_unit_returns_404(client):
    assert client.get("/units/does-not-exist").status_code == 404


def test_upload_and_download_image(client, make_unit, db_session):
    unit = make_unit()
    db_session.commit()

    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "blue").save(buf, format="JPEG")
    content = buf.getvalue()

    resp = client.post(
        f"/units/{unit.id}/image",
        files={"file": ("photo.jpg", content, "image/jpeg")},
    )
    assert resp.status_code == 200
    assert resp.json()["has_image"] is True

    download = client.get(f"/units/{unit.id}/image")
    assert download.status_code == 200
    assert download.content == content


def _upload_photo(client, db_session, unit_id: str) -> str:
    buf = io.BytesIO()
    Image.new("RGB", (8, 8), "green").save(buf, format="PNG")
    resp = client.post(
        f"/units/{unit_id}/image",
        files={"file": ("photo.png", buf.getvalue(), "image/png")},
    )
    assert resp.status_code == 200
    return db_session.get(models.Unit, unit_id).image_path


def test_delete_image_endpoint_removes_file(client, make_unit, db_session):
    unit = make_unit()
    db_session.commit()
    path = _upload_photo(client, db_session, unit.id)
    assert Path(path).exists()

    resp = client.delete(f"/units/{unit.id}/image")
    assert resp.status_code == 200
    assert resp.json()["has_image"] is False
    assert not Path(path).exists()


def test_failed_unit_delete_keeps_image_on_disk(client, make_unit, db_session, monkeypatch):
    unit = make_unit()
    db_session.commit()
    path = _upload_photo(client, db_session, unit.id)

    def _fail_commit():
        raise RuntimeError("database went away")

    monkeypatch.setattr(db_session, "commit", _fail_commit)
    with pytest.raises(RuntimeError):
        client.delete(f"/units/{unit.id}")

    db_session.rollback()
    assert db_session.get(models.Unit, unit.id) is not None
    assert Path(path).exists()
