from __future__ import annotations

from fleetdb.apps.service_records import router as services_router


def test_static_routes_precede_service_id():
    paths = [route.path for route in services_router.router.routes]
    for static in ("/services/summary", "/services/technicians", "/services/by-technician", "/services/monthly-costs"):
        assert paths.index(static) < paths.index("/services/{service_id}")


def test_create_list_and_delete_service(client, make_unit, db_session):
    unit = make_unit()
    db_session.commit()

    created = client.post(
        "/services/",
        json={
            "unit_id": unit.id,
            "service_type": "repair",
            "description": "Fix hydraulic leak",
            "labor_cost": 40,
            "parts_cost": 60,
            "service_date": "2026-06-01",
        },
    )
    assert created.status_code == 201
    assert created.json()["total_cost"] == 100.0
    assert created.json()["status"] == "completed"

    listed = client.get("/services/", params={"service_type": "repair", "severity": "all"})
    assert [s["id"] for s in listed.json()] == [created.json()["id"]]

    assert client.get(f"/services/unit/{unit.id}").status_code == 200
    assert client.delete(f"/services/{created.json()['id']}").status_code == 204
    assert client.get(f"/services/{created.json()['id']}").status_code == 404
