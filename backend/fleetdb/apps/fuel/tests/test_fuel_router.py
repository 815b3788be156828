from __future__ import annotations


def test_record_fuel_and_read_back(client, make_unit, db_session):
    unit = make_unit(current_hours=10.0)
    db_session.commit()

    resp = client.post(
        "/fuel/",
        json={
            "unit_id": unit.id,
            "period_type": "weekly",
            "period_start": "2026-07-06",
            "period_end": "2026-07-12",
            "liters_consumed": 30,
            "hours_operated": 0,
            "cost_per_liter": 1.1,
            "odometer_start": 10,
            "odometer_end": 25,
        },
    )
    assert resp.status_code == 201
    assert resp.json()["efficiency_lph"] == 0.0
    assert resp.json()["total_cost"] == 33.0

    assert client.get(f"/units/{unit.id}").json()["current_hours"] == 25.0

    bad = client.post(
        "/fuel/",
        json={
            "unit_id": unit.id,
            "period_start": "2026-07-12",
            "period_end": "2026-07-06",
            "liters_consumed": 1,
            "hours_operated": 1,
            "cost_per_liter": 1,
        },
    )
    assert bad.status_code == 400


def test_fuel_dashboard_endpoints(client):
    for path in ("/fuel/summary", "/fuel/trends", "/fuel/efficiency-comparison", "/fuel/alerts", "/fuel/monthly-costs"):
        assert client.get(path).status_code == 200
