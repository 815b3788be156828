from __future__ import annotations

import pytest

from fleetdb.apps.maintenance import models, services
from fleetdb.apps.service_records import models as service_models


def test_complete_schedule_endpoint_and_repeat_conflict(client, make_unit, db_session):
    unit = make_unit(current_hours=255.0)
    db_session.commit()

    created = client.post(
        "/maintenance/schedules",
        json={"unit_id": unit.id, "interval_hours": 250, "next_service_hours": 250},
    )
    assert created.status_code == 201
    assert created.json()["status"] == "overdue"
    schedule_id = created.json()["id"]

    done = client.post(
        f"/maintenance/schedules/{schedule_id}/complete",
        json={"actual_cost": 180, "technician": "M. Perez"},
    )
    assert done.status_code == 200
    body = done.json()
    assert body["completed"]["status"] == "completed"
    assert body["next_schedule"]["next_service_hours"] == 505.0
    assert body["service_id"]

    again = client.post(
        f"/maintenance/schedules/{schedule_id}/complete",
        json={"actual_cost": 180, "technician": "M. Perez"},
    )
    assert again.status_code == 409

    rows = client.get("/maintenance/schedules", params={"unit_id": unit.id}).json()
    assert len(rows) == 2
    assert rows[0]["unit"]["unit_number"] == unit.unit_number


def test_intervals_and_summary(client):
    assert client.get("/maintenance/intervals").json() == [250, 500, 750, 1000, 2000, 3000]
    summary = client.get("/maintenance/summary").json()
    assert summary["total"] == 0


def test_schedule_preventive_endpoint(client, make_unit, db_session):
    unit = make_unit(current_hours=100.0)
    db_session.commit()

    resp = client.post(
        "/maintenance/schedules/preventive",
        json={"unit_id": unit.id, "interval_hours": 250},
    )
    assert resp.status_code == 201
    assert resp.json()["next_service_hours"] == 500.0


def test_complete_schedule_failure_rolls_back_every_write(client, make_unit, db_session, monkeypatch):
    unit = make_unit(current_hours=255.0)
    db_session.commit()
    created = client.post(
        "/maintenance/schedules",
        json={"unit_id": unit.id, "interval_hours": 250, "next_service_hours": 250},
    )
    schedule_id = created.json()["id"]

    def _fail(interval_hours):
        raise RuntimeError("cost table unavailable")

    # fails after the schedule is marked completed and the service row is added
    monkeypatch.setattr(services, "estimated_cost_for_interval", _fail)
    with pytest.raises(RuntimeError):
        client.post(
            f"/maintenance/schedules/{schedule_id}/complete",
            json={"actual_cost": 180, "technician": "M. Perez"},
        )

    schedules = db_session.query(models.MaintenanceSchedule).filter_by(unit_id=unit.id).all()
    assert len(schedules) == 1
    assert schedules[0].status == models.ScheduleStatusEnum.OVERDUE
    assert schedules[0].completed_at is None
    assert db_session.query(service_models.Service).count() == 0
    db_session.refresh(unit)
    assert unit.last_service_date is None
