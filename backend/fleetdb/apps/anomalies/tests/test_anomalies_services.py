from __future__ import annotations

from datetime import date

import pytest
from fastapi import HTTPException

from fleetdb.apps.anomalies import models, schemas, services
from fleetdb.apps.units import models as unit_models


def _payload(unit_id: str, **overrides) -> schemas.AnomalyCreate:
    values = dict(
        unit_id=unit_id,
        title="Brake noise",
        description="Grinding noise when braking with load",
        severity="medium",
        category="mechanical",
        priority="medium",
        reported_by="Shift lead",
        reported_date=date(2026, 8, 3),
    )
    values.update(overrides)
    return schemas.AnomalyCreate(**values)


def test_create_anomaly_is_open(db_session, make_unit):
    unit = make_unit()
    anomaly = services.create_anomaly(db_session, _payload(unit.id))

    assert anomaly.status == models.AnomalyStatusEnum.OPEN
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE


@pytest.mark.parametrize("severity", ["high", "critical"])
def test_blocking_anomaly_puts_unit_in_maintenance(db_session, make_unit, severity):
    unit = make_unit()
    services.create_anomaly(db_session, _payload(unit.id, severity=severity))
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE


def test_resolve_last_blocking_anomaly_reactivates_unit(db_session, make_unit):
    unit = make_unit()
    first = services.create_anomaly(db_session, _payload(unit.id, severity="critical"))
    second = services.create_anomaly(db_session, _payload(unit.id, severity="high"))

    services.resolve_anomaly(db_session, first, actual_cost=90.0, resolution_notes="Pads replaced")
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE

    services.resolve_anomaly(
        db_session,
        second,
        actual_cost=40.0,
        resolution_notes="Adjusted",
        preventive_actions="Weekly brake check",
        assigned_to="Tech A",
        resolved_date=date(2026, 8, 5),
    )
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE
    assert second.status == models.AnomalyStatusEnum.RESOLVED
    assert second.resolved_date == date(2026, 8, 5)
    assert second.actual_cost == 40.0
    assert second.preventive_actions == "Weekly brake check"
    assert second.assigned_to == "Tech A"
    assert first.resolved_date is not None


def test_resolve_never_reactivates_inactive_unit(db_session, make_unit):
    unit = make_unit(status=unit_models.UnitStatusEnum.INACTIVE)
    anomaly = services.create_anomaly(db_session, _payload(unit.id, severity="critical"))
    assert unit.status == unit_models.UnitStatusEnum.INACTIVE

    services.resolve_anomaly(db_session, anomaly, actual_cost=0, resolution_notes="n/a")
    assert unit.status == unit_models.UnitStatusEnum.INACTIVE


def test_closed_anomaly_cannot_be_resolved(db_session, make_unit):
    unit = make_unit()
    anomaly = services.create_anomaly(db_session, _payload(unit.id))
    services.close_anomaly(db_session, anomaly, notes="Duplicate report")

    with pytest.raises(HTTPException) as exc:
        services.resolve_anomaly(db_session, anomaly, actual_cost=1, resolution_notes="x")
    assert exc.value.status_code == 409
    assert anomaly.resolution_notes == "Duplicate report"


def test_close_and_delete_reevaluate_unit(db_session, make_unit):
    unit = make_unit()
    a = services.create_anomaly(db_session, _payload(unit.id, severity="high"))
    b = services.create_anomaly(db_session, _payload(unit.id, severity="critical"))

    services.close_anomaly(db_session, a)
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE

    services.delete_anomaly(db_session, b)
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE


def test_update_severity_and_status(db_session, make_unit):
    unit = make_unit()
    anomaly = services.create_anomaly(db_session, _payload(unit.id, severity="low"))

    services.update_anomaly(db_session, anomaly, schemas.AnomalyUpdate(severity="critical"))
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE

    services.update_anomaly(db_session, anomaly, schemas.AnomalyUpdate(status="resolved"))
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE
    assert anomaly.resolved_date is not None

    # escalating an already resolved report does not touch the unit
    services.update_anomaly(db_session, anomaly, schemas.AnomalyUpdate(severity="high"))
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE


def test_editing_blocking_anomaly_keeps_manual_unit_status(db_session, make_unit):
    unit = make_unit()
    anomaly = services.create_anomaly(db_session, _payload(unit.id, severity="high"))
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE

    unit.status = unit_models.UnitStatusEnum.ACTIVE
    db_session.flush()

    services.update_anomaly(db_session, anomaly, schemas.AnomalyUpdate(title="Hydraulic leak, rear"))
    assert anomaly.title == "Hydraulic leak, rear"
    assert unit.status == unit_models.UnitStatusEnum.ACTIVE

    services.update_anomaly(db_session, anomaly, schemas.AnomalyUpdate(severity="critical"))
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE


def test_assign_moves_to_in_progress(db_session, make_unit):
    unit = make_unit()
    anomaly = services.create_anomaly(db_session, _payload(unit.id))

    services.assign_anomaly(db_session, anomaly, "Tech B")
    assert anomaly.status == models.AnomalyStatusEnum.IN_PROGRESS
    assert anomaly.assigned_to == "Tech B"

    services.close_anomaly(db_session, anomaly)
    with pytest.raises(HTTPException) as exc:
        services.assign_anomaly(db_session, anomaly, "Tech C")
    assert exc.value.status_code == 409


def test_in_progress_blocking_anomaly_keeps_unit_held(db_session, make_unit):
    unit = make_unit()
    blocking = services.create_anomaly(db_session, _payload(unit.id, severity="high"))
    services.assign_anomaly(db_session, blocking, "Tech B")
    minor = services.create_anomaly(db_session, _payload(unit.id, severity="low"))

    services.resolve_anomaly(db_session, minor, actual_cost=0, resolution_notes="ok")
    assert unit.status == unit_models.UnitStatusEnum.MAINTENANCE


def test_list_anomalies_filters_and_search(db_session, make_unit):
    a = make_unit()
    b = make_unit()
    services.create_anomaly(db_session, _payload(a.id, reported_date=date(2026, 8, 1)))
    services.create_anomaly(
        db_session,
        _payload(
            a.id,
            title="Battery overheating",
            description="Charger trips",
            category="electrical",
            severity="high",
            priority="urgent",
            reported_date=date(2026, 8, 9),
        ),
    )
    services.create_anomaly(
        db_session,
        _payload(b.id, title="Fork crack", assigned_to="Tech A", reported_date=date(2026, 7, 20)),
    )

    titles = [r.title for r in services.list_anomalies(db_session)]
    assert titles == ["Battery overheating", "Brake noise", "Fork crack"]

    assert len(services.list_anomalies(db_session, unit_id=a.id)) == 2
    assert len(services.list_anomalies(db_session, severity=models.AnomalySeverityEnum.HIGH)) == 1
    assert len(services.list_anomalies(db_session, category=models.AnomalyCategoryEnum.ELECTRICAL)) == 1
    assert len(services.list_anomalies(db_session, priority=models.AnomalyPriorityEnum.URGENT)) == 1
    assert len(services.list_anomalies(db_session, assigned_to="Tech A")) == 1
    assert [r.title for r in services.list_anomalies(db_session, search="CHARGER")] == [
        "Battery overheating"
    ]
    july = services.list_anomalies(db_session, date_from=date(2026, 7, 1), date_to=date(2026, 7, 31))
    assert [r.title for r in july] == ["Fork crack"]


def test_summary_lookups_and_categories(db_session, make_unit):
    unit = make_unit()
    services.create_anomaly(db_session, _payload(unit.id, estimated_cost=100.0, downtime_hours=2.0))
    services.create_anomaly(
        db_session,
        _payload(
            unit.id,
            severity="critical",
            category="hydraulic",
            priority="urgent",
            reported_by="Operator 7",
            assigned_to="Tech Z",
            estimated_cost=400.0,
        ),
    )

    summary = services.get_anomalies_summary(db_session)
    assert summary.total == 2
    assert summary.open == 2
    assert summary.medium_severity == 1
    assert summary.critical_severity == 1
    assert summary.mechanical == 1
    assert summary.hydraulic == 1
    assert summary.urgent_priority == 1
    assert summary.total_estimated_cost == 500.0
    assert summary.total_downtime == 2.0

    assert services.list_assignees(db_session) == ["Tech Z"]
    assert services.list_reporters(db_session) == ["Operator 7", "Shift lead"]

    by_category = {c.category: c for c in services.get_anomalies_by_category(db_session)}
    assert by_category["hydraulic"].critical == 1
    assert by_category["mechanical"].medium == 1
    assert by_category["hydraulic"].estimated_cost == 400.0
