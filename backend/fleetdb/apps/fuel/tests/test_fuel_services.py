from __future__ import annotations

from datetime import date

import pytest
from fastapi import HTTPException

from fleetdb.apps.fuel import schemas, services
from fleetdb.apps.maintenance import models as maintenance_models


def _payload(unit_id: str, **overrides) -> schemas.FuelRecordCreate:
    values = dict(
        unit_id=unit_id,
        period_type="weekly",
        period_start=date(2026, 4, 6),
        period_end=date(2026, 4, 12),
        liters_consumed=60.0,
        hours_operated=40.0,
        cost_per_liter=1.25,
        odometer_start=100.0,
        odometer_end=140.0,
    )
    values.update(overrides)
    return schemas.FuelRecordCreate(**values)


def test_create_fuel_record_derives_fields(db_session, make_unit):
    unit = make_unit(current_hours=100.0)
    record = services.create_fuel_record(db_session, _payload(unit.id))

    assert record.efficiency_lph == 1.5
    assert record.total_cost == 75.0


def test_zero_hours_yields_zero_efficiency(db_session, make_unit):
    unit = make_unit()
    record = services.create_fuel_record(
        db_session,
        _payload(unit.id, hours_operated=0.0, odometer_start=0.0, odometer_end=0.0),
    )
    assert record.efficiency_lph == 0.0


@pytest.mark.parametrize(
    "overrides",
    [
        {"period_start": date(2026, 4, 12), "period_end": date(2026, 4, 6)},
        {"odometer_start": 150.0, "odometer_end": 140.0},
    ],
)
def test_create_fuel_record_rejects_inverted_ranges(db_session, make_unit, overrides):
    unit = make_unit()
    with pytest.raises(HTTPException) as exc:
        services.create_fuel_record(db_session, _payload(unit.id, **overrides))
    assert exc.value.status_code == 400


def test_fuel_record_advances_horometer_and_refreshes_schedules(db_session, make_unit):
    unit = make_unit(current_hours=100.0)
    schedule = maintenance_models.MaintenanceSchedule(
        unit_id=unit.id,
        interval_hours=250.0,
        last_service_hours=0.0,
        next_service_hours=130.0,
        status=maintenance_models.ScheduleStatusEnum.PENDING,
        estimated_cost=150.0,
    )
    db_session.add(schedule)
    db_session.flush()

    services.create_fuel_record(db_session, _payload(unit.id, odometer_end=140.0))

    assert unit.current_hours == 140.0
    assert schedule.status == maintenance_models.ScheduleStatusEnum.OVERDUE


def test_fuel_record_never_moves_horometer_back(db_session, make_unit):
    unit = make_unit(current_hours=500.0)
    services.create_fuel_record(db_session, _payload(unit.id))
    assert unit.current_hours == 500.0


def test_update_fuel_record_recomputes(db_session, make_unit):
    unit = make_unit(current_hours=100.0)
    record = services.create_fuel_record(db_session, _payload(unit.id))

    services.update_fuel_record(
        db_session,
        record,
        schemas.FuelRecordUpdate(liters_consumed=80.0, cost_per_liter=2.0),
    )
    assert record.efficiency_lph == 2.0
    assert record.total_cost == 160.0

    with pytest.raises(HTTPException):
        services.update_fuel_record(
            db_session,
            record,
            schemas.FuelRecordUpdate(period_end=date(2026, 1, 1)),
        )


def test_list_fuel_records_date_window(db_session, make_unit):
    unit = make_unit()
    services.create_fuel_record(db_session, _payload(unit.id))
    services.create_fuel_record(
        db_session,
        _payload(
            unit.id,
            period_type="monthly",
            period_start=date(2026, 3, 1),
            period_end=date(2026, 3, 31),
            odometer_start=0.0,
            odometer_end=0.0,
        ),
    )

    rows = services.list_fuel_records(db_session)
    assert [r.period_start for r in rows] == [date(2026, 4, 6), date(2026, 3, 1)]

    april = services.list_fuel_records(
        db_session, date_from=date(2026, 4, 1), date_to=date(2026, 4, 30)
    )
    assert [r.period_start for r in april] == [date(2026, 4, 6)]

    # period_end must fall inside the window too
    partial = services.list_fuel_records(
        db_session, date_from=date(2026, 3, 1), date_to=date(2026, 3, 15)
    )
    assert partial == []


def test_fuel_summary_best_and_worst(db_session, make_unit):
    unit = make_unit()
    services.create_fuel_record(db_session, _payload(unit.id, liters_consumed=40.0))   # 1.0
    services.create_fuel_record(db_session, _payload(unit.id, liters_consumed=100.0))  # 2.5
    services.create_fuel_record(
        db_session,
        _payload(unit.id, hours_operated=0.0, odometer_start=0.0, odometer_end=0.0),
    )  # 0.0

    summary = services.get_fuel_summary(db_session)
    assert summary.total_records == 3
    assert summary.best_efficiency == 1.0
    assert summary.worst_efficiency == 2.5
    assert summary.total_liters == 200.0


def test_fuel_trends_bucket_by_month(db_session, make_unit):
    unit = make_unit()
    services.create_fuel_record(db_session, _payload(unit.id))
    services.create_fuel_record(
        db_session,
        _payload(unit.id, period_start=date(2026, 4, 13), period_end=date(2026, 4, 19), liters_consumed=20.0),
    )
    services.create_fuel_record(
        db_session,
        _payload(unit.id, period_start=date(2026, 5, 4), period_end=date(2026, 5, 10)),
    )

    trends = services.get_fuel_trends(db_session, months=12, today=date(2026, 6, 1))
    assert [t.period for t in trends] == ["2026-04", "2026-05"]
    assert trends[0].records == 2
    assert trends[0].liters == 80.0


def test_alerts_and_comparison(db_session, make_unit):
    thirsty = make_unit(unit_number="FL-900")
    frugal = make_unit(unit_number="FL-901")
    # 2.5 L/h and 100 * 2.5 = 250 per record
    services.create_fuel_record(
        db_session,
        _payload(thirsty.id, liters_consumed=100.0, cost_per_liter=2.5, period_start=date(2026, 6, 1), period_end=date(2026, 6, 7)),
    )
    services.create_fuel_record(
        db_session,
        _payload(frugal.id, liters_consumed=20.0, period_start=date(2026, 6, 1), period_end=date(2026, 6, 7)),
    )

    alerts = services.get_fuel_alerts(db_session, today=date(2026, 6, 10))
    kinds = {(a.unit_number, a.alert_type, a.severity) for a in alerts}
    assert kinds == {("FL-900", "efficiency", "high"), ("FL-900", "cost", "medium")}

    comparison = services.get_efficiency_comparison(db_session, today=date(2026, 6, 10))
    assert [c.unit_number for c in comparison] == ["FL-900", "FL-901"]
    assert comparison[0].average_efficiency == 2.5
    assert comparison[1].best_efficiency == 0.5


def test_monthly_fuel_costs(db_session, make_unit):
    unit = make_unit()
    services.create_fuel_record(db_session, _payload(unit.id))
    months = services.get_monthly_fuel_costs(db_session, 2026)
    assert len(months) == 12
    assert months[3].total_cost == 75.0
    assert months[3].liters == 60.0
