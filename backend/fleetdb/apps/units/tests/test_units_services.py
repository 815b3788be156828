from __future__ import annotations

import io
from pathlib import Path

import pytest
from fastapi import HTTPException, UploadFile
from PIL import Image

from fleetdb.apps.maintenance import models as maintenance_models
from fleetdb.apps.units import models, schemas, services


def _create_payload(**overrides) -> schemas.UnitCreate:
    values = dict(
        unit_number="FL-100",
        brand="Toyota",
        model="8FBE20",
        serial_number="TY-555",
        year=2021,
        capacity_kg=2000,
        fuel_type="electric",
        current_hours=120.0,
    )
    values.update(overrides)
    return schemas.UnitCreate(**values)


def _schedule(db, unit, *, next_hours, status=maintenance_models.ScheduleStatusEnum.PENDING):
    schedule = maintenance_models.MaintenanceSchedule(
        unit_id=unit.id,
        interval_hours=250.0,
        last_service_hours=0.0,
        next_service_hours=next_hours,
        status=status,
        estimated_cost=150.0,
    )
    db.add(schedule)
    db.flush()
    return schedule


def test_create_unit_sets_first_service_offset(db_session):
    unit = services.create_unit(db_session, _create_payload(current_hours=120.0))

    assert unit.id
    assert unit.next_service_hours == 370.0
    assert unit.status == models.UnitStatusEnum.ACTIVE


def test_create_unit_rejects_duplicate_unit_number(db_session, make_unit):
    make_unit(unit_number="FL-100")

    with pytest.raises(HTTPException) as exc:
        services.create_unit(db_session, _create_payload(unit_number="FL-100"))
    assert exc.value.status_code == 409


def test_update_unit_keeps_unit_number_unique(db_session, make_unit):
    make_unit(unit_number="FL-001")
    other = make_unit(unit_number="FL-002")

    with pytest.raises(HTTPException) as exc:
        services.update_unit(db_session, other, schemas.UnitUpdate(unit_number="FL-001"))
    assert exc.value.status_code == 409

    services.update_unit(db_session, other, schemas.UnitUpdate(location="Dock 4"))
    assert other.location == "Dock 4"
    assert other.unit_number == "FL-002"


def test_list_units_filters_and_search(db_session, make_unit):
    make_unit(unit_number="FL-001", brand="Toyota", fuel_type=models.FuelTypeEnum.ELECTRIC)
    make_unit(unit_number="FL-002", brand="Hyster", model="H50FT", fuel_type=models.FuelTypeEnum.DIESEL)
    make_unit(
        unit_number="FL-003",
        brand="Toyota",
        fuel_type=models.FuelTypeEnum.GAS,
        status=models.UnitStatusEnum.INACTIVE,
    )

    assert [u.unit_number for u in services.list_units(db_session)] == ["FL-001", "FL-002", "FL-003"]
    assert [u.unit_number for u in services.list_units(db_session, brand="Toyota")] == [
        "FL-001",
        "FL-003",
    ]
    assert [
        u.unit_number
        for u in services.list_units(db_session, fuel_type=models.FuelTypeEnum.DIESEL)
    ] == ["FL-002"]
    assert [
        u.unit_number
        for u in services.list_units(db_session, status=models.UnitStatusEnum.INACTIVE)
    ] == ["FL-003"]
    assert [u.unit_number for u in services.list_units(db_session, search="h50")] == ["FL-002"]


def test_units_summary_and_brands(db_session, make_unit):
    make_unit(brand="Toyota", fuel_type=models.FuelTypeEnum.ELECTRIC)
    make_unit(brand="Crown", fuel_type=models.FuelTypeEnum.ELECTRIC, status=models.UnitStatusEnum.MAINTENANCE)
    make_unit(brand="Toyota", fuel_type=models.FuelTypeEnum.DIESEL)

    summary = services.get_units_summary(db_session)
    assert summary.total == 3
    assert summary.active == 2
    assert summary.maintenance == 1
    assert summary.inactive == 0
    assert summary.electric == 2
    assert summary.diesel == 1

    assert services.list_brands(db_session) == ["Crown", "Toyota"]


def test_update_unit_hours_marks_due_schedules_overdue(db_session, make_unit):
    unit = make_unit(current_hours=200.0)
    due = _schedule(db_session, unit, next_hours=250.0)
    later = _schedule(db_session, unit, next_hours=500.0)

    services.update_unit_hours(db_session, unit, 260.0)

    assert unit.current_hours == 260.0
    assert due.status == maintenance_models.ScheduleStatusEnum.OVERDUE
    assert later.status == maintenance_models.ScheduleStatusEnum.PENDING


def test_update_unit_hours_rejects_negative(db_session, make_unit):
    unit = make_unit()
    with pytest.raises(HTTPException) as exc:
        services.update_unit_hours(db_session, unit, -1.0)
    assert exc.value.status_code == 400


def test_advance_unit_hours_only_moves_forward(db_session, make_unit):
    unit = make_unit(current_hours=300.0)

    assert services.advance_unit_hours(db_session, unit, 250.0) is False
    assert unit.current_hours == 300.0
    assert services.advance_unit_hours(db_session, unit, 320.0) is True
    assert unit.current_hours == 320.0


def test_delete_unit_removes_child_records(db_session, make_unit):
    unit = make_unit()
    _schedule(db_session, unit, next_hours=250.0)

    services.delete_unit(db_session, unit)

    assert db_session.query(models.Unit).count() == 0
    assert db_session.query(maintenance_models.MaintenanceSchedule).count() == 0


def _png_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "orange").save(buf, format="PNG")
    return buf.getvalue()


def _jpeg_bytes() -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), "orange").save(buf, format="JPEG")
    return buf.getvalue()


def test_save_and_delete_unit_image(db_session, make_unit):
    unit = make_unit()
    upload = UploadFile(filename="truck.PNG", file=io.BytesIO(_png_bytes()))

    services.save_unit_image(db_session, unit, upload)
    assert unit.has_image
    assert unit.image_path.endswith(f"{unit.id}.png")

    path = unit.image_path
    stale = services.delete_unit_image(db_session, unit)
    assert unit.image_path is None
    # the file outlives the flush; callers discard it after commit
    assert stale == path
    assert Path(path).exists()


def test_replacing_image_returns_previous_file(db_session, make_unit):
    unit = make_unit()
    first = UploadFile(filename="truck.png", file=io.BytesIO(_png_bytes()))
    assert services.save_unit_image(db_session, unit, first) is None
    png_path = unit.image_path

    second = UploadFile(filename="truck.jpg", file=io.BytesIO(_jpeg_bytes()))
    assert services.save_unit_image(db_session, unit, second) == png_path
    assert unit.image_path.endswith(f"{unit.id}.jpg")
    assert Path(png_path).exists()


def test_save_unit_image_rejects_unknown_extension(db_session, make_unit):
    unit = make_unit()
    upload = UploadFile(filename="truck.gif", file=io.BytesIO(b"GIF89a"))

    with pytest.raises(HTTPException) as exc:
        services.save_unit_image(db_session, unit, upload)
    assert exc.value.status_code == 400
    assert unit.image_path is None


def test_save_unit_image_rejects_non_image_content(db_session, make_unit):
    unit = make_unit()
    upload = UploadFile(filename="truck.jpg", file=io.BytesIO(b"not really a jpeg"))

    with pytest.raises(HTTPException) as exc:
        services.save_unit_image(db_session, unit, upload)
    assert exc.value.status_code == 400
    assert unit.image_path is None
