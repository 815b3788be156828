# backend/fleetdb/apps/units/services.py
#
# Business logic for the units module:
# - CRUD + filtered listing of units.
# - Horometer updates (and the overdue refresh they trigger).
# - Derived status changes requested by other apps.
# - Photo storage.

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import HTTPException, UploadFile, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...constants import FIRST_SERVICE_OFFSET_HOURS
from . import models, schemas, storage

logger = logging.getLogger(__name__)


def get_unit(db: Session, unit_id: str) -> Optional[models.Unit]:
    return db.get(models.Unit, unit_id)


def get_unit_or_404(db: Session, unit_id: str) -> models.Unit:
    unit = get_unit(db, unit_id)
    if not unit:
        raise HTTPException(status_code=404, detail="Unit not found")
    return unit


def _ensure_unit_number_free(
    db: Session,
    unit_number: str,
    *,
    exclude_id: Optional[str] = None,
) -> None:
    query = db.query(models.Unit).filter(models.Unit.unit_number == unit_number)
    if exclude_id:
        query = query.filter(models.Unit.id != exclude_id)
    conflict = query.first()
    if conflict:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Unit number {unit_number} is already assigned to unit {conflict.id}.",
        )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def create_unit(db: Session, data: schemas.UnitCreate) -> models.Unit:
    _ensure_unit_number_free(db, data.unit_number)

    unit = models.Unit(**data.model_dump())
    unit.next_service_hours = data.current_hours + FIRST_SERVICE_OFFSET_HOURS
    db.add(unit)
    db.flush()
    logger.info("Unit %s created (%s)", unit.unit_number, unit.id)
    return unit


def update_unit(db: Session, unit: models.Unit, data: schemas.UnitUpdate) -> models.Unit:
    changes = data.model_dump(exclude_unset=True)

    new_number = changes.get("unit_number")
    if new_number and new_number != unit.unit_number:
        _ensure_unit_number_free(db, new_number, exclude_id=unit.id)

    hours_changed = (
        changes.get("current_hours") is not None
        and changes["current_hours"] != unit.current_hours
    )

    for field, value in changes.items():
        if value is None and field not in ("location", "next_service_hours"):
            continue
        setattr(unit, field, value)
    db.flush()

    if hours_changed:
        _refresh_schedules(db, unit)
    return unit


def delete_unit(db: Session, unit: models.Unit) -> Optional[str]:
    """Delete the unit and its records. Returns the image path to discard once committed."""
    image_path = unit.image_path
    db.delete(unit)
    db.flush()
    logger.info("Unit %s deleted with its records", unit.unit_number)
    return image_path


def list_units(
    db: Session,
    *,
    status: Optional[models.UnitStatusEnum] = None,
    fuel_type: Optional[models.FuelTypeEnum] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
) -> List[models.Unit]:
    query = db.query(models.Unit)
    if status:
        query = query.filter(models.Unit.status == status)
    if fuel_type:
        query = query.filter(models.Unit.fuel_type == fuel_type)
    if brand:
        query = query.filter(models.Unit.brand == brand)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(models.Unit.unit_number).like(pattern),
                func.lower(models.Unit.brand).like(pattern),
                func.lower(models.Unit.model).like(pattern),
                func.lower(models.Unit.serial_number).like(pattern),
            )
        )
    return query.order_by(models.Unit.unit_number.asc()).all()


def list_brands(db: Session) -> List[str]:
    rows = db.query(models.Unit.brand).distinct().order_by(models.Unit.brand.asc()).all()
    return [brand for (brand,) in rows if brand]


def get_units_summary(db: Session) -> schemas.UnitsSummary:
    summary = schemas.UnitsSummary()

    for status_value, count in (
        db.query(models.Unit.status, func.count(models.Unit.id))
        .group_by(models.Unit.status)
        .all()
    ):
        setattr(summary, models.UnitStatusEnum(status_value).value, count)
        summary.total += count

    for fuel_value, count in (
        db.query(models.Unit.fuel_type, func.count(models.Unit.id))
        .group_by(models.Unit.fuel_type)
        .all()
    ):
        setattr(summary, models.FuelTypeEnum(fuel_value).value, count)

    return summary


# ---------------------------------------------------------------------------
# Horometer + derived status
# ---------------------------------------------------------------------------


def _refresh_schedules(db: Session, unit: models.Unit) -> None:
    # local import: maintenance.services imports this module
    from ..maintenance import services as maintenance_services

    maintenance_services.refresh_overdue_statuses(db, unit_id=unit.id)


def update_unit_hours(db: Session, unit: models.Unit, hours: float) -> models.Unit:
    if hours < 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Horometer reading cannot be negative.",
        )
    if hours < unit.current_hours:
        logger.warning(
            "Unit %s horometer moved backwards (%.1f -> %.1f)",
            unit.unit_number,
            unit.current_hours,
            hours,
        )
    unit.current_hours = hours
    db.flush()
    _refresh_schedules(db, unit)
    return unit


def advance_unit_hours(db: Session, unit: models.Unit, reading: float) -> bool:
    """
    Move the horometer forward to `reading` when it is higher than the
    current value. Returns True when the unit was updated.
    """
    if reading is None or reading <= (unit.current_hours or 0):
        return False
    logger.info(
        "Unit %s horometer advanced %.1f -> %.1f",
        unit.unit_number,
        unit.current_hours,
        reading,
    )
    unit.current_hours = reading
    db.flush()
    _refresh_schedules(db, unit)
    return True


def set_unit_status(
    db: Session,
    unit: models.Unit,
    new_status: models.UnitStatusEnum,
    *,
    reason: str,
) -> bool:
    if unit.status == new_status:
        return False
    logger.info(
        "Unit %s status %s -> %s (%s)",
        unit.unit_number,
        models.UnitStatusEnum(unit.status).value,
        new_status.value,
        reason,
    )
    unit.status = new_status
    db.flush()
    return True


# ---------------------------------------------------------------------------
# Photos
# ---------------------------------------------------------------------------


def save_unit_image(db: Session, unit: models.Unit, file: UploadFile) -> Optional[str]:
    """Store a new photo for the unit. Returns the replaced file to discard once committed."""
    ext = storage.image_extension(file.filename)
    dest = storage.ensure_safe_path(storage.upload_dir() / f"{unit.id}{ext}")

    previous = unit.image_path
    storage.save_upload(file=file, dest_path=dest)
    storage.verify_image(dest)

    unit.image_path = str(dest)
    db.flush()
    if previous and previous != str(dest):
        return previous
    return None


def delete_unit_image(db: Session, unit: models.Unit) -> str:
    if not unit.image_path:
        raise HTTPException(status_code=404, detail="Unit has no image")
    image_path = unit.image_path
    unit.image_path = None
    db.flush()
    return image_path
