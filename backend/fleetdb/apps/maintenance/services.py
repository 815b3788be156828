# backend/fleetdb/apps/maintenance/services.py
#
# Maintenance schedule logic:
# - Standard intervals and their estimated costs.
# - Schedule CRUD with status derived from the unit horometer.
# - The completion chain (close schedule, log service, plan next item).
# - Overdue refresh after horometer changes.

from __future__ import annotations

import logging
import math
from datetime import date, datetime, timezone
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...constants import (
    DEFAULT_INTERVAL_ESTIMATED_COST,
    INTERVAL_ESTIMATED_COSTS,
    MAINTENANCE_INTERVALS,
)
from ..service_records import models as service_models
from ..units import models as unit_models
from ..units import services as unit_services
from . import models, schemas

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {
    "maintenance_type",
    "interval_hours",
    "last_service_hours",
    "next_service_hours",
    "status",
    "estimated_cost",
}

__all__ = [
    "MAINTENANCE_INTERVALS",
    "estimated_cost_for_interval",
    "next_due_hours",
    "create_schedule",
    "update_schedule",
    "complete_schedule",
    "list_schedules",
    "get_schedule",
    "schedule_preventive",
    "get_maintenance_summary",
    "refresh_overdue_statuses",
]


def estimated_cost_for_interval(interval_hours: float) -> float:
    key = int(interval_hours) if float(interval_hours).is_integer() else interval_hours
    return float(INTERVAL_ESTIMATED_COSTS.get(key, DEFAULT_INTERVAL_ESTIMATED_COST))


def next_due_hours(current_hours: float, interval_hours: float) -> float:
    """First multiple of the interval strictly after the next boundary."""
    if interval_hours <= 0:
        raise ValueError("interval_hours must be positive")
    return math.ceil(current_hours / interval_hours) * interval_hours + interval_hours


def _status_for(unit: unit_models.Unit, next_service_hours: float) -> models.ScheduleStatusEnum:
    if (unit.current_hours or 0) >= next_service_hours:
        return models.ScheduleStatusEnum.OVERDUE
    return models.ScheduleStatusEnum.PENDING


def _earliest_open_due(db: Session, unit_id: str) -> Optional[float]:
    return (
        db.query(func.min(models.MaintenanceSchedule.next_service_hours))
        .filter(
            models.MaintenanceSchedule.unit_id == unit_id,
            models.MaintenanceSchedule.status.in_(models.OPEN_SCHEDULE_STATUSES),
        )
        .scalar()
    )


def get_schedule(db: Session, schedule_id: str) -> Optional[models.MaintenanceSchedule]:
    return db.get(models.MaintenanceSchedule, schedule_id)


def get_schedule_or_404(db: Session, schedule_id: str) -> models.MaintenanceSchedule:
    schedule = get_schedule(db, schedule_id)
    if not schedule:
        raise HTTPException(status_code=404, detail="Maintenance schedule not found")
    return schedule


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def create_schedule(db: Session, data: schemas.ScheduleCreate) -> models.MaintenanceSchedule:
    unit = unit_services.get_unit_or_404(db, data.unit_id)

    schedule = models.MaintenanceSchedule(**data.model_dump())
    schedule.status = _status_for(unit, data.next_service_hours)
    db.add(schedule)
    db.flush()
    return schedule


def update_schedule(
    db: Session,
    schedule: models.MaintenanceSchedule,
    data: schemas.ScheduleUpdate,
) -> models.MaintenanceSchedule:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(schedule, field, value)

    if schedule.status == models.ScheduleStatusEnum.COMPLETED and schedule.completed_at is None:
        schedule.completed_at = datetime.now(timezone.utc)
    db.flush()
    return schedule


def schedule_preventive(
    db: Session,
    unit_id: str,
    interval_hours: float,
) -> models.MaintenanceSchedule:
    unit = unit_services.get_unit_or_404(db, unit_id)
    current = unit.current_hours or 0.0

    data = schemas.ScheduleCreate(
        unit_id=unit.id,
        maintenance_type=models.MaintenanceTypeEnum.PREVENTIVE,
        interval_hours=interval_hours,
        last_service_hours=current,
        next_service_hours=next_due_hours(current, interval_hours),
        description=f"Preventive maintenance {interval_hours:g}h - {unit.brand} {unit.model}",
        estimated_cost=estimated_cost_for_interval(interval_hours),
    )
    return create_schedule(db, data)


def complete_schedule(
    db: Session,
    schedule: models.MaintenanceSchedule,
    *,
    actual_cost: float,
    technician: str,
    notes: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[service_models.Service, models.MaintenanceSchedule]:
    """
    Close a schedule and roll the unit's plan forward.

    Writes (flushed, not committed; the caller commits once):
      - the schedule -> completed,
      - a completed preventive Service for the work done,
      - one pending follow-up schedule at current_hours + interval,
      - unit.last_service_date / unit.next_service_hours.

    Returns (service, follow_up).
    """
    if schedule.status == models.ScheduleStatusEnum.COMPLETED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Maintenance schedule is already completed.",
        )

    today = today or date.today()
    unit = unit_services.get_unit_or_404(db, schedule.unit_id)
    current = unit.current_hours or 0.0
    interval = schedule.interval_hours

    schedule.status = models.ScheduleStatusEnum.COMPLETED
    schedule.actual_cost = actual_cost
    schedule.technician = technician
    schedule.completed_at = datetime.now(timezone.utc)
    if notes:
        schedule.notes = notes

    service = service_models.Service(
        unit_id=unit.id,
        service_type=service_models.ServiceTypeEnum.PREVENTIVE,
        description=f"Preventive maintenance {interval:g}h completed",
        severity=service_models.SeverityEnum.LOW,
        status=service_models.ServiceStatusEnum.COMPLETED,
        service_date=today,
        hours_at_service=current,
        total_cost=actual_cost,
        labor_cost=0.0,
        parts_cost=0.0,
        technician=technician,
        notes=notes,
    )
    db.add(service)

    follow_up = models.MaintenanceSchedule(
        unit_id=unit.id,
        maintenance_type=models.MaintenanceTypeEnum.PREVENTIVE,
        interval_hours=interval,
        last_service_hours=current,
        next_service_hours=current + interval,
        status=models.ScheduleStatusEnum.PENDING,
        description=f"Preventive maintenance {interval:g}h - {unit.brand} {unit.model}",
        estimated_cost=estimated_cost_for_interval(interval),
    )
    db.add(follow_up)
    db.flush()

    unit.last_service_date = today
    unit.next_service_hours = _earliest_open_due(db, unit.id)
    db.flush()

    logger.info(
        "Schedule %s completed for unit %s; next %gh item due at %.1f",
        schedule.id,
        unit.unit_number,
        interval,
        follow_up.next_service_hours,
    )
    return service, follow_up


# ---------------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------------


def list_schedules(
    db: Session,
    *,
    status: Optional[models.ScheduleStatusEnum] = None,
    unit_id: Optional[str] = None,
    maintenance_type: Optional[models.MaintenanceTypeEnum] = None,
    overdue_only: bool = False,
) -> List[models.MaintenanceSchedule]:
    query = db.query(models.MaintenanceSchedule)
    if status:
        query = query.filter(models.MaintenanceSchedule.status == status)
    if unit_id:
        query = query.filter(models.MaintenanceSchedule.unit_id == unit_id)
    if maintenance_type:
        query = query.filter(models.MaintenanceSchedule.maintenance_type == maintenance_type)
    if overdue_only:
        query = query.filter(
            models.MaintenanceSchedule.status == models.ScheduleStatusEnum.OVERDUE
        )
    return query.order_by(models.MaintenanceSchedule.next_service_hours.asc()).all()


def get_maintenance_summary(db: Session) -> schemas.MaintenanceSummary:
    summary = schemas.MaintenanceSummary()

    for status_value, count in (
        db.query(models.MaintenanceSchedule.status, func.count(models.MaintenanceSchedule.id))
        .group_by(models.MaintenanceSchedule.status)
        .all()
    ):
        setattr(summary, models.ScheduleStatusEnum(status_value).value, count)
        summary.total += count

    for type_value, count in (
        db.query(
            models.MaintenanceSchedule.maintenance_type,
            func.count(models.MaintenanceSchedule.id),
        )
        .group_by(models.MaintenanceSchedule.maintenance_type)
        .all()
    ):
        setattr(summary, models.MaintenanceTypeEnum(type_value).value, count)

    return summary


def refresh_overdue_statuses(db: Session, *, unit_id: Optional[str] = None) -> int:
    """
    Flip pending schedules to overdue where the unit horometer has reached
    `next_service_hours`. Returns the number of schedules updated.
    """
    query = (
        db.query(models.MaintenanceSchedule)
        .join(unit_models.Unit, unit_models.Unit.id == models.MaintenanceSchedule.unit_id)
        .filter(
            models.MaintenanceSchedule.status == models.ScheduleStatusEnum.PENDING,
            unit_models.Unit.current_hours >= models.MaintenanceSchedule.next_service_hours,
        )
    )
    if unit_id:
        query = query.filter(models.MaintenanceSchedule.unit_id == unit_id)

    updated = 0
    for schedule in query.all():
        schedule.status = models.ScheduleStatusEnum.OVERDUE
        updated += 1

    if updated:
        db.flush()
        logger.info("Marked %d maintenance schedule(s) overdue", updated)
    return updated
