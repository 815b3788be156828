# backend/fleetdb/apps/service_records/services.py

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ...constants import UNASSIGNED_TECHNICIAN
from ...utils.periods import empty_month_buckets, year_bounds
from ..units import services as unit_services
from . import models, schemas

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {
    "service_type",
    "description",
    "severity",
    "status",
    "service_date",
    "total_cost",
    "labor_cost",
    "parts_cost",
    "labor_hours",
    "downtime_hours",
}


def get_service(db: Session, service_id: str) -> Optional[models.Service]:
    return db.get(models.Service, service_id)


def get_service_or_404(db: Session, service_id: str) -> models.Service:
    service = get_service(db, service_id)
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")
    return service


def _apply_date_range(query, date_from: Optional[date], date_to: Optional[date]):
    if date_from:
        query = query.filter(models.Service.service_date >= date_from)
    if date_to:
        query = query.filter(models.Service.service_date <= date_to)
    return query


def _touch_last_service_date(db: Session, service: models.Service) -> None:
    # Only completed work that took the truck out of operation counts.
    if service.status != models.ServiceStatusEnum.COMPLETED:
        return
    if not service.downtime_hours or service.downtime_hours <= 0:
        return
    unit = unit_services.get_unit_or_404(db, service.unit_id)
    if unit.last_service_date is None or service.service_date > unit.last_service_date:
        unit.last_service_date = service.service_date
        logger.info(
            "Unit %s last service date moved to %s",
            unit.unit_number,
            service.service_date,
        )


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def create_service(db: Session, data: schemas.ServiceCreate) -> models.Service:
    unit_services.get_unit_or_404(db, data.unit_id)

    values = data.model_dump()
    if values.get("total_cost") is None:
        values["total_cost"] = data.parts_cost + data.labor_cost

    service = models.Service(**values)
    db.add(service)
    db.flush()
    _touch_last_service_date(db, service)
    db.flush()
    return service


def update_service(
    db: Session,
    service: models.Service,
    data: schemas.ServiceUpdate,
) -> models.Service:
    changes = data.model_dump(exclude_unset=True)
    explicit_total = changes.get("total_cost") is not None

    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(service, field, value)

    if not explicit_total and ("parts_cost" in changes or "labor_cost" in changes):
        service.total_cost = (service.parts_cost or 0.0) + (service.labor_cost or 0.0)

    db.flush()
    _touch_last_service_date(db, service)
    db.flush()
    return service


def delete_service(db: Session, service: models.Service) -> None:
    db.delete(service)
    db.flush()


def complete_service(
    db: Session,
    service: models.Service,
    *,
    notes: Optional[str] = None,
    actual_cost: Optional[float] = None,
) -> models.Service:
    service.status = models.ServiceStatusEnum.COMPLETED
    if notes:
        service.notes = notes
    if actual_cost is not None:
        service.total_cost = actual_cost
    db.flush()
    _touch_last_service_date(db, service)
    db.flush()
    return service


# ---------------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------------


def list_services_for_unit(db: Session, unit_id: str) -> List[models.Service]:
    return (
        db.query(models.Service)
        .filter(models.Service.unit_id == unit_id)
        .order_by(models.Service.service_date.desc())
        .all()
    )


def list_services(
    db: Session,
    *,
    unit_id: Optional[str] = None,
    service_type: Optional[models.ServiceTypeEnum] = None,
    severity: Optional[models.SeverityEnum] = None,
    technician: Optional[str] = None,
    status: Optional[models.ServiceStatusEnum] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[models.Service]:
    query = db.query(models.Service)
    if unit_id:
        query = query.filter(models.Service.unit_id == unit_id)
    if service_type:
        query = query.filter(models.Service.service_type == service_type)
    if severity:
        query = query.filter(models.Service.severity == severity)
    if technician:
        query = query.filter(models.Service.technician == technician)
    if status:
        query = query.filter(models.Service.status == status)
    query = _apply_date_range(query, date_from, date_to)
    return query.order_by(
        models.Service.service_date.desc(),
        models.Service.created_at.desc(),
    ).all()


def get_services_summary(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> schemas.ServicesSummary:
    rows = _apply_date_range(db.query(models.Service), date_from, date_to).all()

    by_type: Dict[str, int] = {t.value: 0 for t in models.ServiceTypeEnum}
    by_severity: Dict[str, int] = {s.value: 0 for s in models.SeverityEnum}
    total_cost = labor_hours = downtime = 0.0
    for row in rows:
        by_type[models.ServiceTypeEnum(row.service_type).value] += 1
        by_severity[models.SeverityEnum(row.severity).value] += 1
        total_cost += row.total_cost or 0.0
        labor_hours += row.labor_hours or 0.0
        downtime += row.downtime_hours or 0.0

    return schemas.ServicesSummary(
        total_services=len(rows),
        by_type=by_type,
        by_severity=by_severity,
        total_cost=round(total_cost, 2),
        total_labor_hours=round(labor_hours, 2),
        total_downtime_hours=round(downtime, 2),
        average_cost=round(total_cost / len(rows), 2) if rows else 0.0,
    )


def list_technicians(db: Session) -> List[str]:
    rows = (
        db.query(models.Service.technician)
        .filter(models.Service.technician.isnot(None))
        .distinct()
        .order_by(models.Service.technician.asc())
        .all()
    )
    return [name for (name,) in rows if name and name.strip()]


def get_services_by_technician(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[schemas.TechnicianStats]:
    rows = _apply_date_range(db.query(models.Service), date_from, date_to).all()

    stats: Dict[str, schemas.TechnicianStats] = {}
    for row in rows:
        name = (row.technician or "").strip() or UNASSIGNED_TECHNICIAN
        entry = stats.get(name)
        if entry is None:
            entry = schemas.TechnicianStats(
                technician=name,
                services=0,
                total_cost=0.0,
                labor_hours=0.0,
                downtime_hours=0.0,
            )
            stats[name] = entry
        entry.services += 1
        entry.total_cost += row.total_cost or 0.0
        entry.labor_hours += row.labor_hours or 0.0
        entry.downtime_hours += row.downtime_hours or 0.0

    return sorted(stats.values(), key=lambda s: (-s.total_cost, s.technician))


def get_monthly_costs(db: Session, year: Optional[int] = None) -> List[schemas.MonthlyCost]:
    year = year or date.today().year
    start, end = year_bounds(year)
    buckets = empty_month_buckets(year, "total_cost")

    rows = (
        db.query(models.Service.service_date, models.Service.total_cost)
        .filter(models.Service.service_date >= start, models.Service.service_date <= end)
        .all()
    )
    for service_date, total_cost in rows:
        buckets[service_date.month - 1]["total_cost"] += total_cost or 0.0

    return [
        schemas.MonthlyCost(
            month=b["month"],
            label=b["label"],
            total_cost=round(b["total_cost"], 2),
        )
        for b in buckets
    ]
