# backend/fleetdb/apps/anomalies/services.py
#
# Anomaly reports and the unit availability rules they drive:
# - filing (or escalating to) HIGH/CRITICAL puts the unit in MAINTENANCE,
# - resolving / closing / deleting returns it to ACTIVE once no unresolved
#   HIGH/CRITICAL report remains,
# - INACTIVE units are left alone either way.

from __future__ import annotations

import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..units import models as unit_models
from ..units import services as unit_services
from . import models, schemas

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = {"title", "description", "severity", "status", "category", "priority"}


def get_anomaly(db: Session, anomaly_id: str) -> Optional[models.AnomalyReport]:
    return db.get(models.AnomalyReport, anomaly_id)


def get_anomaly_or_404(db: Session, anomaly_id: str) -> models.AnomalyReport:
    anomaly = get_anomaly(db, anomaly_id)
    if not anomaly:
        raise HTTPException(status_code=404, detail="Anomaly not found")
    return anomaly


# ---------------------------------------------------------------------------
# Unit status side effects
# ---------------------------------------------------------------------------


def _hold_unit_for_maintenance(db: Session, unit_id: str, anomaly: models.AnomalyReport) -> None:
    unit = unit_services.get_unit_or_404(db, unit_id)
    if unit.status == unit_models.UnitStatusEnum.INACTIVE:
        return
    unit_services.set_unit_status(
        db,
        unit,
        unit_models.UnitStatusEnum.MAINTENANCE,
        reason=f"{models.AnomalySeverityEnum(anomaly.severity).value} anomaly {anomaly.id}",
    )


def has_blocking_anomalies(db: Session, unit_id: str) -> bool:
    count = (
        db.query(func.count(models.AnomalyReport.id))
        .filter(
            models.AnomalyReport.unit_id == unit_id,
            models.AnomalyReport.status.in_(models.UNRESOLVED_STATUSES),
            models.AnomalyReport.severity.in_(models.BLOCKING_SEVERITIES),
        )
        .scalar()
    )
    return bool(count)


def reevaluate_unit_status(db: Session, unit_id: str) -> bool:
    """
    Return a MAINTENANCE unit to ACTIVE when nothing blocks it any more.
    Returns True when the unit status changed.
    """
    unit = unit_services.get_unit(db, unit_id)
    if unit is None or unit.status != unit_models.UnitStatusEnum.MAINTENANCE:
        return False
    db.flush()
    if has_blocking_anomalies(db, unit_id):
        return False
    return unit_services.set_unit_status(
        db,
        unit,
        unit_models.UnitStatusEnum.ACTIVE,
        reason="no unresolved high/critical anomalies",
    )


# ---------------------------------------------------------------------------
# CRUD + lifecycle
# ---------------------------------------------------------------------------


def create_anomaly(db: Session, data: schemas.AnomalyCreate) -> models.AnomalyReport:
    unit_services.get_unit_or_404(db, data.unit_id)

    values = data.model_dump()
    values["reported_date"] = data.reported_date or date.today()
    anomaly = models.AnomalyReport(**values)
    anomaly.status = models.AnomalyStatusEnum.OPEN
    db.add(anomaly)
    db.flush()

    if anomaly.severity in models.BLOCKING_SEVERITIES:
        _hold_unit_for_maintenance(db, anomaly.unit_id, anomaly)
    return anomaly


def update_anomaly(
    db: Session,
    anomaly: models.AnomalyReport,
    data: schemas.AnomalyUpdate,
) -> models.AnomalyReport:
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field in _REQUIRED_FIELDS:
            continue
        setattr(anomaly, field, value)

    new_status = changes.get("status")
    if (
        new_status in (models.AnomalyStatusEnum.RESOLVED, models.AnomalyStatusEnum.CLOSED)
        and anomaly.resolved_date is None
    ):
        anomaly.resolved_date = date.today()
    db.flush()

    status_or_severity = "status" in changes or "severity" in changes
    if anomaly.is_blocking and status_or_severity:
        _hold_unit_for_maintenance(db, anomaly.unit_id, anomaly)
    elif status_or_severity:
        reevaluate_unit_status(db, anomaly.unit_id)
    return anomaly


def resolve_anomaly(
    db: Session,
    anomaly: models.AnomalyReport,
    *,
    actual_cost: Optional[float],
    resolution_notes: Optional[str],
    preventive_actions: Optional[str] = None,
    assigned_to: Optional[str] = None,
    resolved_date: Optional[date] = None,
) -> models.AnomalyReport:
    if anomaly.status == models.AnomalyStatusEnum.CLOSED:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Closed anomalies cannot be resolved.",
        )

    anomaly.status = models.AnomalyStatusEnum.RESOLVED
    anomaly.resolved_date = resolved_date or date.today()
    if actual_cost is not None:
        anomaly.actual_cost = actual_cost
    if resolution_notes is not None:
        anomaly.resolution_notes = resolution_notes
    if preventive_actions is not None:
        anomaly.preventive_actions = preventive_actions
    if assigned_to:
        anomaly.assigned_to = assigned_to
    db.flush()

    reevaluate_unit_status(db, anomaly.unit_id)
    return anomaly


def close_anomaly(
    db: Session,
    anomaly: models.AnomalyReport,
    *,
    notes: Optional[str] = None,
) -> models.AnomalyReport:
    anomaly.status = models.AnomalyStatusEnum.CLOSED
    if anomaly.resolved_date is None:
        anomaly.resolved_date = date.today()
    if notes:
        if anomaly.resolution_notes:
            anomaly.resolution_notes = f"{anomaly.resolution_notes}\n{notes}"
        else:
            anomaly.resolution_notes = notes
    db.flush()

    reevaluate_unit_status(db, anomaly.unit_id)
    return anomaly


def assign_anomaly(
    db: Session,
    anomaly: models.AnomalyReport,
    assigned_to: str,
) -> models.AnomalyReport:
    if anomaly.status in (models.AnomalyStatusEnum.RESOLVED, models.AnomalyStatusEnum.CLOSED):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot assign a {models.AnomalyStatusEnum(anomaly.status).value} anomaly.",
        )
    anomaly.assigned_to = assigned_to
    anomaly.status = models.AnomalyStatusEnum.IN_PROGRESS
    db.flush()
    return anomaly


def delete_anomaly(db: Session, anomaly: models.AnomalyReport) -> None:
    unit_id = anomaly.unit_id
    db.delete(anomaly)
    db.flush()
    reevaluate_unit_status(db, unit_id)


# ---------------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------------


def _apply_date_range(query, date_from: Optional[date], date_to: Optional[date]):
    if date_from:
        query = query.filter(models.AnomalyReport.reported_date >= date_from)
    if date_to:
        query = query.filter(models.AnomalyReport.reported_date <= date_to)
    return query


def list_anomalies(
    db: Session,
    *,
    unit_id: Optional[str] = None,
    status: Optional[models.AnomalyStatusEnum] = None,
    severity: Optional[models.AnomalySeverityEnum] = None,
    category: Optional[models.AnomalyCategoryEnum] = None,
    priority: Optional[models.AnomalyPriorityEnum] = None,
    assigned_to: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
) -> List[models.AnomalyReport]:
    query = db.query(models.AnomalyReport)
    if unit_id:
        query = query.filter(models.AnomalyReport.unit_id == unit_id)
    if status:
        query = query.filter(models.AnomalyReport.status == status)
    if severity:
        query = query.filter(models.AnomalyReport.severity == severity)
    if category:
        query = query.filter(models.AnomalyReport.category == category)
    if priority:
        query = query.filter(models.AnomalyReport.priority == priority)
    if assigned_to:
        query = query.filter(models.AnomalyReport.assigned_to == assigned_to)
    query = _apply_date_range(query, date_from, date_to)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(
            or_(
                func.lower(models.AnomalyReport.title).like(pattern),
                func.lower(models.AnomalyReport.description).like(pattern),
            )
        )
    return query.order_by(
        models.AnomalyReport.reported_date.desc(),
        models.AnomalyReport.created_at.desc(),
    ).all()


def list_anomalies_for_unit(db: Session, unit_id: str) -> List[models.AnomalyReport]:
    return list_anomalies(db, unit_id=unit_id)


def get_anomalies_summary(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> schemas.AnomaliesSummary:
    rows = _apply_date_range(db.query(models.AnomalyReport), date_from, date_to).all()

    summary = schemas.AnomaliesSummary(total=len(rows))
    for row in rows:
        status_value = models.AnomalyStatusEnum(row.status).value
        setattr(summary, status_value, getattr(summary, status_value) + 1)

        severity_field = f"{models.AnomalySeverityEnum(row.severity).value}_severity"
        setattr(summary, severity_field, getattr(summary, severity_field) + 1)

        category_value = models.AnomalyCategoryEnum(row.category).value
        setattr(summary, category_value, getattr(summary, category_value) + 1)

        if row.priority == models.AnomalyPriorityEnum.URGENT:
            summary.urgent_priority += 1
        elif row.priority == models.AnomalyPriorityEnum.HIGH:
            summary.high_priority += 1

        summary.total_estimated_cost += row.estimated_cost or 0.0
        summary.total_actual_cost += row.actual_cost or 0.0
        summary.total_downtime += row.downtime_hours or 0.0

    return summary


def list_assignees(db: Session) -> List[str]:
    rows = (
        db.query(models.AnomalyReport.assigned_to)
        .filter(models.AnomalyReport.assigned_to.isnot(None))
        .distinct()
        .order_by(models.AnomalyReport.assigned_to.asc())
        .all()
    )
    return [name for (name,) in rows if name]


def list_reporters(db: Session) -> List[str]:
    rows = (
        db.query(models.AnomalyReport.reported_by)
        .filter(models.AnomalyReport.reported_by.isnot(None))
        .distinct()
        .order_by(models.AnomalyReport.reported_by.asc())
        .all()
    )
    return [name for (name,) in rows if name]


def get_anomalies_by_category(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[schemas.CategoryStats]:
    rows = _apply_date_range(db.query(models.AnomalyReport), date_from, date_to).all()

    stats: Dict[str, schemas.CategoryStats] = {}
    for row in rows:
        category = models.AnomalyCategoryEnum(row.category).value
        entry = stats.setdefault(category, schemas.CategoryStats(category=category))
        entry.total += 1
        severity = models.AnomalySeverityEnum(row.severity).value
        setattr(entry, severity, getattr(entry, severity) + 1)
        entry.estimated_cost += row.estimated_cost or 0.0
        entry.actual_cost += row.actual_cost or 0.0

    return sorted(stats.values(), key=lambda s: (-s.total, s.category))
