# backend/fleetdb/apps/reports/services.py
#
# Read-only aggregations across units, services, fuel, schedules and
# anomalies for the reports page and the dashboard.

from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timezone
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...constants import AVAILABILITY_PERIOD_HOURS, DUE_MEDIUM_HOURS, DUE_SOON_HOURS
from ...utils.periods import empty_month_buckets, year_bounds
from ..anomalies import models as anomaly_models
from ..anomalies import services as anomaly_services
from ..fuel import models as fuel_models
from ..fuel import services as fuel_services
from ..maintenance import models as maintenance_models
from ..maintenance import services as maintenance_services
from ..service_records import models as service_models
from ..service_records import services as service_services
from ..units import models as unit_models
from ..units import services as unit_services
from . import schemas

logger = logging.getLogger(__name__)

COST_CATEGORIES = (
    ("preventive", "Preventive maintenance"),
    ("corrective", "Corrective services"),
    ("fuel", "Fuel"),
    ("parts", "Parts and materials"),
)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes for timezone-aware columns.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _percentages(amounts: List[float], total: float) -> List[int]:
    """Integer shares of `total`; rounding remainder goes to the first item."""
    if total <= 0:
        return [0 for _ in amounts]
    # Halves round up.
    shares = [math.floor(a / total * 100 + 0.5) for a in amounts]
    shares[0] += 100 - sum(shares)
    return shares


# ---------------------------------------------------------------------------
# Costs
# ---------------------------------------------------------------------------


def get_cost_breakdown(db: Session, date_from: date, date_to: date) -> schemas.CostBreakdown:
    services = (
        db.query(
            service_models.Service.service_type,
            service_models.Service.total_cost,
            service_models.Service.parts_cost,
        )
        .filter(
            service_models.Service.service_date >= date_from,
            service_models.Service.service_date <= date_to,
        )
        .all()
    )

    preventive = corrective = parts = 0.0
    for service_type, total_cost, parts_cost in services:
        if service_type == service_models.ServiceTypeEnum.PREVENTIVE:
            preventive += total_cost or 0.0
        elif service_type == service_models.ServiceTypeEnum.CORRECTIVE:
            corrective += total_cost or 0.0
        parts += parts_cost or 0.0

    fuel = (
        db.query(func.coalesce(func.sum(fuel_models.FuelConsumption.total_cost), 0.0))
        .filter(
            fuel_models.FuelConsumption.period_start >= date_from,
            fuel_models.FuelConsumption.period_start <= date_to,
        )
        .scalar()
    ) or 0.0

    amounts = {"preventive": preventive, "corrective": corrective, "fuel": fuel, "parts": parts}
    total = preventive + corrective + fuel + parts
    shares = _percentages([amounts[key] for key, _ in COST_CATEGORIES], total)

    return schemas.CostBreakdown(
        date_from=date_from,
        date_to=date_to,
        preventive=round(preventive, 2),
        corrective=round(corrective, 2),
        parts=round(parts, 2),
        fuel=round(fuel, 2),
        total=round(total, 2),
        items=[
            schemas.CostItem(category=label, amount=round(amounts[key], 2), percentage=share)
            for (key, label), share in zip(COST_CATEGORIES, shares)
        ],
    )


def get_monthly_trend(db: Session, year: Optional[int] = None) -> List[schemas.MonthlyTrendRow]:
    year = year or date.today().year
    start, end = year_bounds(year)
    buckets = empty_month_buckets(year, "preventive", "corrective", "fuel")

    for service_type, total_cost, service_date in (
        db.query(
            service_models.Service.service_type,
            service_models.Service.total_cost,
            service_models.Service.service_date,
        )
        .filter(
            service_models.Service.service_date >= start,
            service_models.Service.service_date <= end,
        )
        .all()
    ):
        bucket = buckets[service_date.month - 1]
        if service_type == service_models.ServiceTypeEnum.PREVENTIVE:
            bucket["preventive"] += total_cost or 0.0
        elif service_type == service_models.ServiceTypeEnum.CORRECTIVE:
            bucket["corrective"] += total_cost or 0.0

    for row in fuel_services.get_monthly_fuel_costs(db, year):
        buckets[row.month - 1]["fuel"] += row.total_cost

    return [
        schemas.MonthlyTrendRow(
            month=b["month"],
            label=b["label"],
            preventive=round(b["preventive"], 2),
            corrective=round(b["corrective"], 2),
            fuel=round(b["fuel"], 2),
        )
        for b in buckets
    ]


# ---------------------------------------------------------------------------
# Availability
# ---------------------------------------------------------------------------


def availability_pct(total_downtime: float) -> float:
    return max(0.0, round((1 - total_downtime / AVAILABILITY_PERIOD_HOURS) * 100, 1))


def get_downtime_report(db: Session, date_from: date, date_to: date) -> List[schemas.DowntimeRow]:
    rows = (
        db.query(
            service_models.Service.unit_id,
            unit_models.Unit.unit_number,
            service_models.Service.service_type,
            service_models.Service.downtime_hours,
        )
        .join(unit_models.Unit, unit_models.Unit.id == service_models.Service.unit_id)
        .filter(
            service_models.Service.service_date >= date_from,
            service_models.Service.service_date <= date_to,
        )
        .all()
    )

    by_unit: Dict[str, schemas.DowntimeRow] = {}
    for unit_id, unit_number, service_type, downtime in rows:
        entry = by_unit.setdefault(
            unit_id,
            schemas.DowntimeRow(unit_id=unit_id, unit_number=unit_number),
        )
        hours = downtime or 0.0
        entry.total_downtime += hours
        if service_type == service_models.ServiceTypeEnum.PREVENTIVE:
            entry.planned_downtime += hours
        else:
            entry.unplanned_downtime += hours

    for entry in by_unit.values():
        entry.availability = availability_pct(entry.total_downtime)

    return sorted(by_unit.values(), key=lambda r: r.unit_number)


# ---------------------------------------------------------------------------
# Maintenance outlook + alerts
# ---------------------------------------------------------------------------


def due_priority(schedule_status, remaining_hours: float) -> str:
    if schedule_status == maintenance_models.ScheduleStatusEnum.OVERDUE:
        return "high"
    if remaining_hours <= DUE_SOON_HOURS:
        return "high"
    if remaining_hours <= DUE_MEDIUM_HOURS:
        return "medium"
    return "low"


def get_upcoming_maintenance(db: Session, limit: int = 10) -> List[schemas.UpcomingMaintenance]:
    rows = (
        db.query(maintenance_models.MaintenanceSchedule, unit_models.Unit)
        .join(unit_models.Unit, unit_models.Unit.id == maintenance_models.MaintenanceSchedule.unit_id)
        .filter(
            maintenance_models.MaintenanceSchedule.status.in_(
                maintenance_models.OPEN_SCHEDULE_STATUSES
            )
        )
        .all()
    )

    upcoming = []
    for schedule, unit in rows:
        current = unit.current_hours or 0.0
        remaining = schedule.next_service_hours - current
        upcoming.append(
            schemas.UpcomingMaintenance(
                schedule_id=schedule.id,
                unit_id=unit.id,
                unit_number=unit.unit_number,
                description=schedule.description,
                interval_hours=schedule.interval_hours,
                next_service_hours=schedule.next_service_hours,
                current_hours=current,
                remaining_hours=round(remaining, 1),
                status=maintenance_models.ScheduleStatusEnum(schedule.status).value,
                priority=due_priority(schedule.status, remaining),
                estimated_cost=schedule.estimated_cost or 0.0,
            )
        )

    upcoming.sort(key=lambda u: (u.remaining_hours, u.unit_number))
    return upcoming[:limit] if limit else upcoming


def get_alerts(db: Session, *, today: Optional[date] = None) -> List[schemas.AlertItem]:
    now = datetime.now(timezone.utc)
    alerts: List[schemas.AlertItem] = []

    for schedule in maintenance_services.list_schedules(db, overdue_only=True):
        unit = schedule.unit
        alerts.append(
            schemas.AlertItem(
                source="maintenance",
                severity="high",
                unit_id=schedule.unit_id,
                unit_number=unit.unit_number if unit else "",
                message=(
                    f"Maintenance overdue: {schedule.description or 'scheduled service'} "
                    f"(due at {schedule.next_service_hours:g}h)"
                ),
                reference_id=schedule.id,
                timestamp=_as_utc(schedule.updated_at or now),
            )
        )

    for fuel_alert in fuel_services.get_fuel_alerts(db, today=today):
        alerts.append(
            schemas.AlertItem(
                source="fuel",
                severity=fuel_alert.severity,
                unit_id=fuel_alert.unit_id,
                unit_number=fuel_alert.unit_number,
                message=fuel_alert.message,
                timestamp=now,
            )
        )

    blocking = (
        db.query(anomaly_models.AnomalyReport)
        .filter(
            anomaly_models.AnomalyReport.status.in_(anomaly_models.UNRESOLVED_STATUSES),
            anomaly_models.AnomalyReport.severity.in_(anomaly_models.BLOCKING_SEVERITIES),
        )
        .all()
    )
    for anomaly in blocking:
        unit = anomaly.unit
        alerts.append(
            schemas.AlertItem(
                source="anomaly",
                severity=anomaly_models.AnomalySeverityEnum(anomaly.severity).value,
                unit_id=anomaly.unit_id,
                unit_number=unit.unit_number if unit else "",
                message=anomaly.title,
                reference_id=anomaly.id,
                timestamp=_as_utc(datetime.combine(anomaly.reported_date, time.min)),
            )
        )

    alerts.sort(key=lambda a: a.timestamp, reverse=True)
    return alerts


# ---------------------------------------------------------------------------
# Dashboard
# ---------------------------------------------------------------------------


def get_dashboard(db: Session, *, today: Optional[date] = None) -> schemas.Dashboard:
    today = today or date.today()
    units_summary = unit_services.get_units_summary(db)
    anomalies_summary = anomaly_services.get_anomalies_summary(db)

    services_total = (
        db.query(func.coalesce(func.sum(service_models.Service.total_cost), 0.0)).scalar()
    ) or 0.0

    unresolved = (
        db.query(anomaly_models.AnomalyReport.severity, func.count(anomaly_models.AnomalyReport.id))
        .filter(anomaly_models.AnomalyReport.status.in_(anomaly_models.UNRESOLVED_STATUSES))
        .group_by(anomaly_models.AnomalyReport.severity)
        .all()
    )
    counts = {anomaly_models.AnomalySeverityEnum(sev).value: n for sev, n in unresolved}

    return schemas.Dashboard(
        units=units_summary,
        maintenance=maintenance_services.get_maintenance_summary(db),
        services_total_cost=round(services_total, 2),
        anomalies=schemas.DashboardAnomalies(
            open=sum(counts.values()),
            critical=counts.get("critical", 0),
            high=counts.get("high", 0),
        ),
        anomalies_summary=anomalies_summary,
        fuel_trends=fuel_services.get_fuel_trends(db, months=6, today=today),
        monthly_service_costs=service_services.get_monthly_costs(db, today.year),
        unit_status_distribution={
            "active": units_summary.active,
            "maintenance": units_summary.maintenance,
            "inactive": units_summary.inactive,
        },
    )
