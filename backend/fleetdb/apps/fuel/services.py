# backend/fleetdb/apps/fuel/services.py
#
# Fuel consumption records:
# - efficiency / total cost derivation on write,
# - horometer advance from the end reading,
# - aggregations for the fuel dashboard (trends, comparison, alerts).

from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, timedelta
from typing import Dict, List, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from ...constants import (
    FUEL_ALERT_WINDOW_DAYS,
    FUEL_COMPARISON_WINDOW_DAYS,
    FUEL_COST_ALERT,
    FUEL_COST_HIGH,
    FUEL_EFFICIENCY_ALERT_LPH,
    FUEL_EFFICIENCY_HIGH_LPH,
)
from ...utils.periods import empty_month_buckets, months_ago, year_bounds
from ..units import models as unit_models
from ..units import services as unit_services
from . import models, schemas

logger = logging.getLogger(__name__)


def compute_efficiency(liters: float, hours: float) -> float:
    if not hours or hours <= 0:
        return 0.0
    return round(liters / hours, 4)


def compute_total_cost(liters: float, cost_per_liter: float) -> float:
    return round((liters or 0.0) * (cost_per_liter or 0.0), 2)


def _validate_ranges(
    period_start: date,
    period_end: date,
    odometer_start: float,
    odometer_end: float,
) -> None:
    if period_end < period_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="period_end must be on or after period_start.",
        )
    if odometer_end < odometer_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="odometer_end must be greater than or equal to odometer_start.",
        )


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def get_fuel_record(db: Session, record_id: str) -> Optional[models.FuelConsumption]:
    return db.get(models.FuelConsumption, record_id)


def get_fuel_record_or_404(db: Session, record_id: str) -> models.FuelConsumption:
    record = get_fuel_record(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Fuel record not found")
    return record


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


def create_fuel_record(db: Session, data: schemas.FuelRecordCreate) -> models.FuelConsumption:
    unit = unit_services.get_unit_or_404(db, data.unit_id)
    _validate_ranges(data.period_start, data.period_end, data.odometer_start, data.odometer_end)

    record = models.FuelConsumption(**data.model_dump())
    record.efficiency_lph = compute_efficiency(data.liters_consumed, data.hours_operated)
    record.total_cost = compute_total_cost(data.liters_consumed, data.cost_per_liter)
    db.add(record)
    db.flush()

    unit_services.advance_unit_hours(db, unit, data.odometer_end)
    return record


def update_fuel_record(
    db: Session,
    record: models.FuelConsumption,
    data: schemas.FuelRecordUpdate,
) -> models.FuelConsumption:
    changes = data.model_dump(exclude_unset=True)
    for field, value in changes.items():
        if value is None and field != "notes":
            continue
        setattr(record, field, value)

    _validate_ranges(
        record.period_start,
        record.period_end,
        record.odometer_start,
        record.odometer_end,
    )

    if {"liters_consumed", "hours_operated", "cost_per_liter"} & changes.keys():
        record.efficiency_lph = compute_efficiency(record.liters_consumed, record.hours_operated)
        record.total_cost = compute_total_cost(record.liters_consumed, record.cost_per_liter)
    db.flush()

    if changes.get("odometer_end") is not None:
        unit = unit_services.get_unit_or_404(db, record.unit_id)
        unit_services.advance_unit_hours(db, unit, record.odometer_end)
    return record


def delete_fuel_record(db: Session, record: models.FuelConsumption) -> None:
    db.delete(record)
    db.flush()


# ---------------------------------------------------------------------------
# QUERIES
# ---------------------------------------------------------------------------


def list_fuel_records_for_unit(db: Session, unit_id: str) -> List[models.FuelConsumption]:
    return (
        db.query(models.FuelConsumption)
        .filter(models.FuelConsumption.unit_id == unit_id)
        .order_by(models.FuelConsumption.period_start.desc())
        .all()
    )


def list_fuel_records(
    db: Session,
    *,
    unit_id: Optional[str] = None,
    period_type: Optional[models.PeriodTypeEnum] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> List[models.FuelConsumption]:
    query = db.query(models.FuelConsumption)
    if unit_id:
        query = query.filter(models.FuelConsumption.unit_id == unit_id)
    if period_type:
        query = query.filter(models.FuelConsumption.period_type == period_type)
    if date_from:
        query = query.filter(models.FuelConsumption.period_start >= date_from)
    if date_to:
        query = query.filter(models.FuelConsumption.period_end <= date_to)
    return query.order_by(models.FuelConsumption.period_start.desc()).all()


def get_fuel_summary(
    db: Session,
    *,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> schemas.FuelSummary:
    records = list_fuel_records(db, date_from=date_from, date_to=date_to)
    if not records:
        return schemas.FuelSummary()

    efficiencies = [r.efficiency_lph or 0.0 for r in records]
    positive = [e for e in efficiencies if e > 0]

    return schemas.FuelSummary(
        total_records=len(records),
        total_liters=round(sum(r.liters_consumed or 0.0 for r in records), 2),
        total_hours=round(sum(r.hours_operated or 0.0 for r in records), 2),
        total_cost=round(sum(r.total_cost or 0.0 for r in records), 2),
        average_efficiency=round(_mean(efficiencies), 2),
        best_efficiency=min(positive) if positive else None,
        worst_efficiency=max(efficiencies),
    )


def get_fuel_trends(
    db: Session,
    *,
    unit_id: Optional[str] = None,
    months: int = 12,
    today: Optional[date] = None,
) -> List[schemas.FuelTrendPoint]:
    today = today or date.today()
    query = db.query(models.FuelConsumption).filter(
        models.FuelConsumption.period_start >= months_ago(today, months)
    )
    if unit_id:
        query = query.filter(models.FuelConsumption.unit_id == unit_id)

    buckets: "OrderedDict[str, Dict]" = OrderedDict()
    for record in query.order_by(models.FuelConsumption.period_start.asc()).all():
        key = record.period_start.strftime("%Y-%m")
        bucket = buckets.setdefault(key, {"liters": 0.0, "cost": 0.0, "eff": []})
        bucket["liters"] += record.liters_consumed or 0.0
        bucket["cost"] += record.total_cost or 0.0
        bucket["eff"].append(record.efficiency_lph or 0.0)

    return [
        schemas.FuelTrendPoint(
            period=key,
            liters=round(b["liters"], 2),
            cost=round(b["cost"], 2),
            average_efficiency=round(_mean(b["eff"]), 2),
            records=len(b["eff"]),
        )
        for key, b in buckets.items()
    ]


def _records_by_unit(db: Session, since: date) -> Dict[str, List[models.FuelConsumption]]:
    grouped: Dict[str, List[models.FuelConsumption]] = {}
    rows = (
        db.query(models.FuelConsumption)
        .filter(models.FuelConsumption.period_start >= since)
        .order_by(models.FuelConsumption.period_start.asc())
        .all()
    )
    for record in rows:
        grouped.setdefault(record.unit_id, []).append(record)
    return grouped


def get_efficiency_comparison(
    db: Session,
    *,
    days: int = FUEL_COMPARISON_WINDOW_DAYS,
    today: Optional[date] = None,
) -> List[schemas.UnitEfficiency]:
    today = today or date.today()
    grouped = _records_by_unit(db, today - timedelta(days=days))
    if not grouped:
        return []

    units = {
        u.id: u
        for u in db.query(unit_models.Unit).filter(unit_models.Unit.id.in_(grouped.keys())).all()
    }

    comparison: List[schemas.UnitEfficiency] = []
    for unit_id, records in grouped.items():
        unit = units.get(unit_id)
        readings = [r.efficiency_lph or 0.0 for r in records]
        comparison.append(
            schemas.UnitEfficiency(
                unit_id=unit_id,
                unit_number=unit.unit_number if unit else "",
                brand=unit.brand if unit else "",
                model=unit.model if unit else "",
                fuel_type=unit_models.FuelTypeEnum(unit.fuel_type).value if unit else "",
                records=len(records),
                total_liters=round(sum(r.liters_consumed or 0.0 for r in records), 2),
                total_hours=round(sum(r.hours_operated or 0.0 for r in records), 2),
                total_cost=round(sum(r.total_cost or 0.0 for r in records), 2),
                average_efficiency=round(_mean(readings), 2),
                best_efficiency=min(readings),
                worst_efficiency=max(readings),
            )
        )
    return sorted(comparison, key=lambda c: c.unit_number)


def get_fuel_alerts(
    db: Session,
    *,
    days: int = FUEL_ALERT_WINDOW_DAYS,
    today: Optional[date] = None,
) -> List[schemas.FuelAlert]:
    """
    Per-unit alerts over the recent window:
      - mean efficiency above the L/h threshold,
      - mean record cost above the cost threshold.
    """
    today = today or date.today()
    grouped = _records_by_unit(db, today - timedelta(days=days))
    if not grouped:
        return []

    units = {
        u.id: u
        for u in db.query(unit_models.Unit).filter(unit_models.Unit.id.in_(grouped.keys())).all()
    }

    alerts: List[schemas.FuelAlert] = []
    for unit_id, records in grouped.items():
        unit_number = units[unit_id].unit_number if unit_id in units else ""
        avg_eff = _mean([r.efficiency_lph or 0.0 for r in records])
        avg_cost = _mean([r.total_cost or 0.0 for r in records])

        if avg_eff > FUEL_EFFICIENCY_ALERT_LPH:
            alerts.append(
                schemas.FuelAlert(
                    unit_id=unit_id,
                    unit_number=unit_number,
                    alert_type="efficiency",
                    severity="high" if avg_eff > FUEL_EFFICIENCY_HIGH_LPH else "medium",
                    value=round(avg_eff, 2),
                    threshold=FUEL_EFFICIENCY_ALERT_LPH,
                    message=f"Poor efficiency: {avg_eff:.2f} L/h",
                )
            )
        if avg_cost > FUEL_COST_ALERT:
            alerts.append(
                schemas.FuelAlert(
                    unit_id=unit_id,
                    unit_number=unit_number,
                    alert_type="cost",
                    severity="high" if avg_cost > FUEL_COST_HIGH else "medium",
                    value=round(avg_cost, 2),
                    threshold=FUEL_COST_ALERT,
                    message=f"High fuel cost: ${avg_cost:.2f}",
                )
            )

    if alerts:
        logger.debug("Fuel alerts raised: %d", len(alerts))
    return alerts


def get_monthly_fuel_costs(db: Session, year: Optional[int] = None) -> List[schemas.MonthlyFuelCost]:
    year = year or date.today().year
    start, end = year_bounds(year)
    buckets = empty_month_buckets(year, "liters", "total_cost")

    rows = (
        db.query(
            models.FuelConsumption.period_start,
            models.FuelConsumption.liters_consumed,
            models.FuelConsumption.total_cost,
        )
        .filter(
            models.FuelConsumption.period_start >= start,
            models.FuelConsumption.period_start <= end,
        )
        .all()
    )
    for period_start, liters, total_cost in rows:
        bucket = buckets[period_start.month - 1]
        bucket["liters"] += liters or 0.0
        bucket["total_cost"] += total_cost or 0.0

    return [
        schemas.MonthlyFuelCost(
            month=b["month"],
            label=b["label"],
            liters=round(b["liters"], 2),
            total_cost=round(b["total_cost"], 2),
        )
        for b in buckets
    ]
