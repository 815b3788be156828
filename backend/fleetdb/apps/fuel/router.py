# backend/fleetdb/apps/fuel/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...constants import FUEL_ALERT_WINDOW_DAYS, FUEL_COMPARISON_WINDOW_DAYS
from ...database import get_db, get_read_db
from ...utils.filters import parse_enum_filter, parse_text_filter
from ..units import services as unit_services
from . import models, schemas, services

router = APIRouter(prefix="/fuel", tags=["fuel"])


@router.get("/", response_model=List[schemas.FuelRecordRead])
def list_fuel_records(
    unit_id: Optional[str] = None,
    period_type: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_fuel_records(
        db,
        unit_id=parse_text_filter(unit_id),
        period_type=parse_enum_filter(period_type, models.PeriodTypeEnum, "period_type"),
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/summary", response_model=schemas.FuelSummary)
def fuel_summary(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.get_fuel_summary(db, date_from=date_from, date_to=date_to)


@router.get("/trends", response_model=List[schemas.FuelTrendPoint])
def fuel_trends(
    unit_id: Optional[str] = None,
    months: int = Query(12, ge=1, le=120),
    db: Session = Depends(get_read_db),
):
    return services.get_fuel_trends(db, unit_id=parse_text_filter(unit_id), months=months)


@router.get("/efficiency-comparison", response_model=List[schemas.UnitEfficiency])
def efficiency_comparison(
    days: int = Query(FUEL_COMPARISON_WINDOW_DAYS, ge=1, le=3650),
    db: Session = Depends(get_read_db),
):
    return services.get_efficiency_comparison(db, days=days)


@router.get("/alerts", response_model=List[schemas.FuelAlert])
def fuel_alerts(
    days: int = Query(FUEL_ALERT_WINDOW_DAYS, ge=1, le=3650),
    db: Session = Depends(get_read_db),
):
    return services.get_fuel_alerts(db, days=days)


@router.get("/monthly-costs", response_model=List[schemas.MonthlyFuelCost])
def monthly_fuel_costs(year: Optional[int] = None, db: Session = Depends(get_read_db)):
    return services.get_monthly_fuel_costs(db, year)


@router.get("/unit/{unit_id}", response_model=List[schemas.FuelRecordRead])
def list_fuel_records_for_unit(unit_id: str, db: Session = Depends(get_read_db)):
    unit_services.get_unit_or_404(db, unit_id)
    return services.list_fuel_records_for_unit(db, unit_id)


@router.post("/", response_model=schemas.FuelRecordRead, status_code=status.HTTP_201_CREATED)
def create_fuel_record(payload: schemas.FuelRecordCreate, db: Session = Depends(get_db)):
    record = services.create_fuel_record(db, payload)
    db.commit()
    db.refresh(record)
    return record


@router.get("/{record_id}", response_model=schemas.FuelRecordRead)
def get_fuel_record(record_id: str, db: Session = Depends(get_read_db)):
    return services.get_fuel_record_or_404(db, record_id)


@router.put("/{record_id}", response_model=schemas.FuelRecordRead)
def update_fuel_record(
    record_id: str,
    payload: schemas.FuelRecordUpdate,
    db: Session = Depends(get_db),
):
    record = services.get_fuel_record_or_404(db, record_id)
    record = services.update_fuel_record(db, record, payload)
    db.commit()
    db.refresh(record)
    return record


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_fuel_record(record_id: str, db: Session = Depends(get_db)):
    record = services.get_fuel_record_or_404(db, record_id)
    services.delete_fuel_record(db, record)
    db.commit()
    return None
