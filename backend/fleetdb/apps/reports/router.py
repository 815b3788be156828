# backend/fleetdb/apps/reports/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...database import get_read_db
from ...utils.periods import resolve_period
from . import schemas, services

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/period", response_model=schemas.ReportPeriod)
def report_period(
    period: str = "current_month",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
):
    start, end = resolve_period(period, date_from=date_from, date_to=date_to)
    return schemas.ReportPeriod(period=period, date_from=start, date_to=end)


@router.get("/costs", response_model=schemas.CostBreakdown)
def cost_breakdown(
    period: str = "current_month",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    start, end = resolve_period(period, date_from=date_from, date_to=date_to)
    return services.get_cost_breakdown(db, start, end)


@router.get("/monthly-trend", response_model=List[schemas.MonthlyTrendRow])
def monthly_trend(year: Optional[int] = None, db: Session = Depends(get_read_db)):
    return services.get_monthly_trend(db, year)


@router.get("/downtime", response_model=List[schemas.DowntimeRow])
def downtime_report(
    period: str = "current_month",
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    start, end = resolve_period(period, date_from=date_from, date_to=date_to)
    return services.get_downtime_report(db, start, end)


@router.get("/upcoming-maintenance", response_model=List[schemas.UpcomingMaintenance])
def upcoming_maintenance(
    limit: int = Query(10, ge=0, le=500),
    db: Session = Depends(get_read_db),
):
    return services.get_upcoming_maintenance(db, limit)


@router.get("/alerts", response_model=List[schemas.AlertItem])
def alerts(db: Session = Depends(get_read_db)):
    return services.get_alerts(db)


@router.get("/dashboard", response_model=schemas.Dashboard)
def dashboard(db: Session = Depends(get_read_db)):
    return services.get_dashboard(db)
