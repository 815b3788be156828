# backend/fleetdb/apps/anomalies/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...utils.filters import parse_enum_filter, parse_text_filter
from ..units import services as unit_services
from . import models, schemas, services

router = APIRouter(prefix="/anomalies", tags=["anomalies"])


@router.get("/", response_model=List[schemas.AnomalyRead])
def list_anomalies(
    unit_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    severity: Optional[str] = None,
    category: Optional[str] = None,
    priority: Optional[str] = None,
    assigned_to: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_anomalies(
        db,
        unit_id=parse_text_filter(unit_id),
        status=parse_enum_filter(status_filter, models.AnomalyStatusEnum, "status"),
        severity=parse_enum_filter(severity, models.AnomalySeverityEnum, "severity"),
        category=parse_enum_filter(category, models.AnomalyCategoryEnum, "category"),
        priority=parse_enum_filter(priority, models.AnomalyPriorityEnum, "priority"),
        assigned_to=parse_text_filter(assigned_to),
        date_from=date_from,
        date_to=date_to,
        search=parse_text_filter(search),
    )


@router.get("/summary", response_model=schemas.AnomaliesSummary)
def anomalies_summary(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.get_anomalies_summary(db, date_from=date_from, date_to=date_to)


@router.get("/assignees", response_model=List[str])
def list_assignees(db: Session = Depends(get_read_db)):
    return services.list_assignees(db)


@router.get("/reporters", response_model=List[str])
def list_reporters(db: Session = Depends(get_read_db)):
    return services.list_reporters(db)


@router.get("/by-category", response_model=List[schemas.CategoryStats])
def anomalies_by_category(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.get_anomalies_by_category(db, date_from=date_from, date_to=date_to)


@router.get("/unit/{unit_id}", response_model=List[schemas.AnomalyRead])
def list_anomalies_for_unit(unit_id: str, db: Session = Depends(get_read_db)):
    unit_services.get_unit_or_404(db, unit_id)
    return services.list_anomalies_for_unit(db, unit_id)


@router.post("/", response_model=schemas.AnomalyRead, status_code=status.HTTP_201_CREATED)
def create_anomaly(payload: schemas.AnomalyCreate, db: Session = Depends(get_db)):
    anomaly = services.create_anomaly(db, payload)
    db.commit()
    db.refresh(anomaly)
    return anomaly


@router.get("/{anomaly_id}", response_model=schemas.AnomalyRead)
def get_anomaly(anomaly_id: str, db: Session = Depends(get_read_db)):
    return services.get_anomaly_or_404(db, anomaly_id)


@router.put("/{anomaly_id}", response_model=schemas.AnomalyRead)
def update_anomaly(
    anomaly_id: str,
    payload: schemas.AnomalyUpdate,
    db: Session = Depends(get_db),
):
    anomaly = services.get_anomaly_or_404(db, anomaly_id)
    anomaly = services.update_anomaly(db, anomaly, payload)
    db.commit()
    db.refresh(anomaly)
    return anomaly


@router.post("/{anomaly_id}/resolve", response_model=schemas.AnomalyRead)
def resolve_anomaly(
    anomaly_id: str,
    payload: schemas.AnomalyResolve,
    db: Session = Depends(get_db),
):
    anomaly = services.get_anomaly_or_404(db, anomaly_id)
    anomaly = services.resolve_anomaly(
        db,
        anomaly,
        actual_cost=payload.actual_cost,
        resolution_notes=payload.resolution_notes,
        preventive_actions=payload.preventive_actions,
        assigned_to=payload.assigned_to,
        resolved_date=payload.resolved_date,
    )
    db.commit()
    db.refresh(anomaly)
    return anomaly


@router.post("/{anomaly_id}/close", response_model=schemas.AnomalyRead)
def close_anomaly(
    anomaly_id: str,
    payload: schemas.AnomalyClose,
    db: Session = Depends(get_db),
):
    anomaly = services.get_anomaly_or_404(db, anomaly_id)
    anomaly = services.close_anomaly(db, anomaly, notes=payload.notes)
    db.commit()
    db.refresh(anomaly)
    return anomaly


@router.post("/{anomaly_id}/assign", response_model=schemas.AnomalyRead)
def assign_anomaly(
    anomaly_id: str,
    payload: schemas.AnomalyAssign,
    db: Session = Depends(get_db),
):
    anomaly = services.get_anomaly_or_404(db, anomaly_id)
    anomaly = services.assign_anomaly(db, anomaly, payload.assigned_to)
    db.commit()
    db.refresh(anomaly)
    return anomaly


@router.delete("/{anomaly_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_anomaly(anomaly_id: str, db: Session = Depends(get_db)):
    anomaly = services.get_anomaly_or_404(db, anomaly_id)
    services.delete_anomaly(db, anomaly)
    db.commit()
    return None
