# backend/fleetdb/apps/service_records/router.py

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...utils.filters import parse_enum_filter, parse_text_filter
from ..units import services as unit_services
from . import models, schemas, services

router = APIRouter(prefix="/services", tags=["services"])


@router.get("/", response_model=List[schemas.ServiceRead])
def list_services(
    unit_id: Optional[str] = None,
    service_type: Optional[str] = None,
    severity: Optional[str] = None,
    technician: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_services(
        db,
        unit_id=parse_text_filter(unit_id),
        service_type=parse_enum_filter(service_type, models.ServiceTypeEnum, "service_type"),
        severity=parse_enum_filter(severity, models.SeverityEnum, "severity"),
        technician=parse_text_filter(technician),
        status=parse_enum_filter(status_filter, models.ServiceStatusEnum, "status"),
        date_from=date_from,
        date_to=date_to,
    )


@router.get("/summary", response_model=schemas.ServicesSummary)
def services_summary(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.get_services_summary(db, date_from=date_from, date_to=date_to)


@router.get("/technicians", response_model=List[str])
def list_technicians(db: Session = Depends(get_read_db)):
    return services.list_technicians(db)


@router.get("/by-technician", response_model=List[schemas.TechnicianStats])
def services_by_technician(
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_read_db),
):
    return services.get_services_by_technician(db, date_from=date_from, date_to=date_to)


@router.get("/monthly-costs", response_model=List[schemas.MonthlyCost])
def monthly_costs(year: Optional[int] = None, db: Session = Depends(get_read_db)):
    return services.get_monthly_costs(db, year)


@router.get("/unit/{unit_id}", response_model=List[schemas.ServiceRead])
def list_services_for_unit(unit_id: str, db: Session = Depends(get_read_db)):
    unit_services.get_unit_or_404(db, unit_id)
    return services.list_services_for_unit(db, unit_id)


@router.post("/", response_model=schemas.ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(payload: schemas.ServiceCreate, db: Session = Depends(get_db)):
    service = services.create_service(db, payload)
    db.commit()
    db.refresh(service)
    return service


@router.get("/{service_id}", response_model=schemas.ServiceRead)
def get_service(service_id: str, db: Session = Depends(get_read_db)):
    return services.get_service_or_404(db, service_id)


@router.put("/{service_id}", response_model=schemas.ServiceRead)
def update_service(
    service_id: str,
    payload: schemas.ServiceUpdate,
    db: Session = Depends(get_db),
):
    service = services.get_service_or_404(db, service_id)
    service = services.update_service(db, service, payload)
    db.commit()
    db.refresh(service)
    return service


@router.post("/{service_id}/complete", response_model=schemas.ServiceRead)
def complete_service(
    service_id: str,
    payload: schemas.ServiceComplete,
    db: Session = Depends(get_db),
):
    service = services.get_service_or_404(db, service_id)
    service = services.complete_service(
        db,
        service,
        notes=payload.notes,
        actual_cost=payload.actual_cost,
    )
    db.commit()
    db.refresh(service)
    return service


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_service(service_id: str, db: Session = Depends(get_db)):
    service = services.get_service_or_404(db, service_id)
    services.delete_service(db, service)
    db.commit()
    return None
