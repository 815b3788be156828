# backend/fleetdb/apps/units/router.py

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...utils.filters import parse_enum_filter, parse_text_filter
from ..anomalies import models as anomaly_models
from ..anomalies import schemas as anomaly_schemas
from ..fuel import models as fuel_models
from ..fuel import schemas as fuel_schemas
from ..maintenance import models as maintenance_models
from ..maintenance import schemas as maintenance_schemas
from ..service_records import models as service_models
from ..service_records import schemas as service_schemas
from . import models, schemas, services, storage

router = APIRouter(prefix="/units", tags=["units"])


class UnitDetailRead(BaseModel):
    unit: schemas.UnitRead
    services: List[service_schemas.ServiceRead] = []
    fuel_records: List[fuel_schemas.FuelRecordRead] = []
    anomalies: List[anomaly_schemas.AnomalyRead] = []
    maintenance_schedules: List[maintenance_schemas.ScheduleRead] = []


# ---------------------------------------------------------------------------
# LISTING / LOOKUPS (static paths before /{unit_id})
# ---------------------------------------------------------------------------


@router.get("/", response_model=List[schemas.UnitRead])
def list_units(
    status_filter: Optional[str] = Query(None, alias="status"),
    fuel_type: Optional[str] = None,
    brand: Optional[str] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    return services.list_units(
        db,
        status=parse_enum_filter(status_filter, models.UnitStatusEnum, "status"),
        fuel_type=parse_enum_filter(fuel_type, models.FuelTypeEnum, "fuel_type"),
        brand=parse_text_filter(brand),
        search=parse_text_filter(search),
    )


@router.get("/summary", response_model=schemas.UnitsSummary)
def units_summary(db: Session = Depends(get_read_db)):
    return services.get_units_summary(db)


@router.get("/brands", response_model=List[str])
def list_brands(db: Session = Depends(get_read_db)):
    return services.list_brands(db)


# ---------------------------------------------------------------------------
# CRUD
# ---------------------------------------------------------------------------


@router.post("/", response_model=schemas.UnitRead, status_code=status.HTTP_201_CREATED)
def create_unit(payload: schemas.UnitCreate, db: Session = Depends(get_db)):
    unit = services.create_unit(db, payload)
    db.commit()
    db.refresh(unit)
    return unit


@router.get("/{unit_id}", response_model=schemas.UnitRead)
def get_unit(unit_id: str, db: Session = Depends(get_read_db)):
    return services.get_unit_or_404(db, unit_id)


@router.get("/{unit_id}/detail", response_model=UnitDetailRead)
def get_unit_detail(unit_id: str, db: Session = Depends(get_read_db)):
    unit = services.get_unit_or_404(db, unit_id)

    service_rows = (
        db.query(service_models.Service)
        .filter(service_models.Service.unit_id == unit.id)
        .order_by(service_models.Service.service_date.desc())
        .all()
    )
    fuel_rows = (
        db.query(fuel_models.FuelConsumption)
        .filter(fuel_models.FuelConsumption.unit_id == unit.id)
        .order_by(fuel_models.FuelConsumption.period_start.desc())
        .all()
    )
    anomaly_rows = (
        db.query(anomaly_models.AnomalyReport)
        .filter(anomaly_models.AnomalyReport.unit_id == unit.id)
        .order_by(anomaly_models.AnomalyReport.reported_date.desc())
        .all()
    )
    schedule_rows = (
        db.query(maintenance_models.MaintenanceSchedule)
        .filter(maintenance_models.MaintenanceSchedule.unit_id == unit.id)
        .order_by(maintenance_models.MaintenanceSchedule.created_at.desc())
        .all()
    )

    return UnitDetailRead(
        unit=schemas.UnitRead.model_validate(unit),
        services=[service_schemas.ServiceRead.model_validate(r) for r in service_rows],
        fuel_records=[fuel_schemas.FuelRecordRead.model_validate(r) for r in fuel_rows],
        anomalies=[anomaly_schemas.AnomalyRead.model_validate(r) for r in anomaly_rows],
        maintenance_schedules=[
            maintenance_schemas.ScheduleRead.model_validate(r) for r in schedule_rows
        ],
    )


@router.put("/{unit_id}", response_model=schemas.UnitRead)
def update_unit(unit_id: str, payload: schemas.UnitUpdate, db: Session = Depends(get_db)):
    unit = services.get_unit_or_404(db, unit_id)
    unit = services.update_unit(db, unit, payload)
    db.commit()
    db.refresh(unit)
    return unit


@router.delete("/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_unit(unit_id: str, db: Session = Depends(get_db)):
    unit = services.get_unit_or_404(db, unit_id)
    stale_image = services.delete_unit(db, unit)
    db.commit()
    storage.delete_if_exists(stale_image)
    return None


@router.put("/{unit_id}/hours", response_model=schemas.UnitRead)
def update_unit_hours(
    unit_id: str,
    payload: schemas.UnitHoursUpdate,
    db: Session = Depends(get_db),
):
    unit = services.get_unit_or_404(db, unit_id)
    unit = services.update_unit_hours(db, unit, payload.current_hours)
    db.commit()
    db.refresh(unit)
    return unit


# ---------------------------------------------------------------------------
# PHOTO
# ---------------------------------------------------------------------------


@router.post("/{unit_id}/image", response_model=schemas.UnitRead)
def upload_unit_image(
    unit_id: str,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    unit = services.get_unit_or_404(db, unit_id)
    stale_image = services.save_unit_image(db, unit, file)
    db.commit()
    storage.delete_if_exists(stale_image)
    db.refresh(unit)
    return unit


@router.get("/{unit_id}/image", response_class=FileResponse)
def download_unit_image(unit_id: str, db: Session = Depends(get_read_db)):
    unit = services.get_unit_or_404(db, unit_id)
    if not unit.image_path:
        raise HTTPException(status_code=404, detail="Unit has no image")
    path = storage.ensure_safe_path(Path(unit.image_path))
    if not path.exists():
        raise HTTPException(status_code=404, detail="Image file missing")
    return FileResponse(path=path, filename=f"{unit.unit_number}{path.suffix}")


@router.delete("/{unit_id}/image", response_model=schemas.UnitRead)
def delete_unit_image(unit_id: str, db: Session = Depends(get_db)):
    unit = services.get_unit_or_404(db, unit_id)
    stale_image = services.delete_unit_image(db, unit)
    db.commit()
    storage.delete_if_exists(stale_image)
    db.refresh(unit)
    return unit
