# backend/fleetdb/apps/maintenance/router.py

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from ...constants import MAINTENANCE_INTERVALS
from ...database import get_db, get_read_db
from ...utils.filters import parse_enum_filter, parse_text_filter
from . import models, schemas, services

router = APIRouter(prefix="/maintenance", tags=["maintenance"])


@router.get("/intervals", response_model=List[float])
def list_intervals():
    return [float(h) for h in MAINTENANCE_INTERVALS]


@router.get("/summary", response_model=schemas.MaintenanceSummary)
def maintenance_summary(db: Session = Depends(get_read_db)):
    return services.get_maintenance_summary(db)


@router.get("/schedules", response_model=List[schemas.ScheduleRead])
def list_schedules(
    status_filter: Optional[str] = Query(None, alias="status"),
    unit_id: Optional[str] = None,
    maintenance_type: Optional[str] = None,
    overdue_only: bool = False,
    db: Session = Depends(get_read_db),
):
    return services.list_schedules(
        db,
        status=parse_enum_filter(status_filter, models.ScheduleStatusEnum, "status"),
        unit_id=parse_text_filter(unit_id),
        maintenance_type=parse_enum_filter(
            maintenance_type, models.MaintenanceTypeEnum, "maintenance_type"
        ),
        overdue_only=overdue_only,
    )


@router.post(
    "/schedules",
    response_model=schemas.ScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def create_schedule(payload: schemas.ScheduleCreate, db: Session = Depends(get_db)):
    schedule = services.create_schedule(db, payload)
    db.commit()
    db.refresh(schedule)
    return schedule


@router.post(
    "/schedules/preventive",
    response_model=schemas.ScheduleRead,
    status_code=status.HTTP_201_CREATED,
)
def schedule_preventive(
    payload: schemas.SchedulePreventiveRequest,
    db: Session = Depends(get_db),
):
    schedule = services.schedule_preventive(db, payload.unit_id, payload.interval_hours)
    db.commit()
    db.refresh(schedule)
    return schedule


@router.post("/schedules/refresh-overdue", response_model=schemas.RefreshResult)
def refresh_overdue(unit_id: Optional[str] = None, db: Session = Depends(get_db)):
    updated = services.refresh_overdue_statuses(db, unit_id=parse_text_filter(unit_id))
    db.commit()
    return schemas.RefreshResult(updated=updated)


@router.get("/schedules/{schedule_id}", response_model=schemas.ScheduleRead)
def get_schedule(schedule_id: str, db: Session = Depends(get_read_db)):
    return services.get_schedule_or_404(db, schedule_id)


@router.put("/schedules/{schedule_id}", response_model=schemas.ScheduleRead)
def update_schedule(
    schedule_id: str,
    payload: schemas.ScheduleUpdate,
    db: Session = Depends(get_db),
):
    schedule = services.get_schedule_or_404(db, schedule_id)
    schedule = services.update_schedule(db, schedule, payload)
    db.commit()
    db.refresh(schedule)
    return schedule


@router.post(
    "/schedules/{schedule_id}/complete",
    response_model=schemas.ScheduleCompletionRead,
)
def complete_schedule(
    schedule_id: str,
    payload: schemas.ScheduleComplete,
    db: Session = Depends(get_db),
):
    schedule = services.get_schedule_or_404(db, schedule_id)
    try:
        service, follow_up = services.complete_schedule(
            db,
            schedule,
            actual_cost=payload.actual_cost,
            technician=payload.technician,
            notes=payload.notes,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(schedule)
    db.refresh(follow_up)
    return schemas.ScheduleCompletionRead(
        completed=schemas.ScheduleRead.model_validate(schedule),
        next_schedule=schemas.ScheduleRead.model_validate(follow_up),
        service_id=service.id,
    )
