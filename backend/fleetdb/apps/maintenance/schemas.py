# backend/fleetdb/apps/maintenance/schemas.py

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..units.schemas import UnitRef
from .models import MaintenanceTypeEnum, ScheduleStatusEnum


class ScheduleBase(BaseModel):
    unit_id: str
    maintenance_type: MaintenanceTypeEnum = MaintenanceTypeEnum.PREVENTIVE
    interval_hours: float = Field(gt=0)
    last_service_hours: float = Field(default=0.0, ge=0)
    next_service_hours: float = Field(ge=0)
    description: Optional[str] = None
    estimated_cost: float = Field(default=0.0, ge=0)


class ScheduleCreate(ScheduleBase):
    """Status is derived from the unit horometer on insert."""
    pass


class ScheduleUpdate(BaseModel):
    maintenance_type: Optional[MaintenanceTypeEnum] = None
    interval_hours: Optional[float] = Field(default=None, gt=0)
    last_service_hours: Optional[float] = Field(default=None, ge=0)
    next_service_hours: Optional[float] = Field(default=None, ge=0)
    status: Optional[ScheduleStatusEnum] = None
    description: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    technician: Optional[str] = None
    notes: Optional[str] = None


class ScheduleComplete(BaseModel):
    actual_cost: float = Field(ge=0)
    technician: str = Field(min_length=1)
    notes: Optional[str] = None


class SchedulePreventiveRequest(BaseModel):
    unit_id: str
    interval_hours: float = Field(gt=0)


class ScheduleRead(ScheduleBase):
    id: str
    status: ScheduleStatusEnum
    actual_cost: Optional[float] = None
    technician: Optional[str] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime
    unit: Optional[UnitRef] = None

    class Config:
        from_attributes = True


class MaintenanceSummary(BaseModel):
    total: int = 0
    pending: int = 0
    overdue: int = 0
    completed: int = 0
    preventive: int = 0
    corrective: int = 0


class RefreshResult(BaseModel):
    updated: int


class ScheduleCompletionRead(BaseModel):
    completed: ScheduleRead
    next_schedule: ScheduleRead
    service_id: str
