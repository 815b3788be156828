# backend/fleetdb/apps/service_records/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field

from ..units.schemas import UnitRef
from .models import ServiceStatusEnum, ServiceTypeEnum, SeverityEnum


class ServiceBase(BaseModel):
    unit_id: str
    service_type: ServiceTypeEnum
    description: str = Field(min_length=1)
    severity: SeverityEnum = SeverityEnum.MEDIUM
    labor_cost: float = Field(default=0.0, ge=0)
    parts_cost: float = Field(default=0.0, ge=0)
    labor_hours: float = Field(default=0.0, ge=0)
    technician: Optional[str] = None
    service_date: date
    downtime_hours: float = Field(default=0.0, ge=0)
    parts_used: Optional[str] = None
    notes: Optional[str] = None
    hours_at_service: Optional[float] = Field(default=None, ge=0)


class ServiceCreate(ServiceBase):
    # None -> parts_cost + labor_cost
    total_cost: Optional[float] = Field(default=None, ge=0)
    status: ServiceStatusEnum = ServiceStatusEnum.COMPLETED


class ServiceUpdate(BaseModel):
    service_type: Optional[ServiceTypeEnum] = None
    description: Optional[str] = Field(default=None, min_length=1)
    severity: Optional[SeverityEnum] = None
    total_cost: Optional[float] = Field(default=None, ge=0)
    labor_cost: Optional[float] = Field(default=None, ge=0)
    parts_cost: Optional[float] = Field(default=None, ge=0)
    labor_hours: Optional[float] = Field(default=None, ge=0)
    technician: Optional[str] = None
    service_date: Optional[date] = None
    downtime_hours: Optional[float] = Field(default=None, ge=0)
    parts_used: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[ServiceStatusEnum] = None
    hours_at_service: Optional[float] = Field(default=None, ge=0)


class ServiceComplete(BaseModel):
    notes: Optional[str] = None
    actual_cost: Optional[float] = Field(default=None, ge=0)


class ServiceRead(ServiceBase):
    id: str
    total_cost: float
    status: ServiceStatusEnum
    created_at: datetime
    updated_at: datetime
    unit: Optional[UnitRef] = None

    class Config:
        from_attributes = True


class ServicesSummary(BaseModel):
    total_services: int = 0
    by_type: Dict[str, int] = {}
    by_severity: Dict[str, int] = {}
    total_cost: float = 0.0
    total_labor_hours: float = 0.0
    total_downtime_hours: float = 0.0
    average_cost: float = 0.0


class TechnicianStats(BaseModel):
    technician: str
    services: int
    total_cost: float
    labor_hours: float
    downtime_hours: float


class MonthlyCost(BaseModel):
    month: int
    label: str
    total_cost: float
