# backend/fleetdb/apps/anomalies/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..units.schemas import UnitRef
from .models import (
    AnomalyCategoryEnum,
    AnomalyPriorityEnum,
    AnomalySeverityEnum,
    AnomalyStatusEnum,
)


class AnomalyBase(BaseModel):
    unit_id: str
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    severity: AnomalySeverityEnum = AnomalySeverityEnum.MEDIUM
    category: AnomalyCategoryEnum = AnomalyCategoryEnum.OTHER
    priority: AnomalyPriorityEnum = AnomalyPriorityEnum.MEDIUM
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None
    reported_date: Optional[date] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    downtime_hours: Optional[float] = Field(default=None, ge=0)


class AnomalyCreate(AnomalyBase):
    """Always filed as OPEN."""
    pass


class AnomalyUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, min_length=1)
    severity: Optional[AnomalySeverityEnum] = None
    status: Optional[AnomalyStatusEnum] = None
    category: Optional[AnomalyCategoryEnum] = None
    priority: Optional[AnomalyPriorityEnum] = None
    reported_by: Optional[str] = None
    assigned_to: Optional[str] = None
    estimated_cost: Optional[float] = Field(default=None, ge=0)
    actual_cost: Optional[float] = Field(default=None, ge=0)
    downtime_hours: Optional[float] = Field(default=None, ge=0)
    resolution_notes: Optional[str] = None
    preventive_actions: Optional[str] = None
    resolved_date: Optional[date] = None


class AnomalyResolve(BaseModel):
    actual_cost: float = Field(ge=0)
    resolution_notes: str = Field(min_length=1)
    preventive_actions: Optional[str] = None
    assigned_to: Optional[str] = None
    resolved_date: Optional[date] = None


class AnomalyResolveLegacy(BaseModel):
    """Body of POST /api/anomalies/{id}/resolve."""

    actual_repair_cost: Optional[float] = Field(default=None, ge=0)
    resolution_notes: Optional[str] = None
    resolution_date: Optional[date] = None


class AnomalyClose(BaseModel):
    notes: Optional[str] = None


class AnomalyAssign(BaseModel):
    assigned_to: str = Field(min_length=1)


class AnomalyRead(AnomalyBase):
    id: str
    status: AnomalyStatusEnum
    reported_date: date
    resolved_date: Optional[date] = None
    actual_cost: Optional[float] = None
    resolution_notes: Optional[str] = None
    preventive_actions: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    unit: Optional[UnitRef] = None

    class Config:
        from_attributes = True


class AnomaliesSummary(BaseModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0
    low_severity: int = 0
    medium_severity: int = 0
    high_severity: int = 0
    critical_severity: int = 0
    mechanical: int = 0
    electrical: int = 0
    hydraulic: int = 0
    operational: int = 0
    safety: int = 0
    other: int = 0
    urgent_priority: int = 0
    high_priority: int = 0
    total_estimated_cost: float = 0.0
    total_actual_cost: float = 0.0
    total_downtime: float = 0.0


class CategoryStats(BaseModel):
    category: str
    total: int = 0
    low: int = 0
    medium: int = 0
    high: int = 0
    critical: int = 0
    estimated_cost: float = 0.0
    actual_cost: float = 0.0
