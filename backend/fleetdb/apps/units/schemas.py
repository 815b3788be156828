# backend/fleetdb/apps/units/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from .models import FuelTypeEnum, UnitStatusEnum


class UnitBase(BaseModel):
    unit_number: str = Field(min_length=1, max_length=32)
    brand: str = Field(min_length=1, max_length=100)
    model: str = Field(min_length=1, max_length=100)
    serial_number: str = Field(min_length=1, max_length=100)
    year: int = Field(ge=1950, le=2100)
    capacity_kg: float = Field(ge=0)
    fuel_type: FuelTypeEnum
    current_hours: float = Field(default=0.0, ge=0)
    status: UnitStatusEnum = UnitStatusEnum.ACTIVE
    location: Optional[str] = None


class UnitCreate(UnitBase):
    """
    New unit. `next_service_hours` is derived server-side from
    `current_hours` (first service after the standard offset).
    """
    pass


class UnitUpdate(BaseModel):
    unit_number: Optional[str] = Field(default=None, min_length=1, max_length=32)
    brand: Optional[str] = None
    model: Optional[str] = None
    serial_number: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1950, le=2100)
    capacity_kg: Optional[float] = Field(default=None, ge=0)
    fuel_type: Optional[FuelTypeEnum] = None
    current_hours: Optional[float] = Field(default=None, ge=0)
    status: Optional[UnitStatusEnum] = None
    location: Optional[str] = None
    next_service_hours: Optional[float] = Field(default=None, ge=0)


class UnitHoursUpdate(BaseModel):
    current_hours: float = Field(ge=0)


class UnitRead(UnitBase):
    id: str
    last_service_date: Optional[date] = None
    next_service_hours: Optional[float] = None
    has_image: bool = False
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class UnitRef(BaseModel):
    """Compact unit info embedded in schedule / service / fuel / anomaly reads."""

    id: str
    unit_number: str
    brand: str
    model: str
    status: UnitStatusEnum
    fuel_type: FuelTypeEnum
    current_hours: float

    class Config:
        from_attributes = True


class UnitsSummary(BaseModel):
    total: int = 0
    active: int = 0
    maintenance: int = 0
    inactive: int = 0
    electric: int = 0
    gas: int = 0
    diesel: int = 0
