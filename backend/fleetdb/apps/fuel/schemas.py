# backend/fleetdb/apps/fuel/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..units.schemas import UnitRef
from .models import PeriodTypeEnum


class FuelRecordBase(BaseModel):
    unit_id: str
    period_type: PeriodTypeEnum = PeriodTypeEnum.WEEKLY
    period_start: date
    period_end: date
    liters_consumed: float = Field(ge=0)
    hours_operated: float = Field(ge=0)
    cost_per_liter: float = Field(ge=0)
    odometer_start: float = Field(default=0.0, ge=0)
    odometer_end: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None


class FuelRecordCreate(FuelRecordBase):
    pass


class FuelRecordUpdate(BaseModel):
    period_type: Optional[PeriodTypeEnum] = None
    period_start: Optional[date] = None
    period_end: Optional[date] = None
    liters_consumed: Optional[float] = Field(default=None, ge=0)
    hours_operated: Optional[float] = Field(default=None, ge=0)
    cost_per_liter: Optional[float] = Field(default=None, ge=0)
    odometer_start: Optional[float] = Field(default=None, ge=0)
    odometer_end: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class FuelRecordRead(FuelRecordBase):
    id: str
    efficiency_lph: float
    total_cost: float
    created_at: datetime
    updated_at: datetime
    unit: Optional[UnitRef] = None

    class Config:
        from_attributes = True


class FuelSummary(BaseModel):
    total_records: int = 0
    total_liters: float = 0.0
    total_hours: float = 0.0
    total_cost: float = 0.0
    average_efficiency: float = 0.0
    best_efficiency: Optional[float] = None
    worst_efficiency: Optional[float] = None


class FuelTrendPoint(BaseModel):
    period: str  # YYYY-MM
    liters: float
    cost: float
    average_efficiency: float
    records: int


class UnitEfficiency(BaseModel):
    unit_id: str
    unit_number: str
    brand: str
    model: str
    fuel_type: str
    records: int
    total_liters: float
    total_hours: float
    total_cost: float
    average_efficiency: float
    best_efficiency: float
    worst_efficiency: float


class FuelAlert(BaseModel):
    unit_id: str
    unit_number: str
    alert_type: str  # "efficiency" | "cost"
    severity: str    # "medium" | "high"
    value: float
    threshold: float
    message: str


class MonthlyFuelCost(BaseModel):
    month: int
    label: str
    liters: float
    total_cost: float
