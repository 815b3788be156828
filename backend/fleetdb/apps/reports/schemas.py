# backend/fleetdb/apps/reports/schemas.py

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from ..anomalies.schemas import AnomaliesSummary
from ..fuel.schemas import FuelTrendPoint
from ..maintenance.schemas import MaintenanceSummary
from ..service_records.schemas import MonthlyCost
from ..units.schemas import UnitsSummary


class ReportPeriod(BaseModel):
    period: str
    date_from: date
    date_to: date


class CostItem(BaseModel):
    category: str
    amount: float
    percentage: int


class CostBreakdown(BaseModel):
    date_from: date
    date_to: date
    preventive: float = 0.0
    corrective: float = 0.0
    parts: float = 0.0
    fuel: float = 0.0
    total: float = 0.0
    items: List[CostItem] = []


class MonthlyTrendRow(BaseModel):
    month: int
    label: str
    preventive: float = 0.0
    corrective: float = 0.0
    fuel: float = 0.0


class DowntimeRow(BaseModel):
    unit_id: str
    unit_number: str
    total_downtime: float = 0.0
    planned_downtime: float = 0.0
    unplanned_downtime: float = 0.0
    availability: float = 100.0


class UpcomingMaintenance(BaseModel):
    schedule_id: str
    unit_id: str
    unit_number: str
    description: Optional[str] = None
    interval_hours: float
    next_service_hours: float
    current_hours: float
    remaining_hours: float
    status: str
    priority: str  # "high" | "medium" | "low"
    estimated_cost: float


class AlertItem(BaseModel):
    source: str  # "maintenance" | "fuel" | "anomaly"
    severity: str
    unit_id: str
    unit_number: str
    message: str
    reference_id: Optional[str] = None
    timestamp: datetime


class DashboardAnomalies(BaseModel):
    open: int = 0
    critical: int = 0
    high: int = 0


class Dashboard(BaseModel):
    units: UnitsSummary
    maintenance: MaintenanceSummary
    services_total_cost: float = 0.0
    anomalies: DashboardAnomalies
    anomalies_summary: AnomaliesSummary
    fuel_trends: List[FuelTrendPoint] = []
    monthly_service_costs: List[MonthlyCost] = []
    unit_status_distribution: Dict[str, int] = {}
