# backend/fleetdb/apps/fuel/models.py
"""
Fuel / energy consumption per unit and period.

`efficiency_lph` and `total_cost` are derived on write and stored so the
reports can aggregate them directly.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PeriodTypeEnum(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class FuelConsumption(Base):
    __tablename__ = "fuel_consumption"

    __table_args__ = (
        Index("ix_fuel_unit_period", "unit_id", "period_start"),
        CheckConstraint("period_end >= period_start", name="ck_fuel_period_order"),
        CheckConstraint("liters_consumed >= 0", name="ck_fuel_liters_nonneg"),
        CheckConstraint("hours_operated >= 0", name="ck_fuel_hours_nonneg"),
        CheckConstraint("cost_per_liter >= 0", name="ck_fuel_cpl_nonneg"),
        CheckConstraint("odometer_start >= 0", name="ck_fuel_odo_start_nonneg"),
        CheckConstraint("odometer_end >= odometer_start", name="ck_fuel_odo_order"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    unit_id = Column(
        String(36),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    period_type = Column(
        SQLEnum(PeriodTypeEnum, name="fuel_period_type_enum", native_enum=False),
        nullable=False,
        default=PeriodTypeEnum.WEEKLY,
    )
    period_start = Column(Date, nullable=False, index=True)
    period_end = Column(Date, nullable=False)

    liters_consumed = Column(Float, nullable=False, default=0.0)
    hours_operated = Column(Float, nullable=False, default=0.0)
    efficiency_lph = Column(Float, nullable=False, default=0.0)
    cost_per_liter = Column(Float, nullable=False, default=0.0)
    total_cost = Column(Float, nullable=False, default=0.0)

    # Horometer readings at period start / end
    odometer_start = Column(Float, nullable=False, default=0.0)
    odometer_end = Column(Float, nullable=False, default=0.0)

    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    unit = relationship("Unit", back_populates="fuel_records")

    def __repr__(self) -> str:
        return (
            f"<FuelConsumption id={self.id} unit_id={self.unit_id} "
            f"{self.period_start}..{self.period_end} liters={self.liters_consumed}>"
        )
