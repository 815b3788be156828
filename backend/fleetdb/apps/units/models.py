# backend/fleetdb/apps/units/models.py
"""
Unit (forklift) master data.

A unit is the fleet asset every other record hangs off: maintenance
schedules, services, fuel periods and anomaly reports all carry a
`unit_id` FK and are deleted with the unit.

`status` is partly derived: anomaly and maintenance writes move it between
ACTIVE and MAINTENANCE, planners set INACTIVE by hand.
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
    Index,
    Integer,
    String,
    Enum as SQLEnum,
)
from sqlalchemy.orm import relationship

from ...database import Base
from ...utils.identifiers import generate_uuid7


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FuelTypeEnum(str, Enum):
    ELECTRIC = "electric"
    GAS = "gas"
    DIESEL = "diesel"


class UnitStatusEnum(str, Enum):
    ACTIVE = "active"            # available for operation
    MAINTENANCE = "maintenance"  # out of service (open critical anomaly, workshop)
    INACTIVE = "inactive"        # parked / decommissioned by a planner


class Unit(Base):
    __tablename__ = "units"

    __table_args__ = (
        Index("ix_units_status_fuel", "status", "fuel_type"),
        Index("ix_units_brand", "brand"),
        CheckConstraint("current_hours >= 0", name="ck_units_current_hours_nonneg"),
        CheckConstraint("capacity_kg >= 0", name="ck_units_capacity_nonneg"),
        CheckConstraint(
            "next_service_hours IS NULL OR next_service_hours >= 0",
            name="ck_units_next_service_hours_nonneg",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    # Fleet number painted on the truck (e.g. "FL-001")
    unit_number = Column(String(32), unique=True, nullable=False, index=True)

    brand = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    serial_number = Column(String(100), nullable=False, index=True)
    year = Column(Integer, nullable=False)
    capacity_kg = Column(Float, nullable=False, default=0.0)

    fuel_type = Column(
        SQLEnum(FuelTypeEnum, name="unit_fuel_type_enum", native_enum=False),
        nullable=False,
        default=FuelTypeEnum.ELECTRIC,
    )

    # Horometer: cumulative operating hours
    current_hours = Column(Float, nullable=False, default=0.0)

    status = Column(
        SQLEnum(UnitStatusEnum, name="unit_status_enum", native_enum=False),
        nullable=False,
        default=UnitStatusEnum.ACTIVE,
        index=True,
    )

    location = Column(String(255), nullable=True)

    last_service_date = Column(Date, nullable=True)
    next_service_hours = Column(Float, nullable=True)

    # Path of the stored photo under UNIT_IMAGE_UPLOAD_DIR
    image_path = Column(String(512), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    maintenance_schedules = relationship(
        "MaintenanceSchedule",
        back_populates="unit",
        cascade="all, delete-orphan",
    )
    services = relationship(
        "Service",
        back_populates="unit",
        cascade="all, delete-orphan",
    )
    fuel_records = relationship(
        "FuelConsumption",
        back_populates="unit",
        cascade="all, delete-orphan",
    )
    anomalies = relationship(
        "AnomalyReport",
        back_populates="unit",
        cascade="all, delete-orphan",
    )

    @property
    def has_image(self) -> bool:
        return bool(self.image_path)

    def __repr__(self) -> str:
        return f"<Unit id={self.id} unit_number={self.unit_number} status={self.status}>"
