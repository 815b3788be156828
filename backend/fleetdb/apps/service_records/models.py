# backend/fleetdb/apps/service_records/models.py
"""
Service work orders: one row per piece of workshop work done on a unit.

Rows are created directly by technicians or by the maintenance module when
a schedule is completed (always PREVENTIVE / COMPLETED in that case).
"""

from __future__ import annotations

from datetime import date, datetime, timezone
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


class ServiceTypeEnum(str, Enum):
    CORRECTIVE = "corrective"
    PREVENTIVE = "preventive"
    INSPECTION = "inspection"
    REPAIR = "repair"


class SeverityEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ServiceStatusEnum(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Service(Base):
    __tablename__ = "services"

    __table_args__ = (
        Index("ix_services_unit_date", "unit_id", "service_date"),
        Index("ix_services_type_date", "service_type", "service_date"),
        CheckConstraint("total_cost >= 0", name="ck_services_total_cost_nonneg"),
        CheckConstraint("labor_cost >= 0", name="ck_services_labor_cost_nonneg"),
        CheckConstraint("parts_cost >= 0", name="ck_services_parts_cost_nonneg"),
        CheckConstraint("labor_hours >= 0", name="ck_services_labor_hours_nonneg"),
        CheckConstraint("downtime_hours >= 0", name="ck_services_downtime_nonneg"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    unit_id = Column(
        String(36),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    service_type = Column(
        SQLEnum(ServiceTypeEnum, name="service_type_enum", native_enum=False),
        nullable=False,
        default=ServiceTypeEnum.CORRECTIVE,
    )
    description = Column(Text, nullable=False)
    severity = Column(
        SQLEnum(SeverityEnum, name="service_severity_enum", native_enum=False),
        nullable=False,
        default=SeverityEnum.MEDIUM,
    )
    status = Column(
        SQLEnum(ServiceStatusEnum, name="service_status_enum", native_enum=False),
        nullable=False,
        default=ServiceStatusEnum.COMPLETED,
        index=True,
    )

    # Costs; total defaults to parts + labor
    total_cost = Column(Float, nullable=False, default=0.0)
    labor_cost = Column(Float, nullable=False, default=0.0)
    parts_cost = Column(Float, nullable=False, default=0.0)
    labor_hours = Column(Float, nullable=False, default=0.0)

    technician = Column(String(255), nullable=True, index=True)
    service_date = Column(Date, nullable=False, default=date.today, index=True)
    downtime_hours = Column(Float, nullable=False, default=0.0)

    # Free text list of parts, e.g. "Hydraulic filter x1, Oil 10W-30 x4L"
    parts_used = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Horometer reading when the work was done
    hours_at_service = Column(Float, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    unit = relationship("Unit", back_populates="services")

    def __repr__(self) -> str:
        return (
            f"<Service id={self.id} unit_id={self.unit_id} type={self.service_type} "
            f"date={self.service_date} total={self.total_cost}>"
        )
