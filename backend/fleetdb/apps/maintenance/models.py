# backend/fleetdb/apps/maintenance/models.py
"""
Hours-based maintenance schedules.

Each row is one due item for a unit: "interval X, due at Y horometer hours".
Completing a row closes it and spawns the next one, so a unit's open
(pending/overdue) rows are its current maintenance plan.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
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


class MaintenanceTypeEnum(str, Enum):
    PREVENTIVE = "preventive"
    CORRECTIVE = "corrective"


class ScheduleStatusEnum(str, Enum):
    PENDING = "pending"
    OVERDUE = "overdue"      # horometer has passed next_service_hours
    COMPLETED = "completed"


OPEN_SCHEDULE_STATUSES = (ScheduleStatusEnum.PENDING, ScheduleStatusEnum.OVERDUE)


class MaintenanceSchedule(Base):
    __tablename__ = "maintenance_schedules"

    __table_args__ = (
        Index("ix_maint_sched_unit_status", "unit_id", "status"),
        Index("ix_maint_sched_next_hours", "next_service_hours"),
        CheckConstraint("interval_hours > 0", name="ck_maint_sched_interval_positive"),
        CheckConstraint("last_service_hours >= 0", name="ck_maint_sched_last_nonneg"),
        CheckConstraint("next_service_hours >= 0", name="ck_maint_sched_next_nonneg"),
        CheckConstraint("estimated_cost >= 0", name="ck_maint_sched_est_cost_nonneg"),
        CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_maint_sched_actual_cost_nonneg",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    unit_id = Column(
        String(36),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    maintenance_type = Column(
        SQLEnum(MaintenanceTypeEnum, name="maintenance_type_enum", native_enum=False),
        nullable=False,
        default=MaintenanceTypeEnum.PREVENTIVE,
    )

    interval_hours = Column(Float, nullable=False)
    last_service_hours = Column(Float, nullable=False, default=0.0)
    next_service_hours = Column(Float, nullable=False)

    status = Column(
        SQLEnum(ScheduleStatusEnum, name="maintenance_schedule_status_enum", native_enum=False),
        nullable=False,
        default=ScheduleStatusEnum.PENDING,
        index=True,
    )

    description = Column(Text, nullable=True)
    estimated_cost = Column(Float, nullable=False, default=0.0)

    # Filled in on completion
    actual_cost = Column(Float, nullable=True)
    technician = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    unit = relationship("Unit", back_populates="maintenance_schedules")

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_SCHEDULE_STATUSES

    def __repr__(self) -> str:
        return (
            f"<MaintenanceSchedule id={self.id} unit_id={self.unit_id} "
            f"interval={self.interval_hours} next={self.next_service_hours} status={self.status}>"
        )
