# backend/fleetdb/apps/anomalies/models.py
"""
Anomaly (incident) reports filed against a unit.

Severity drives unit availability: an unresolved HIGH/CRITICAL report keeps
the unit in MAINTENANCE until it is resolved, closed or deleted.
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


class AnomalySeverityEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AnomalyStatusEnum(str, Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class AnomalyCategoryEnum(str, Enum):
    MECHANICAL = "mechanical"
    ELECTRICAL = "electrical"
    HYDRAULIC = "hydraulic"
    OPERATIONAL = "operational"
    SAFETY = "safety"
    OTHER = "other"


class AnomalyPriorityEnum(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


# Severities that take a unit out of service while unresolved
BLOCKING_SEVERITIES = (AnomalySeverityEnum.HIGH, AnomalySeverityEnum.CRITICAL)
UNRESOLVED_STATUSES = (AnomalyStatusEnum.OPEN, AnomalyStatusEnum.IN_PROGRESS)


class AnomalyReport(Base):
    __tablename__ = "anomaly_reports"

    __table_args__ = (
        Index("ix_anomalies_unit_status", "unit_id", "status"),
        Index("ix_anomalies_reported_date", "reported_date"),
        CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="ck_anomalies_est_cost_nonneg",
        ),
        CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_anomalies_actual_cost_nonneg",
        ),
        CheckConstraint(
            "downtime_hours IS NULL OR downtime_hours >= 0",
            name="ck_anomalies_downtime_nonneg",
        ),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid7)

    unit_id = Column(
        String(36),
        ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)

    severity = Column(
        SQLEnum(AnomalySeverityEnum, name="anomaly_severity_enum", native_enum=False),
        nullable=False,
        default=AnomalySeverityEnum.MEDIUM,
    )
    status = Column(
        SQLEnum(AnomalyStatusEnum, name="anomaly_status_enum", native_enum=False),
        nullable=False,
        default=AnomalyStatusEnum.OPEN,
        index=True,
    )
    category = Column(
        SQLEnum(AnomalyCategoryEnum, name="anomaly_category_enum", native_enum=False),
        nullable=False,
        default=AnomalyCategoryEnum.OTHER,
    )
    priority = Column(
        SQLEnum(AnomalyPriorityEnum, name="anomaly_priority_enum", native_enum=False),
        nullable=False,
        default=AnomalyPriorityEnum.MEDIUM,
    )

    reported_by = Column(String(255), nullable=True)
    assigned_to = Column(String(255), nullable=True, index=True)

    reported_date = Column(Date, nullable=False, default=date.today)
    resolved_date = Column(Date, nullable=True)

    estimated_cost = Column(Float, nullable=True)
    actual_cost = Column(Float, nullable=True)
    downtime_hours = Column(Float, nullable=True)

    resolution_notes = Column(Text, nullable=True)
    preventive_actions = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    unit = relationship("Unit", back_populates="anomalies")

    @property
    def is_blocking(self) -> bool:
        return self.status in UNRESOLVED_STATUSES and self.severity in BLOCKING_SEVERITIES

    def __repr__(self) -> str:
        return (
            f"<AnomalyReport id={self.id} unit_id={self.unit_id} "
            f"severity={self.severity} status={self.status}>"
        )
