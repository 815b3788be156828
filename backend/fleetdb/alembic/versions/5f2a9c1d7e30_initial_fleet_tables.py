"""
Initial fleet tables: units, maintenance schedules, services, fuel
consumption and anomaly reports.

Revision ID: 5f2a9c1d7e30
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "5f2a9c1d7e30"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def _unit_fk():
    return sa.Column(
        "unit_id",
        sa.String(length=36),
        sa.ForeignKey("units.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )


def upgrade() -> None:
    op.create_table(
        "units",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("unit_number", sa.String(length=32), nullable=False, unique=True, index=True),
        sa.Column("brand", sa.String(length=100), nullable=False),
        sa.Column("model", sa.String(length=100), nullable=False),
        sa.Column("serial_number", sa.String(length=100), nullable=False, index=True),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("capacity_kg", sa.Float(), nullable=False),
        sa.Column(
            "fuel_type",
            sa.Enum("ELECTRIC", "GAS", "DIESEL", name="unit_fuel_type_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("current_hours", sa.Float(), nullable=False),
        sa.Column(
            "status",
            sa.Enum("ACTIVE", "MAINTENANCE", "INACTIVE", name="unit_status_enum", native_enum=False),
            nullable=False,
            index=True,
        ),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("last_service_date", sa.Date(), nullable=True),
        sa.Column("next_service_hours", sa.Float(), nullable=True),
        sa.Column("image_path", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("current_hours >= 0", name="ck_units_current_hours_nonneg"),
        sa.CheckConstraint("capacity_kg >= 0", name="ck_units_capacity_nonneg"),
        sa.CheckConstraint(
            "next_service_hours IS NULL OR next_service_hours >= 0",
            name="ck_units_next_service_hours_nonneg",
        ),
    )
    op.create_index("ix_units_status_fuel", "units", ["status", "fuel_type"])
    op.create_index("ix_units_brand", "units", ["brand"])

    op.create_table(
        "maintenance_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _unit_fk(),
        sa.Column(
            "maintenance_type",
            sa.Enum("PREVENTIVE", "CORRECTIVE", name="maintenance_type_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("interval_hours", sa.Float(), nullable=False),
        sa.Column("last_service_hours", sa.Float(), nullable=False),
        sa.Column("next_service_hours", sa.Float(), nullable=False),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "OVERDUE",
                "COMPLETED",
                name="maintenance_schedule_status_enum",
                native_enum=False,
            ),
            nullable=False,
            index=True,
        ),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("estimated_cost", sa.Float(), nullable=False),
        sa.Column("actual_cost", sa.Float(), nullable=True),
        sa.Column("technician", sa.String(length=255), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("interval_hours > 0", name="ck_maint_sched_interval_positive"),
        sa.CheckConstraint("last_service_hours >= 0", name="ck_maint_sched_last_nonneg"),
        sa.CheckConstraint("next_service_hours >= 0", name="ck_maint_sched_next_nonneg"),
        sa.CheckConstraint("estimated_cost >= 0", name="ck_maint_sched_est_cost_nonneg"),
        sa.CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_maint_sched_actual_cost_nonneg",
        ),
    )
    op.create_index("ix_maint_sched_unit_status", "maintenance_schedules", ["unit_id", "status"])
    op.create_index("ix_maint_sched_next_hours", "maintenance_schedules", ["next_service_hours"])

    op.create_table(
        "services",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _unit_fk(),
        sa.Column(
            "service_type",
            sa.Enum(
                "CORRECTIVE",
                "PREVENTIVE",
                "INSPECTION",
                "REPAIR",
                name="service_type_enum",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "severity",
            sa.Enum("LOW", "MEDIUM", "HIGH", "CRITICAL", name="service_severity_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "PENDING",
                "IN_PROGRESS",
                "COMPLETED",
                "CANCELLED",
                name="service_status_enum",
                native_enum=False,
            ),
            nullable=False,
            index=True,
        ),
        sa.Column("total_cost", sa.Float(), nullable=False),
        sa.Column("labor_cost", sa.Float(), nullable=False),
        sa.Column("parts_cost", sa.Float(), nullable=False),
        sa.Column("labor_hours", sa.Float(), nullable=False),
        sa.Column("technician", sa.String(length=255), nullable=True, index=True),
        sa.Column("service_date", sa.Date(), nullable=False, index=True),
        sa.Column("downtime_hours", sa.Float(), nullable=False),
        sa.Column("parts_used", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("hours_at_service", sa.Float(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("total_cost >= 0", name="ck_services_total_cost_nonneg"),
        sa.CheckConstraint("labor_cost >= 0", name="ck_services_labor_cost_nonneg"),
        sa.CheckConstraint("parts_cost >= 0", name="ck_services_parts_cost_nonneg"),
        sa.CheckConstraint("labor_hours >= 0", name="ck_services_labor_hours_nonneg"),
        sa.CheckConstraint("downtime_hours >= 0", name="ck_services_downtime_nonneg"),
    )
    op.create_index("ix_services_unit_date", "services", ["unit_id", "service_date"])
    op.create_index("ix_services_type_date", "services", ["service_type", "service_date"])

    op.create_table(
        "fuel_consumption",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _unit_fk(),
        sa.Column(
            "period_type",
            sa.Enum("WEEKLY", "MONTHLY", name="fuel_period_type_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("period_start", sa.Date(), nullable=False, index=True),
        sa.Column("period_end", sa.Date(), nullable=False),
        sa.Column("liters_consumed", sa.Float(), nullable=False),
        sa.Column("hours_operated", sa.Float(), nullable=False),
        sa.Column("efficiency_lph", sa.Float(), nullable=False),
        sa.Column("cost_per_liter", sa.Float(), nullable=False),
        sa.Column("total_cost", sa.Float(), nullable=False),
        sa.Column("odometer_start", sa.Float(), nullable=False),
        sa.Column("odometer_end", sa.Float(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("period_end >= period_start", name="ck_fuel_period_order"),
        sa.CheckConstraint("liters_consumed >= 0", name="ck_fuel_liters_nonneg"),
        sa.CheckConstraint("hours_operated >= 0", name="ck_fuel_hours_nonneg"),
        sa.CheckConstraint("cost_per_liter >= 0", name="ck_fuel_cpl_nonneg"),
        sa.CheckConstraint("odometer_start >= 0", name="ck_fuel_odo_start_nonneg"),
        sa.CheckConstraint("odometer_end >= odometer_start", name="ck_fuel_odo_order"),
    )
    op.create_index("ix_fuel_unit_period", "fuel_consumption", ["unit_id", "period_start"])

    op.create_table(
        "anomaly_reports",
        sa.Column("id", sa.String(length=36), primary_key=True),
        _unit_fk(),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column(
            "severity",
            sa.Enum("LOW", "MEDIUM", "HIGH", "CRITICAL", name="anomaly_severity_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column(
            "status",
            sa.Enum(
                "OPEN",
                "IN_PROGRESS",
                "RESOLVED",
                "CLOSED",
                name="anomaly_status_enum",
                native_enum=False,
            ),
            nullable=False,
            index=True,
        ),
        sa.Column(
            "category",
            sa.Enum(
                "MECHANICAL",
                "ELECTRICAL",
                "HYDRAULIC",
                "OPERATIONAL",
                "SAFETY",
                "OTHER",
                name="anomaly_category_enum",
                native_enum=False,
            ),
            nullable=False,
        ),
        sa.Column(
            "priority",
            sa.Enum("LOW", "MEDIUM", "HIGH", "URGENT", name="anomaly_priority_enum", native_enum=False),
            nullable=False,
        ),
        sa.Column("reported_by", sa.String(length=255), nullable=True),
        sa.Column("assigned_to", sa.String(length=255), nullable=True, index=True),
        sa.Column("reported_date", sa.Date(), nullable=False),
        sa.Column("resolved_date", sa.Date(), nullable=True),
        sa.Column("estimated_cost", sa.Float(), nullable=True),
        sa.Column("actual_cost", sa.Float(), nullable=True),
        sa.Column("downtime_hours", sa.Float(), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("preventive_actions", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "estimated_cost IS NULL OR estimated_cost >= 0",
            name="ck_anomalies_est_cost_nonneg",
        ),
        sa.CheckConstraint(
            "actual_cost IS NULL OR actual_cost >= 0",
            name="ck_anomalies_actual_cost_nonneg",
        ),
        sa.CheckConstraint(
            "downtime_hours IS NULL OR downtime_hours >= 0",
            name="ck_anomalies_downtime_nonneg",
        ),
    )
    op.create_index("ix_anomalies_unit_status", "anomaly_reports", ["unit_id", "status"])
    op.create_index("ix_anomalies_reported_date", "anomaly_reports", ["reported_date"])


def downgrade() -> None:
    op.drop_table("anomaly_reports")
    op.drop_table("fuel_consumption")
    op.drop_table("services")
    op.drop_table("maintenance_schedules")
    op.drop_table("units")
