"""
Load a small demo fleet through the service layer.

    cd backend && DATABASE_URL=sqlite:///./fleet.db python -m scripts.seed_fleet_demo

Idempotent: units that already exist (by unit_number) are skipped.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from fleetdb.database import Base, WriteSessionLocal, write_engine
from fleetdb.apps.anomalies import schemas as anomaly_schemas
from fleetdb.apps.anomalies import services as anomaly_services
from fleetdb.apps.fuel import schemas as fuel_schemas
from fleetdb.apps.fuel import services as fuel_services
from fleetdb.apps.maintenance import services as maintenance_services
from fleetdb.apps.service_records import schemas as service_schemas
from fleetdb.apps.service_records import services as service_services
from fleetdb.apps.units import models as unit_models
from fleetdb.apps.units import schemas as unit_schemas
from fleetdb.apps.units import services as unit_services

logger = logging.getLogger("seed_fleet_demo")

DEMO_UNITS = [
    dict(unit_number="FL-001", brand="Toyota", model="8FBE20", serial_number="TY-20-0001",
         year=2020, capacity_kg=2000, fuel_type="electric", current_hours=1180, location="Warehouse A"),
    dict(unit_number="FL-002", brand="Hyster", model="H50FT", serial_number="HY-50-0417",
         year=2018, capacity_kg=2300, fuel_type="diesel", current_hours=3420, location="Yard"),
    dict(unit_number="FL-003", brand="Yale", model="GLP050", serial_number="YL-05-7781",
         year=2019, capacity_kg=2250, fuel_type="gas", current_hours=2260, location="Dock 2"),
    dict(unit_number="FL-004", brand="Crown", model="FC5200", serial_number="CR-52-0093",
         year=2022, capacity_kg=1800, fuel_type="electric", current_hours=640, location="Warehouse B"),
]


def _get_or_create_unit(db, values: dict) -> unit_models.Unit:
    unit = (
        db.query(unit_models.Unit)
        .filter(unit_models.Unit.unit_number == values["unit_number"])
        .first()
    )
    if unit:
        return unit
    unit = unit_services.create_unit(db, unit_schemas.UnitCreate(**values))
    db.commit()
    logger.info("Created unit %s", unit.unit_number)
    return unit


def _seed_unit_history(db, unit: unit_models.Unit, today: date) -> None:
    for interval in (250, 1000):
        maintenance_services.schedule_preventive(db, unit.id, interval)

    service_services.create_service(
        db,
        service_schemas.ServiceCreate(
            unit_id=unit.id,
            service_type="corrective",
            description="Replace worn drive tyre",
            severity="medium",
            labor_cost=60,
            parts_cost=140,
            labor_hours=1.5,
            technician="Demo Tech",
            service_date=today - timedelta(days=12),
            downtime_hours=3,
        ),
    )

    start = today - timedelta(days=27)
    for week in range(4):
        period_start = start + timedelta(days=7 * week)
        fuel_services.create_fuel_record(
            db,
            fuel_schemas.FuelRecordCreate(
                unit_id=unit.id,
                period_type="weekly",
                period_start=period_start,
                period_end=period_start + timedelta(days=6),
                liters_consumed=45 + 5 * week,
                hours_operated=38,
                cost_per_liter=1.2,
                odometer_start=unit.current_hours,
                odometer_end=unit.current_hours + 38,
            ),
        )
    db.commit()


def _seed_anomalies(db, units, today: date) -> None:
    anomaly_services.create_anomaly(
        db,
        anomaly_schemas.AnomalyCreate(
            unit_id=units[1].id,
            title="Hydraulic hose leak",
            description="Oil dripping from tilt cylinder hose",
            severity="critical",
            category="hydraulic",
            priority="urgent",
            reported_by="Night shift",
            reported_date=today - timedelta(days=2),
            estimated_cost=350,
        ),
    )
    anomaly_services.create_anomaly(
        db,
        anomaly_schemas.AnomalyCreate(
            unit_id=units[2].id,
            title="Horn intermittent",
            description="Horn works only on second press",
            severity="low",
            category="electrical",
            reported_by="Operator 12",
            reported_date=today - timedelta(days=5),
        ),
    )
    db.commit()


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    Base.metadata.create_all(bind=write_engine)

    db = WriteSessionLocal()
    today = date.today()
    try:
        existing = {u.unit_number for u in db.query(unit_models.Unit.unit_number)}
        units = []
        for values in DEMO_UNITS:
            fresh = values["unit_number"] not in existing
            unit = _get_or_create_unit(db, values)
            if fresh:
                _seed_unit_history(db, unit, today)
            units.append(unit)
        if not existing:
            _seed_anomalies(db, units, today)
    finally:
        db.close()


if __name__ == "__main__":
    main()
