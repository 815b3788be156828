from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

ROOT = Path(__file__).resolve().parent
sys.path.append(str(ROOT))

os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ["DATABASE_WRITE_URL"] = "sqlite+pysqlite:///:memory:"
os.environ.pop("DATABASE_READ_URL", None)

from fleetdb.database import Base, get_db, get_read_db, get_write_db  # noqa: E402
from fleetdb.apps.units import models as unit_models  # noqa: E402
from fleetdb.apps.maintenance import models as maintenance_models  # noqa: E402
from fleetdb.apps.service_records import models as service_models  # noqa: E402
from fleetdb.apps.fuel import models as fuel_models  # noqa: E402
from fleetdb.apps.anomalies import models as anomaly_models  # noqa: E402


@pytest.fixture()
def db_session(tmp_path, monkeypatch):
    monkeypatch.setenv("UNIT_IMAGE_UPLOAD_DIR", str(tmp_path / "uploads"))

    # One shared connection so the TestClient thread sees the same in-memory DB.
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(
        bind=engine,
        tables=[
            unit_models.Unit.__table__,
            maintenance_models.MaintenanceSchedule.__table__,
            service_models.Service.__table__,
            fuel_models.FuelConsumption.__table__,
            anomaly_models.AnomalyReport.__table__,
        ],
    )
    TestingSession = sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
    )
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient

    from fleetdb.main import app

    def _override():
        yield db_session

    app.dependency_overrides[get_db] = _override
    app.dependency_overrides[get_write_db] = _override
    app.dependency_overrides[get_read_db] = _override
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def make_unit(db_session):
    """Insert a unit straight into the session (flushed, not committed)."""

    counter = {"n": 0}

    def _make(**overrides) -> unit_models.Unit:
        counter["n"] += 1
        values = dict(
            unit_number=f"FL-{counter['n']:03d}",
            brand="Toyota",
            model="8FGU25",
            serial_number=f"SN-{counter['n']:05d}",
            year=2020,
            capacity_kg=2500.0,
            fuel_type=unit_models.FuelTypeEnum.GAS,
            current_hours=0.0,
            status=unit_models.UnitStatusEnum.ACTIVE,
            next_service_hours=250.0,
        )
        values.update(overrides)
        unit = unit_models.Unit(**values)
        db_session.add(unit)
        db_session.flush()
        return unit

    return _make
