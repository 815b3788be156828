# backend/fleetdb/main.py
import logging
import os
from typing import List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .apps.anomalies.router import router as anomalies_router
from .apps.anomalies.router_api import router as anomalies_api_router
from .apps.fuel.router import router as fuel_router
from .apps.maintenance.router import router as maintenance_router
from .apps.reports.router import router as reports_router
from .apps.service_records.router import router as services_router
from .apps.units.router import router as units_router

logger = logging.getLogger(__name__)


def _allowed_origins() -> List[str]:
    """
    Parse CORS_ALLOWED_ORIGINS from env.

    Accepts comma-separated origins. If unset, defaults to local dev ports.
    """
    raw = os.getenv("CORS_ALLOWED_ORIGINS", "")
    if raw:
        origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
        if origins:
            return origins
    return [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
        "http://localhost:5173",
    ]


app = FastAPI(title="Forklift Fleet API", version="1.0.0")
cors_origins = _allowed_origins()
allow_credentials = "*" not in cors_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS origins: %s", cors_origins)


@app.get("/", tags=["health"])
def read_root():
    return {"status": "ok", "message": "Forklift fleet backend is running"}


@app.get("/health", tags=["health"])
def health():
    return {"status": "ok"}


app.include_router(units_router)
app.include_router(maintenance_router)
app.include_router(services_router)
app.include_router(fuel_router)
app.include_router(anomalies_router)
app.include_router(anomalies_api_router)
app.include_router(reports_router)
