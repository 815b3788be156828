# backend/fleetdb/apps/anomalies/router_api.py
"""
JSON endpoints consumed by dashboard widgets.

Same data as the /anomalies router, wrapped in the ActionResult envelope.
Failures never surface FastAPI's default error body: they come back as
`{"success": false, "error": "..."}` with a 400/404/500 status.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...database import get_db, get_read_db
from ...schemas import ActionResult
from ...utils.filters import parse_enum_filter, parse_text_filter
from . import models, schemas, services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/anomalies", tags=["anomalies-api"])


def _failure(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ActionResult(success=False, error=error).model_dump(),
    )


@router.get("", response_model=ActionResult)
def list_anomalies(
    unit_id: Optional[str] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    severity: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_read_db),
):
    try:
        rows = services.list_anomalies(
            db,
            unit_id=parse_text_filter(unit_id),
            status=parse_enum_filter(status_filter, models.AnomalyStatusEnum, "status"),
            severity=parse_enum_filter(severity, models.AnomalySeverityEnum, "severity"),
            date_from=date_from,
            date_to=date_to,
            search=parse_text_filter(search),
        )
    except HTTPException as exc:
        return _failure(status.HTTP_400_BAD_REQUEST, str(exc.detail))
    except SQLAlchemyError as exc:
        logger.exception("Listing anomalies failed")
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    data = [schemas.AnomalyRead.model_validate(r).model_dump(mode="json") for r in rows]
    return ActionResult(success=True, data=data)


@router.post("/{anomaly_id}/resolve", response_model=ActionResult)
def resolve_anomaly(
    anomaly_id: str,
    payload: Optional[schemas.AnomalyResolveLegacy] = Body(None),
    db: Session = Depends(get_db),
):
    payload = payload or schemas.AnomalyResolveLegacy()
    try:
        anomaly = services.get_anomaly_or_404(db, anomaly_id)
        anomaly = services.resolve_anomaly(
            db,
            anomaly,
            actual_cost=payload.actual_repair_cost,
            resolution_notes=payload.resolution_notes,
            resolved_date=payload.resolution_date,
        )
        db.commit()
    except HTTPException as exc:
        db.rollback()
        code = exc.status_code if exc.status_code == status.HTTP_404_NOT_FOUND else status.HTTP_400_BAD_REQUEST
        return _failure(code, str(exc.detail))
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Resolving anomaly %s failed", anomaly_id)
        return _failure(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    db.refresh(anomaly)
    return ActionResult(
        success=True,
        data=schemas.AnomalyRead.model_validate(anomaly).model_dump(mode="json"),
    )
