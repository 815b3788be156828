# backend/fleetdb/schemas.py
"""
Cross-app schemas.

Per-app request/response models live in fleetdb.apps.<app>.schemas.
"""

from typing import Any, Optional

from pydantic import BaseModel


class ActionResult(BaseModel):
    """
    Envelope used by the JSON endpoints consumed by dashboard widgets:
    `{"success": true, "data": ...}` or `{"success": false, "error": "..."}`.
    """

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None


class StatusMessage(BaseModel):
    status: str
    message: Optional[str] = None
