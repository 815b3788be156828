# backend/fleetdb/apps/units/__init__.py
"""
Units module (forklift master data, horometer, status, images).

Only models and schemas are imported at package import time so that
Alembic can load metadata without pulling in the service layer.
"""

from . import models, schemas  # noqa: F401
