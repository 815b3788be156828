# backend/fleetdb/__init__.py
"""
Import ORM models from each app so that:

- Alembic and Base.metadata.create_all() see all tables.
- String relationship targets ("Service", "AnomalyReport", ...) resolve
  no matter which app is imported first.

The actual model classes are kept in fleetdb/apps/*/models.py.
"""

from .apps.units import models as units_models                      # forklifts
from .apps.maintenance import models as maintenance_models          # hours-based schedules
from .apps.service_records import models as service_records_models  # work orders
from .apps.fuel import models as fuel_models                        # fuel / energy periods
from .apps.anomalies import models as anomalies_models              # incident reports

__all__ = [
    "units_models",
    "maintenance_models",
    "service_records_models",
    "fuel_models",
    "anomalies_models",
]
