# backend/fleetdb/constants.py
"""
Fleet-wide constants shared by several apps.

Keep these plain values: they are read by services, schemas and the
seed script alike.
"""

from __future__ import annotations

from typing import Dict, Tuple

# Standard preventive maintenance intervals offered to planners (hours).
MAINTENANCE_INTERVALS: Tuple[int, ...] = (250, 500, 750, 1000, 2000, 3000)

# Estimated cost of a preventive service per interval.
INTERVAL_ESTIMATED_COSTS: Dict[int, float] = {
    250: 150.0,
    500: 300.0,
    750: 200.0,
    1000: 500.0,
    2000: 800.0,
    3000: 1200.0,
}
DEFAULT_INTERVAL_ESTIMATED_COST = 300.0

# A new unit gets its first service this many hours after its current reading.
FIRST_SERVICE_OFFSET_HOURS = 250.0

# Remaining hours at or below which an open schedule is "due soon".
DUE_SOON_HOURS = 50.0
DUE_MEDIUM_HOURS = 100.0

# Fuel alerts (averages over the alert window).
FUEL_EFFICIENCY_ALERT_LPH = 1.5
FUEL_EFFICIENCY_HIGH_LPH = 2.0
FUEL_COST_ALERT = 200.0
FUEL_COST_HIGH = 400.0
FUEL_ALERT_WINDOW_DAYS = 30
FUEL_COMPARISON_WINDOW_DAYS = 90

# Availability is computed against a fixed ~1 month window.
AVAILABILITY_PERIOD_HOURS = 24 * 30

UNASSIGNED_TECHNICIAN = "Unassigned"
