"""Vehicle domain constants.

Status values are the persisted wire strings.  Scoring and ETA tables
drive ``modules.vehicles.assignment``.
"""

import re
from datetime import timedelta
from decimal import Decimal

from django.db import models


class VehicleStatus(models.TextChoices):
    AVAILABLE = "disponible", "Disponible"
    IN_USE = "en_uso", "En uso"
    MAINTENANCE = "mantenimiento", "Mantenimiento"
    BROKEN = "averiado", "Averiado"


PLATE_PATTERN = re.compile(r"^[A-Z]{3}\d{3}$")


def normalize_plate(value: str) -> str:
    return re.sub(r"[\s-]", "", value or "").upper()


# ---------------------------------------------------------------------------
# Assignment scoring
# ---------------------------------------------------------------------------

# (lower bound inclusive, upper bound, upper inclusive, points, rule name)
UTILIZATION_BANDS = (
    (Decimal("0.70"), Decimal("0.95"), True, 10, "Optimal capacity utilization"),
    (Decimal("0.50"), Decimal("0.70"), False, 7, "Acceptable capacity utilization"),
    (Decimal("0.30"), Decimal("0.50"), False, 4, "Low capacity utilization"),
)
OVERSIZED_POINTS = 1
OVERSIZED_RULE = "Vehicle oversized for the load"

SMALLEST_CAPACITY_POINTS = 5
SMALLEST_CAPACITY_RULE = "Smallest sufficient capacity"

EARTH_RADIUS_KM = 6371.0

# (distance upper bound in km, points, rule name); last entry catches the rest
PROXIMITY_BANDS = (
    (5.0, 8, "Very close to the delivery point"),
    (15.0, 5, "Close to the delivery point"),
    (None, 2, "Far from the delivery point"),
)

FRESHNESS_BANDS = (
    (timedelta(minutes=30), 3, "Recent location fix"),
    (timedelta(minutes=120), 1, "Location fix under two hours old"),
)

# ---------------------------------------------------------------------------
# Delivery time estimate (minutes)
# ---------------------------------------------------------------------------

ETA_BASE_MINUTES = 45
ETA_PERIPHERAL_ZONE_MINUTES = 15
ETA_CENTRAL_ZONE_MINUTES = 5
ETA_RUSH_HOUR_MINUTES = 20
ETA_LUNCH_HOUR_MINUTES = 10
ETA_LARGE_VEHICLE_MINUTES = 10
ETA_SMALL_VEHICLE_MINUTES = -5
ETA_LOADING_MINUTES_PER_BATCH = 2
ETA_LOADING_BATCH_M3 = 5

RUSH_HOURS = (range(7, 10), range(17, 20))
LUNCH_HOURS = range(12, 15)

LARGE_VEHICLE_M3 = Decimal("20")
SMALL_VEHICLE_M3 = Decimal("10")

DEFAULT_PERIPHERAL_ZONES = ("sacaba", "quillacollo")
DEFAULT_CENTRAL_ZONES = ("cercado", "centro")

# A fix older than this is shown as stale on the fleet views
STALE_LOCATION_AFTER = timedelta(hours=2)

# Status changes fleet staff may make by hand.  IN_USE is entered only by
# order assignment and left only by an explicit release.
MANUAL_STATUS_TRANSITIONS: dict[str, set[str]] = {
    VehicleStatus.AVAILABLE: {VehicleStatus.MAINTENANCE, VehicleStatus.BROKEN},
    VehicleStatus.MAINTENANCE: {VehicleStatus.AVAILABLE, VehicleStatus.BROKEN},
    VehicleStatus.BROKEN: {VehicleStatus.AVAILABLE, VehicleStatus.MAINTENANCE},
    VehicleStatus.IN_USE: set(),
}
