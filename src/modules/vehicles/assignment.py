"""Vehicle Assignment Engine.

Scores every eligible vehicle for one order and picks the best one.
Everything here is a pure function of its arguments: vehicles are read
through their attributes (``plate``, ``capacity_m3``, ``last_latitude``,
``last_longitude``, ``last_location_at``), nothing touches the database,
and the current time is always passed in as ``now``.

Scoring rules (additive, higher wins):
1. Utilization band of ``quantity / capacity``: 10 / 7 / 4 / 1.
2. Smallest capacity among eligible vehicles: +5.
3. Proximity of the last fix to the delivery point: +8 / +5 / +2
   (only when both positions are known).
4. Freshness of the last fix: +3 under 30 min, +1 under 2 h.

Ties keep input order (stable sort), so with the repository's
capacity-ascending ordering the smallest vehicle wins a tie.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from django.utils import timezone

from modules.vehicles.constants import (
    DEFAULT_CENTRAL_ZONES,
    DEFAULT_PERIPHERAL_ZONES,
    EARTH_RADIUS_KM,
    ETA_BASE_MINUTES,
    ETA_CENTRAL_ZONE_MINUTES,
    ETA_LARGE_VEHICLE_MINUTES,
    ETA_LOADING_BATCH_M3,
    ETA_LOADING_MINUTES_PER_BATCH,
    ETA_LUNCH_HOUR_MINUTES,
    ETA_PERIPHERAL_ZONE_MINUTES,
    ETA_RUSH_HOUR_MINUTES,
    ETA_SMALL_VEHICLE_MINUTES,
    FRESHNESS_BANDS,
    LARGE_VEHICLE_M3,
    LUNCH_HOURS,
    OVERSIZED_POINTS,
    OVERSIZED_RULE,
    PROXIMITY_BANDS,
    RUSH_HOURS,
    SMALL_VEHICLE_M3,
    SMALLEST_CAPACITY_POINTS,
    SMALLEST_CAPACITY_RULE,
    UTILIZATION_BANDS,
)
from modules.vehicles.exceptions import NoVehicleAvailable

# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DeliveryRequest:
    """The order-side inputs of a decision."""

    quantity: Decimal
    delivery_address: str = ""
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @classmethod
    def from_order(cls, order: Any) -> DeliveryRequest:
        return cls(
            quantity=Decimal(order.quantity),
            delivery_address=order.delivery_address or "",
            latitude=order.delivery_latitude,
            longitude=order.delivery_longitude,
        )


@dataclass(frozen=True)
class RuleResult:
    name: str
    points: int


@dataclass(frozen=True)
class VehicleScore:
    vehicle: Any
    score: int
    utilization: Decimal
    rules: Tuple[RuleResult, ...]
    distance_km: Optional[float] = None

    @property
    def breakdown(self) -> List[dict]:
        return [{"rule": r.name, "points": r.points} for r in self.rules]


@dataclass(frozen=True)
class AssignmentDecision:
    vehicle: Any
    score: VehicleScore
    justification: str
    estimated_minutes: int
    ranking: Tuple[VehicleScore, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


def haversine_km(lat1: Any, lng1: Any, lat2: Any, lng2: Any) -> float:
    """Great-circle distance between two points in kilometres."""
    phi1, phi2 = math.radians(float(lat1)), math.radians(float(lat2))
    d_phi = math.radians(float(lat2) - float(lat1))
    d_lambda = math.radians(float(lng2) - float(lng1))
    a = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


# ---------------------------------------------------------------------------
# Rules
# ---------------------------------------------------------------------------


def utilization_rule(ratio: Decimal) -> RuleResult:
    for lower, upper, upper_inclusive, points, name in UTILIZATION_BANDS:
        below_upper = ratio <= upper if upper_inclusive else ratio < upper
        if lower <= ratio and below_upper:
            return RuleResult(name, points)
    return RuleResult(OVERSIZED_RULE, OVERSIZED_POINTS)


def proximity_rule(distance_km: float) -> RuleResult:
    for limit, points, name in PROXIMITY_BANDS:
        if limit is None or distance_km < limit:
            return RuleResult(name, points)
    raise AssertionError("PROXIMITY_BANDS must end with a catch-all band")


def freshness_rule(location_at: Optional[datetime], now: datetime) -> Optional[RuleResult]:
    if location_at is None:
        return None
    age = now - location_at
    for limit, points, name in FRESHNESS_BANDS:
        if age < limit:
            return RuleResult(name, points)
    return None


# ---------------------------------------------------------------------------
# Scoring / selection
# ---------------------------------------------------------------------------


def score_vehicles(
    request: DeliveryRequest, vehicles: Sequence[Any], now: datetime
) -> List[VehicleScore]:
    """Score every vehicle that can carry the load, preserving input order."""
    quantity = Decimal(request.quantity)
    eligible = [v for v in vehicles if Decimal(v.capacity_m3) >= quantity]
    if not eligible:
        return []

    smallest = min(Decimal(v.capacity_m3) for v in eligible)
    scores = []
    for vehicle in eligible:
        capacity = Decimal(vehicle.capacity_m3)
        ratio = quantity / capacity
        rules = [utilization_rule(ratio)]

        if capacity == smallest:
            rules.append(RuleResult(SMALLEST_CAPACITY_RULE, SMALLEST_CAPACITY_POINTS))

        distance = None
        if (
            request.has_location
            and vehicle.last_latitude is not None
            and vehicle.last_longitude is not None
        ):
            distance = haversine_km(
                vehicle.last_latitude,
                vehicle.last_longitude,
                request.latitude,
                request.longitude,
            )
            rules.append(proximity_rule(distance))

        freshness = freshness_rule(vehicle.last_location_at, now)
        if freshness is not None:
            rules.append(freshness)

        scores.append(
            VehicleScore(
                vehicle=vehicle,
                score=sum(r.points for r in rules),
                utilization=ratio,
                rules=tuple(rules),
                distance_km=distance,
            )
        )
    return scores


def select_vehicle(
    request: DeliveryRequest,
    vehicles: Sequence[Any],
    now: datetime,
    peripheral_zones: Sequence[str] = DEFAULT_PERIPHERAL_ZONES,
    central_zones: Sequence[str] = DEFAULT_CENTRAL_ZONES,
) -> AssignmentDecision:
    """Pick the highest-scoring vehicle.

    Raises:
        NoVehicleAvailable: no vehicle can carry ``request.quantity``.
    """
    scores = score_vehicles(request, vehicles, now)
    if not scores:
        raise NoVehicleAvailable(
            f"No vehicle with sufficient capacity ({format_quantity(request.quantity)} m³).",
            details={"quantity": str(request.quantity)},
        )

    ranking = tuple(sorted(scores, key=lambda s: -s.score))
    best = ranking[0]
    eta = estimate_delivery_minutes(
        best.vehicle.capacity_m3,
        request.quantity,
        request.delivery_address,
        now,
        peripheral_zones=peripheral_zones,
        central_zones=central_zones,
    )
    return AssignmentDecision(
        vehicle=best.vehicle,
        score=best,
        justification=build_justification(best),
        estimated_minutes=eta,
        ranking=ranking,
    )


def build_justification(score: VehicleScore) -> str:
    """``Vehicle ABC123 (10 m³) - utilization 90.0%. Factors: a, b``"""
    vehicle = score.vehicle
    percentage = score.utilization * 100
    text = (
        f"Vehicle {vehicle.plate} ({format_quantity(vehicle.capacity_m3)} m³)"
        f" - utilization {percentage:.1f}%"
    )
    top = sorted(score.rules, key=lambda r: -r.points)[:2]
    if top:
        text += ". Factors: " + ", ".join(r.name for r in top)
    return text


# ---------------------------------------------------------------------------
# Delivery time estimate
# ---------------------------------------------------------------------------


def estimate_delivery_minutes(
    capacity_m3: Any,
    quantity: Any,
    delivery_address: str,
    now: datetime,
    peripheral_zones: Sequence[str] = DEFAULT_PERIPHERAL_ZONES,
    central_zones: Sequence[str] = DEFAULT_CENTRAL_ZONES,
) -> int:
    """Advisory delivery time in minutes; never used for selection."""
    minutes = ETA_BASE_MINUTES

    address = (delivery_address or "").lower()
    if any(zone.lower() in address for zone in peripheral_zones):
        minutes += ETA_PERIPHERAL_ZONE_MINUTES
    elif any(zone.lower() in address for zone in central_zones):
        minutes += ETA_CENTRAL_ZONE_MINUTES

    local_now = timezone.localtime(now) if timezone.is_aware(now) else now
    hour = local_now.hour
    if any(hour in window for window in RUSH_HOURS):
        minutes += ETA_RUSH_HOUR_MINUTES
    elif hour in LUNCH_HOURS:
        minutes += ETA_LUNCH_HOUR_MINUTES

    capacity = Decimal(capacity_m3)
    if capacity > LARGE_VEHICLE_M3:
        minutes += ETA_LARGE_VEHICLE_MINUTES
    elif capacity < SMALL_VEHICLE_M3:
        minutes += ETA_SMALL_VEHICLE_MINUTES

    batches = math.ceil(Decimal(quantity) / ETA_LOADING_BATCH_M3)
    minutes += batches * ETA_LOADING_MINUTES_PER_BATCH
    return minutes


def format_quantity(value: Any) -> str:
    """``Decimal("10.00")`` -> ``"10"``, ``Decimal("7.50")`` -> ``"7.5"``."""
    text = format(Decimal(value), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
