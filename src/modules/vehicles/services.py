"""Fleet service layer (Use Cases).

The only writer of vehicle ``status`` and position.  Every status change
goes through ``IVehicleRepository.change_status``, a conditional update on
the status the caller observed.

Business rules enforced:
- IN_USE is entered only through ``mark_in_use`` (order assignment) and
  left only through ``release``.
- A vehicle held by an assigned or in-transit order cannot be released.
- Manual status changes follow ``MANUAL_STATUS_TRANSITIONS``.
- A vehicle that stopped being AVAILABLE between selection and the write
  is rejected rather than double-assigned.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

import structlog
from django.db import transaction
from django.utils import timezone

from modules.core.outbox import record_event
from modules.vehicles.constants import MANUAL_STATUS_TRANSITIONS, VehicleStatus
from modules.vehicles.events import VehicleReleased, VehicleStatusChanged
from modules.vehicles.exceptions import (
    DuplicatePlate,
    InvalidVehicleStatus,
    VehicleHeldByOrder,
    VehicleNotFound,
    VehicleUnavailable,
)
from modules.vehicles.models import Vehicle

if TYPE_CHECKING:
    from modules.vehicles.dtos import (
        RegisterVehicleDTO,
        UpdateLocationDTO,
        UpdateVehicleStatusDTO,
    )
    from modules.vehicles.repositories.interfaces import IVehicleRepository

logger = structlog.get_logger(__name__)


class VehicleService:
    """Application service for fleet use-cases.

    Receives an ``IVehicleRepository`` via constructor injection (DIP).
    ``clock`` defaults to ``django.utils.timezone.now``.
    """

    def __init__(
        self,
        repository: IVehicleRepository,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._repo = repository
        self._clock = clock or timezone.now

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self._repo.get_by_id(vehicle_id)
        if vehicle is None:
            raise VehicleNotFound(f"Vehicle {vehicle_id} not found.")
        return vehicle

    def list_vehicles(self, filters: Optional[Dict[str, Any]] = None) -> List[Vehicle]:
        return list(self._repo.list(filters))

    def list_available(self, min_capacity: Decimal = Decimal("0")) -> List[Vehicle]:
        return self._repo.list_available_by_capacity(min_capacity)

    def get_fleet_stats(self) -> Dict[str, Any]:
        vehicles = self.list_vehicles()
        total = len(vehicles)
        by_status = {value: 0 for value in VehicleStatus.values}
        for vehicle in vehicles:
            by_status[vehicle.status] += 1

        total_capacity = sum((v.capacity_m3 for v in vehicles), Decimal("0"))
        available_capacity = sum(
            (v.capacity_m3 for v in vehicles if v.status == VehicleStatus.AVAILABLE),
            Decimal("0"),
        )
        return {
            "total": total,
            "available": by_status[VehicleStatus.AVAILABLE],
            "in_use": by_status[VehicleStatus.IN_USE],
            "maintenance": by_status[VehicleStatus.MAINTENANCE],
            "broken": by_status[VehicleStatus.BROKEN],
            "availability_percentage": _percentage(
                by_status[VehicleStatus.AVAILABLE], total
            ),
            "utilization_percentage": _percentage(
                by_status[VehicleStatus.IN_USE], total
            ),
            "total_capacity_m3": total_capacity,
            "available_capacity_m3": available_capacity,
        }

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def register_vehicle(self, dto: RegisterVehicleDTO) -> Vehicle:
        """Add a vehicle to the fleet as AVAILABLE.

        Raises:
            DuplicatePlate: another vehicle already uses the plate.
        """
        if self._repo.get_by_plate(dto.plate):
            raise DuplicatePlate(f"Plate {dto.plate} is already registered.")

        vehicle = Vehicle(
            plate=dto.plate,
            capacity_m3=dto.capacity_m3,
            brand=dto.brand,
            model=dto.model,
            status=VehicleStatus.AVAILABLE,
        )
        vehicle = self._repo.save(vehicle)
        logger.info("vehicle.registered", vehicle_id=vehicle.id, plate=vehicle.plate)
        return vehicle

    @transaction.atomic
    def mark_in_use(self, vehicle_id: int) -> Vehicle:
        """Flip AVAILABLE -> IN_USE with a conditional write.

        Raises:
            VehicleNotFound: vehicle does not exist.
            VehicleUnavailable: vehicle was no longer AVAILABLE at write time.
        """
        rows = self._repo.change_status(
            vehicle_id, [VehicleStatus.AVAILABLE], VehicleStatus.IN_USE
        )
        if rows == 0:
            vehicle = self.get_vehicle(vehicle_id)
            logger.warning(
                "vehicle.assignment_race_lost",
                vehicle_id=vehicle_id,
                status=vehicle.status,
            )
            raise VehicleUnavailable(
                f"Vehicle {vehicle.plate} is no longer available "
                f"(status: {vehicle.status}).",
                details={"vehicle_id": vehicle_id, "status": vehicle.status},
            )
        self._record_status_change(
            vehicle_id, VehicleStatus.AVAILABLE, VehicleStatus.IN_USE
        )
        return self.get_vehicle(vehicle_id)

    @transaction.atomic
    def release(self, vehicle_id: int, reason: str = "") -> Vehicle:
        """Return an IN_USE vehicle to AVAILABLE.

        Refused while an ASSIGNED or IN_TRANSIT order still holds the
        vehicle; that order is finished by delivery or ``cancel_order``.

        Raises:
            VehicleNotFound: vehicle does not exist.
            VehicleHeldByOrder: an active order still holds the vehicle.
            InvalidVehicleStatus: vehicle is not IN_USE.
        """
        order_code = self._repo.active_order_code(vehicle_id)
        if order_code is not None:
            vehicle = self.get_vehicle(vehicle_id)
            logger.warning(
                "vehicle.release_refused", vehicle_id=vehicle_id, order=order_code
            )
            raise VehicleHeldByOrder(
                f"Vehicle {vehicle.plate} is still assigned to order {order_code}; "
                "deliver or cancel the order first.",
                details={"order": order_code},
            )
        rows = self._repo.change_status(
            vehicle_id, [VehicleStatus.IN_USE], VehicleStatus.AVAILABLE
        )
        if rows == 0:
            vehicle = self.get_vehicle(vehicle_id)
            raise InvalidVehicleStatus(
                f"Vehicle {vehicle.plate} is not in use (status: {vehicle.status})."
            )
        self._record_status_change(
            vehicle_id, VehicleStatus.IN_USE, VehicleStatus.AVAILABLE
        )
        record_event(VehicleReleased(aggregate_id=vehicle_id, reason=reason), topic="vehicles")
        logger.info("vehicle.released", vehicle_id=vehicle_id, reason=reason)
        return self.get_vehicle(vehicle_id)

    @transaction.atomic
    def update_status(self, vehicle_id: int, dto: UpdateVehicleStatusDTO) -> Vehicle:
        """Manual fleet status change (maintenance, breakdown, back in service).

        Raises:
            VehicleNotFound: vehicle does not exist.
            InvalidVehicleStatus: change not allowed from the current status.
            VehicleUnavailable: status changed concurrently.
        """
        vehicle = self.get_vehicle(vehicle_id)
        current = vehicle.status
        allowed = MANUAL_STATUS_TRANSITIONS.get(current, set())
        if dto.status not in allowed:
            permitted = ", ".join(sorted(allowed)) or "none"
            hint = " Use the release action for vehicles in use." if current == VehicleStatus.IN_USE else ""
            raise InvalidVehicleStatus(
                f"Invalid vehicle status change: {current} → {dto.status}. "
                f"Allowed changes: {permitted}.{hint}",
                details={"current": current, "requested": dto.status},
            )

        rows = self._repo.change_status(vehicle_id, [current], dto.status)
        if rows == 0:
            raise VehicleUnavailable(
                f"Vehicle {vehicle.plate} changed status concurrently; retry."
            )
        self._record_status_change(vehicle_id, current, dto.status)
        return self.get_vehicle(vehicle_id)

    @transaction.atomic
    def update_location(self, vehicle_id: int, dto: UpdateLocationDTO) -> Vehicle:
        rows = self._repo.update_location(
            vehicle_id, dto.latitude, dto.longitude, self._clock()
        )
        if rows == 0:
            raise VehicleNotFound(f"Vehicle {vehicle_id} not found.")
        logger.info(
            "vehicle.location_updated",
            vehicle_id=vehicle_id,
            latitude=str(dto.latitude),
            longitude=str(dto.longitude),
        )
        return self.get_vehicle(vehicle_id)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _record_status_change(self, vehicle_id: int, previous: str, new: str) -> None:
        record_event(
            VehicleStatusChanged(
                aggregate_id=vehicle_id,
                previous_status=str(previous),
                new_status=str(new),
            ),
            topic="vehicles",
        )
        logger.info(
            "vehicle.status_changed",
            vehicle_id=vehicle_id,
            previous_status=str(previous),
            new_status=str(new),
        )


def _percentage(part: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(part / total * 100, 1)
