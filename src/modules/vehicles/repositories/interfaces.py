"""Vehicle repository interface.

Status changes are conditional updates guarded by the status the caller
expects the vehicle to be in, so two concurrent assignments cannot both
take the same vehicle.
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Iterable, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.vehicles.models import Vehicle


class IVehicleRepository(IRepository["Vehicle"]):
    """Repository contract for fleet vehicles."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Vehicle]":
        """List vehicles with optional filters."""

    @abstractmethod
    def list_available_by_capacity(self, min_capacity: Decimal) -> List[Vehicle]:
        """AVAILABLE vehicles with ``capacity_m3 >= min_capacity``.

        Ordered by capacity ascending, then id.
        """

    @abstractmethod
    def change_status(
        self, vehicle_id: int, expected: Iterable[str], new_status: str
    ) -> int:
        """Set ``new_status`` only if the current status is in ``expected``.

        Returns the number of rows updated (0 means the guard failed).
        """

    @abstractmethod
    def update_location(
        self, vehicle_id: int, latitude: Decimal, longitude: Decimal, at: datetime
    ) -> int:
        """Record a new position fix. Returns rows updated."""

    @abstractmethod
    def get_by_plate(self, plate: str) -> Optional[Vehicle]:
        """Retrieve a vehicle by its normalised plate."""

    @abstractmethod
    def active_order_code(self, vehicle_id: int) -> Optional[str]:
        """Tracking code of the ASSIGNED or IN_TRANSIT order holding the
        vehicle, or ``None`` when no active order holds it."""
