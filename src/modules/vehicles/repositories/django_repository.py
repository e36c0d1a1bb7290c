"""Django ORM implementation of the Vehicle repository."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

import structlog
from django.db import models, transaction
from django.utils import timezone

from modules.orders.constants import VEHICLE_HOLDING_STATES
from modules.orders.models import Order
from modules.vehicles.constants import VehicleStatus
from modules.vehicles.models import Vehicle
from modules.vehicles.repositories.interfaces import IVehicleRepository

logger = structlog.get_logger(__name__)


class VehicleDjangoRepository(IVehicleRepository):
    """Concrete Vehicle repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[Vehicle]:
        try:
            return Vehicle.objects.filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_plate(self, plate: str) -> Optional[Vehicle]:
        return Vehicle.objects.filter(plate=plate).first()

    def active_order_code(self, vehicle_id: int) -> Optional[str]:
        return (
            Order.objects.filter(
                vehicle_id=vehicle_id, status__in=VEHICLE_HOLDING_STATES
            )
            .values_list("tracking_code", flat=True)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Vehicle]:
        queryset = Vehicle.objects.all()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("capacity_m3", "id")

    def list_available_by_capacity(self, min_capacity: Decimal) -> List[Vehicle]:
        return list(
            Vehicle.objects.filter(
                status=VehicleStatus.AVAILABLE,
                capacity_m3__gte=min_capacity,
            ).order_by("capacity_m3", "id")
        )

    @transaction.atomic
    def save(self, entity: Vehicle) -> Vehicle:
        is_new = entity._state.adding
        entity.save()
        logger.info("vehicle.saved", vehicle_id=entity.id, is_new=is_new)
        return entity

    def change_status(
        self, vehicle_id: int, expected: Iterable[str], new_status: str
    ) -> int:
        rows = Vehicle.objects.filter(
            id=vehicle_id,
            status__in=list(expected),
        ).update(status=new_status, updated_at=timezone.now())
        logger.debug(
            "vehicle.status_update_attempted",
            vehicle_id=vehicle_id,
            new_status=new_status,
            rows=rows,
        )
        return rows

    def update_location(
        self, vehicle_id: int, latitude: Decimal, longitude: Decimal, at: datetime
    ) -> int:
        return Vehicle.objects.filter(id=vehicle_id).update(
            last_latitude=latitude,
            last_longitude=longitude,
            last_location_at=at,
            updated_at=timezone.now(),
        )
