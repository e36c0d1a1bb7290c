"""Event handlers for Fleet domain events."""

from __future__ import annotations

import structlog

from modules.vehicles.events import VehicleReleased, VehicleStatusChanged
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class VehicleStatusChangedHandler(IEventHandler[VehicleStatusChanged]):
    def handle(self, event: VehicleStatusChanged) -> None:
        logger.info(
            "vehicle.event.status_changed",
            vehicle_id=event.aggregate_id,
            previous_status=event.previous_status,
            new_status=event.new_status,
        )


class VehicleReleasedHandler(IEventHandler[VehicleReleased]):
    def handle(self, event: VehicleReleased) -> None:
        logger.info(
            "vehicle.event.released",
            vehicle_id=event.aggregate_id,
            reason=event.reason,
        )


vehicle_status_changed_handler = VehicleStatusChangedHandler()
vehicle_released_handler = VehicleReleasedHandler()
