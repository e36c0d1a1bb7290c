"""Event handlers for Orders domain events."""

from __future__ import annotations

import structlog

from modules.orders.events import (
    OrderCancelled,
    OrderConfirmed,
    OrderCreated,
    OrderStatusChanged,
    VehicleAssigned,
)
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class OrderCreatedHandler(IEventHandler[OrderCreated]):
    def handle(self, event: OrderCreated) -> None:
        logger.info(
            "order.event.created",
            order_id=event.aggregate_id,
            tracking_code=event.tracking_code,
        )


class OrderConfirmedHandler(IEventHandler[OrderConfirmed]):
    def handle(self, event: OrderConfirmed) -> None:
        logger.info(
            "order.event.confirmed",
            order_id=event.aggregate_id,
            tracking_code=event.tracking_code,
        )


class OrderStatusChangedHandler(IEventHandler[OrderStatusChanged]):
    def handle(self, event: OrderStatusChanged) -> None:
        logger.info(
            "order.event.status_changed",
            order_id=event.aggregate_id,
            old_status=event.old_status,
            new_status=event.new_status,
        )


class VehicleAssignedHandler(IEventHandler[VehicleAssigned]):
    def handle(self, event: VehicleAssigned) -> None:
        logger.info(
            "order.event.vehicle_assigned",
            order_id=event.aggregate_id,
            vehicle_id=event.vehicle_id,
        )


class OrderCancelledHandler(IEventHandler[OrderCancelled]):
    def handle(self, event: OrderCancelled) -> None:
        logger.info(
            "order.event.cancelled",
            order_id=event.aggregate_id,
            previous_status=event.previous_status,
        )


order_created_handler = OrderCreatedHandler()
order_confirmed_handler = OrderConfirmedHandler()
order_status_changed_handler = OrderStatusChangedHandler()
vehicle_assigned_handler = VehicleAssignedHandler()
order_cancelled_handler = OrderCancelledHandler()
