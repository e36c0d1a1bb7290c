"""Order domain constants.

Defines status choices and the permitted-transition table for the order
state machine.  The table is data, not scattered conditionals:
``is_allowed`` and ``next_states`` are the only readers.
"""

from decimal import Decimal

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pendiente", "Pendiente"
    CONFIRMED = "confirmado", "Confirmado"
    ASSIGNED = "asignado", "Asignado"
    IN_TRANSIT = "en_transito", "En tránsito"
    DELIVERED = "entregado", "Entregado"
    CANCELLED = "cancelado", "Cancelado"


# Tuples keep a stable order for error messages
VALID_TRANSITIONS: dict[str, tuple[str, ...]] = {
    OrderStatus.PENDING: (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    OrderStatus.CONFIRMED: (OrderStatus.ASSIGNED, OrderStatus.CANCELLED),
    OrderStatus.ASSIGNED: (OrderStatus.IN_TRANSIT, OrderStatus.CANCELLED),
    OrderStatus.IN_TRANSIT: (OrderStatus.DELIVERED,),
    OrderStatus.DELIVERED: (),
    OrderStatus.CANCELLED: (),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

CANCELLABLE_STATES: set[str] = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.ASSIGNED,
}

# States in which the order's quantity has been taken from stock
STOCK_RESERVED_STATES: set[str] = {OrderStatus.CONFIRMED, OrderStatus.ASSIGNED}

# States in which the order holds its vehicle
VEHICLE_HOLDING_STATES: set[str] = {OrderStatus.ASSIGNED, OrderStatus.IN_TRANSIT}

# Targets that move stock or vehicles; only their own use case may set them
DEDICATED_OPERATIONS: dict[str, str] = {
    OrderStatus.CONFIRMED: "confirm_order",
    OrderStatus.ASSIGNED: "assign_vehicle",
    OrderStatus.CANCELLED: "cancel_order",
}

STATUS_DESCRIPTIONS: dict[str, str] = {
    OrderStatus.PENDING: "Order received, awaiting confirmation",
    OrderStatus.CONFIRMED: "Order confirmed, preparing delivery",
    OrderStatus.ASSIGNED: "Vehicle assigned, leaving for delivery",
    OrderStatus.IN_TRANSIT: "On the way to the destination",
    OrderStatus.DELIVERED: "Delivered successfully",
    OrderStatus.CANCELLED: "Order cancelled",
}

MIN_ADDRESS_LENGTH = 10
MAX_ADDRESS_LENGTH = 500

QUANTITY_PLACES = Decimal("0.01")

TRACKING_CODE_DIGITS = 6


def is_allowed(current: str, new: str) -> bool:
    return new in VALID_TRANSITIONS.get(current, ())


def next_states(current: str) -> tuple[str, ...]:
    return VALID_TRANSITIONS.get(current, ())


def describe_status(status: str) -> str:
    return STATUS_DESCRIPTIONS.get(status, "Unknown status")
