"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderCreated(DomainEvent):
    """Raised when an order is created."""

    tracking_code: str
    client_id: int
    material_id: int
    quantity: str


@dataclass(frozen=True, kw_only=True)
class OrderConfirmed(DomainEvent):
    """Raised when an order is confirmed and its stock reserved."""

    tracking_code: str
    quantity: str


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order status changes."""

    old_status: str
    new_status: str


@dataclass(frozen=True, kw_only=True)
class VehicleAssigned(DomainEvent):
    """Raised when an order is bound to a vehicle."""

    vehicle_id: int
    score: Optional[int] = None
    estimated_minutes: Optional[int] = None


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(DomainEvent):
    """Raised when an order is cancelled."""

    previous_status: str
    stock_returned: str = "0"
    vehicle_released: Optional[int] = None
