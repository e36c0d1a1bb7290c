"""Domain events for the Fleet bounded context."""

from __future__ import annotations

from dataclasses import dataclass

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class VehicleStatusChanged(DomainEvent):
    """Raised when a vehicle changes status (assignment or fleet action)."""

    previous_status: str
    new_status: str


@dataclass(frozen=True, kw_only=True)
class VehicleReleased(DomainEvent):
    """Raised when an IN_USE vehicle becomes available again."""

    reason: str = ""
