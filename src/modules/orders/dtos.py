"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

- ``CreateOrderDTO``: input for order creation.
- ``ConfirmationResult`` / ``AssignmentResult``: outputs of the
  confirm and assign use-cases.
- ``TrackingInfo``: public view of an order looked up by tracking code.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, List, Optional

from django.utils import timezone
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.orders.constants import (
    MAX_ADDRESS_LENGTH,
    MIN_ADDRESS_LENGTH,
    QUANTITY_PLACES,
)

_PHONE_SEPARATORS = re.compile(r"[\s\-()]")
_PHONE_PATTERN = re.compile(r"^[67]\d{7}$")
_COORDINATE_PLACES = Decimal("0.000001")


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateOrderDTO(BaseModel):
    """Immutable DTO for order creation requests.

    Validates:
    - ``quantity`` is positive and at most ``max_quantity`` (2 places).
    - ``delivery_address`` has 10..500 characters after trimming.
    - Coordinates come as a pair and are in range.
    - ``contact_phone`` is a Bolivian mobile number when given.
    - ``requested_delivery_date`` is neither past nor too far ahead.

    ``max_quantity`` and ``max_days_ahead`` are injected from settings by
    the caller.
    """

    model_config = ConfigDict(frozen=True)

    material_id: int
    quantity: Decimal
    delivery_address: str
    delivery_latitude: Optional[Decimal] = None
    delivery_longitude: Optional[Decimal] = None
    contact_phone: Optional[str] = None
    requested_delivery_date: Optional[date] = None
    notes: str = ""
    max_quantity: Decimal = Decimal("1000")
    max_days_ahead: int = 30

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: Decimal) -> Decimal:
        v = v.quantize(QUANTITY_PLACES)
        if v <= 0:
            raise ValueError("Quantity must be greater than zero.")
        return v

    @field_validator("delivery_address")
    @classmethod
    def address_length(cls, v: str) -> str:
        v = v.strip()
        if len(v) < MIN_ADDRESS_LENGTH:
            raise ValueError(
                f"Delivery address must have at least {MIN_ADDRESS_LENGTH} characters."
            )
        if len(v) > MAX_ADDRESS_LENGTH:
            raise ValueError(
                f"Delivery address cannot exceed {MAX_ADDRESS_LENGTH} characters."
            )
        return v

    @field_validator("delivery_latitude")
    @classmethod
    def latitude_in_range(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        if not Decimal("-90") <= v <= Decimal("90"):
            raise ValueError("Latitude must be between -90 and 90.")
        return v.quantize(_COORDINATE_PLACES)

    @field_validator("delivery_longitude")
    @classmethod
    def longitude_in_range(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        if not Decimal("-180") <= v <= Decimal("180"):
            raise ValueError("Longitude must be between -180 and 180.")
        return v.quantize(_COORDINATE_PLACES)

    @field_validator("contact_phone")
    @classmethod
    def phone_format(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        cleaned = _PHONE_SEPARATORS.sub("", v)
        if not _PHONE_PATTERN.match(cleaned):
            raise ValueError(
                "Phone must be a Bolivian number (8 digits starting with 6 or 7)."
            )
        return cleaned

    @field_validator("notes")
    @classmethod
    def strip_notes(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def cross_field_rules(self):
        if self.quantity > self.max_quantity:
            raise ValueError(f"Quantity cannot exceed {self.max_quantity} m³.")

        if (self.delivery_latitude is None) != (self.delivery_longitude is None):
            raise ValueError("Latitude and longitude must be provided together.")

        if self.requested_delivery_date is not None:
            today = timezone.localdate()
            if self.requested_delivery_date < today:
                raise ValueError("Requested delivery date cannot be in the past.")
            if self.requested_delivery_date > today + timedelta(days=self.max_days_ahead):
                raise ValueError(
                    "Requested delivery date cannot be more than "
                    f"{self.max_days_ahead} days ahead."
                )
        return self


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class ConfirmationResult(BaseModel):
    """Confirmed order, the stock record after reservation, and alerts."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    order: Any
    stock_record: Any
    alerts: List[Any] = []


class AssignmentResult(BaseModel):
    """Assigned order, its vehicle, and the engine decision (if automatic)."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    order: Any
    vehicle: Any
    decision: Optional[Any] = None


class StatusHistoryDTO(BaseModel):
    """Immutable DTO for order status history API responses."""

    model_config = ConfigDict(frozen=True)

    old_status: Optional[str]
    new_status: str
    notes: str
    created_at: datetime

    @classmethod
    def from_entity(cls, history: Any) -> StatusHistoryDTO:
        return cls(
            old_status=history.old_status,
            new_status=history.new_status,
            notes=history.notes,
            created_at=history.created_at,
        )


class TrackingInfo(BaseModel):
    """What the public tracking page may show about an order."""

    model_config = ConfigDict(frozen=True)

    tracking_code: str
    status: str
    status_description: str
    material: str
    quantity: Decimal
    delivery_address: str
    requested_delivery_date: Optional[date]
    vehicle_plate: Optional[str]
    estimated_delivery_minutes: Optional[int]
    can_be_cancelled: bool
    is_final_state: bool
    created_at: datetime
    history: List[StatusHistoryDTO]

    @classmethod
    def from_entity(cls, order: Any) -> TrackingInfo:
        """Assumes ``material``, ``vehicle`` and ``status_history`` are loaded."""
        return cls(
            tracking_code=order.tracking_code,
            status=order.status,
            status_description=order.status_description,
            material=order.material.name,
            quantity=order.quantity,
            delivery_address=order.delivery_address,
            requested_delivery_date=order.requested_delivery_date,
            vehicle_plate=order.vehicle.plate if order.vehicle_id else None,
            estimated_delivery_minutes=order.estimated_delivery_minutes,
            can_be_cancelled=order.can_be_cancelled,
            is_final_state=order.is_terminal,
            created_at=order.created_at,
            history=[StatusHistoryDTO.from_entity(h) for h in order.status_history.all()],
        )
