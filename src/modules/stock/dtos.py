"""Stock DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.stock.constants import QUANTITY_PLACES


class AvailabilityResult(BaseModel):
    """Advisory answer of ``StockLedger.check_availability``."""

    model_config = ConfigDict(frozen=True)

    material_id: int
    available: bool
    current_quantity: Decimal
    required_quantity: Decimal
    remaining_quantity: Optional[Decimal]
    recommendation: str


class StockIncreaseDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: Decimal

    @field_validator("quantity")
    @classmethod
    def quantity_must_not_be_negative(cls, v: Decimal) -> Decimal:
        if v < 0:
            raise ValueError("Quantity to add cannot be negative.")
        return v.quantize(QUANTITY_PLACES)


class StockAdjustmentDTO(BaseModel):
    """Administrative overwrite of a record's quantities."""

    model_config = ConfigDict(frozen=True)

    available_quantity: Optional[Decimal] = None
    minimum_quantity: Optional[Decimal] = None

    @field_validator("available_quantity", "minimum_quantity")
    @classmethod
    def must_not_be_negative(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is None:
            return v
        if v < 0:
            raise ValueError("Quantities cannot be negative.")
        return v.quantize(QUANTITY_PLACES)

    @model_validator(mode="after")
    def at_least_one_field(self):
        if self.available_quantity is None and self.minimum_quantity is None:
            raise ValueError(
                "Provide available_quantity and/or minimum_quantity."
            )
        return self
