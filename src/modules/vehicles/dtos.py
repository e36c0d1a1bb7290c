"""Vehicle DTOs for the Service Layer (Pydantic v2, immutable)."""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from modules.vehicles.constants import PLATE_PATTERN, VehicleStatus, normalize_plate


class UpdateVehicleStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: str

    @field_validator("status")
    @classmethod
    def status_must_be_known(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in VehicleStatus.values:
            allowed = ", ".join(VehicleStatus.values)
            raise ValueError(f"Unknown vehicle status '{v}'. Valid values: {allowed}")
        return v


class UpdateLocationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    latitude: Decimal
    longitude: Decimal

    @field_validator("latitude")
    @classmethod
    def latitude_in_range(cls, v: Decimal) -> Decimal:
        if not Decimal("-90") <= v <= Decimal("90"):
            raise ValueError("Latitude must be between -90 and 90.")
        return v.quantize(Decimal("0.000001"))

    @field_validator("longitude")
    @classmethod
    def longitude_in_range(cls, v: Decimal) -> Decimal:
        if not Decimal("-180") <= v <= Decimal("180"):
            raise ValueError("Longitude must be between -180 and 180.")
        return v.quantize(Decimal("0.000001"))


class RegisterVehicleDTO(BaseModel):
    """Input for adding a vehicle to the fleet.

    ``max_capacity`` is injected from settings by the caller.
    """

    model_config = ConfigDict(frozen=True)

    plate: str
    capacity_m3: Decimal
    brand: str = ""
    model: str = ""
    max_capacity: Decimal = Decimal("50")

    @field_validator("plate")
    @classmethod
    def plate_must_match_format(cls, v: str) -> str:
        normalized = normalize_plate(v)
        if not PLATE_PATTERN.match(normalized):
            raise ValueError("Plate must be three letters followed by three digits (e.g. ABC123).")
        return normalized

    @model_validator(mode="after")
    def capacity_within_bounds(self):
        if self.capacity_m3 <= 0:
            raise ValueError("Capacity must be greater than zero.")
        if self.capacity_m3 > self.max_capacity:
            raise ValueError(f"Capacity cannot exceed {self.max_capacity} m³.")
        return self
