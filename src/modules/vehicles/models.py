"""Vehicle model.

Business rules implemented:
- Plate is unique and stored normalised (uppercase, no spaces or dashes).
- Capacity is positive (DB check constraint; the upper bound is a setting
  enforced by the DTOs).
- ``status`` is written only through ``VehicleDjangoRepository``'s
  conditional updates, so a vehicle serves at most one active order.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.vehicles.constants import (
    STALE_LOCATION_AFTER,
    VehicleStatus,
    normalize_plate,
)


class Vehicle(BaseModel):
    """Fleet unit with volumetric capacity and last known position."""

    plate = models.CharField(max_length=10, unique=True)
    brand = models.CharField(max_length=60, blank=True, default="")
    model = models.CharField(max_length=60, blank=True, default="")
    capacity_m3 = models.DecimalField(max_digits=6, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=VehicleStatus.choices,
        default=VehicleStatus.AVAILABLE,
    )
    last_latitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )
    last_longitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )
    last_location_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "vehicles"
        ordering = ["capacity_m3", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(capacity_m3__gt=0),
                name="vehicles_capacity_positive",
            ),
        ]
        indexes = [
            models.Index(
                fields=["status", "capacity_m3"],
                name="vehicles_status_capacity_idx",
            ),
        ]

    @property
    def has_location(self) -> bool:
        return self.last_latitude is not None and self.last_longitude is not None

    def minutes_since_last_fix(self, now: Optional[datetime] = None) -> Optional[int]:
        if self.last_location_at is None:
            return None
        now = now or timezone.now()
        return int((now - self.last_location_at).total_seconds() // 60)

    def location_is_stale(self, now: Optional[datetime] = None) -> bool:
        if self.last_location_at is None:
            return True
        now = now or timezone.now()
        return now - self.last_location_at > STALE_LOCATION_AFTER

    def save(self, *args, **kwargs) -> None:
        self.plate = normalize_plate(self.plate)
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.plate} ({self.capacity_m3} m³, {self.status})"
