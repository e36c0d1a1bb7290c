"""Material catalog model.

Business rules implemented:
- Material name is unique.
- Price per unit must be greater than zero (DB check constraint).
- Inactive materials cannot be ordered (enforced at service layer).
- Orders snapshot ``price_per_unit`` at creation time; changing the
  price later never touches existing orders.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel


class Material(BaseModel):
    """Aggregate sold by volume (sand, gravel, stone...)."""

    name = models.CharField(max_length=120, unique=True)
    description = models.TextField(blank=True, default="")
    unit = models.CharField(max_length=10, default="m³")
    price_per_unit = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    is_active = models.BooleanField(default=True)

    class Meta:
        db_table = "materials"
        ordering = ["name", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price_per_unit__gt=0),
                name="materials_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.price_per_unit}/{self.unit})"
