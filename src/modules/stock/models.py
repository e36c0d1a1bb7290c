"""Stock record model (one per material).

Business rules implemented:
- ``available_quantity`` is never negative (DB check constraint plus the
  conditional update in ``StockDjangoRepository.reserve``).
- Every mutation stamps ``updated_by`` and ``last_updated``.
- ``available_quantity`` is written only by ``StockLedger``.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.stock.levels import calculate_stock_level, calculate_stock_percentage


class StockRecord(BaseModel):
    """Available quantity and alert threshold of a material."""

    material = models.OneToOneField(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="stock",
    )
    available_quantity = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    minimum_quantity = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    last_updated = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = "stock"
        ordering = ["material__name", "id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(available_quantity__gte=0),
                name="stock_available_non_negative",
            ),
            models.CheckConstraint(
                condition=models.Q(minimum_quantity__gte=0),
                name="stock_minimum_non_negative",
            ),
        ]

    @property
    def level(self) -> str:
        return calculate_stock_level(self.available_quantity, self.minimum_quantity)

    @property
    def stock_percentage(self) -> int:
        return calculate_stock_percentage(
            self.available_quantity, self.minimum_quantity
        )

    def __str__(self) -> str:
        return f"{self.material_id}: {self.available_quantity} ({self.level})"
