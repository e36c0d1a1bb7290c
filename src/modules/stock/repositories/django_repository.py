"""Django ORM implementation of the Stock repository.

``decrement_if_available`` compiles to::

    UPDATE stock
       SET available_quantity = available_quantity - %s, updated_by_id = %s,
           last_updated = %s, updated_at = %s
     WHERE material_id = %s AND available_quantity >= %s

The ``WHERE`` clause is evaluated by the database at write time, so two
concurrent reservations against thin stock cannot both match.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Optional

import structlog
from django.db import models, transaction
from django.db.models import F
from django.utils import timezone

from modules.stock.models import StockRecord
from modules.stock.repositories.interfaces import IStockRepository

logger = structlog.get_logger(__name__)


class StockDjangoRepository(IStockRepository):
    """Concrete Stock repository backed by Django ORM."""

    def get_by_id(self, id: int) -> Optional[StockRecord]:
        try:
            return StockRecord.objects.select_related("material").filter(id=id).first()
        except (TypeError, ValueError):
            return None

    def get_by_material(self, material_id: int) -> Optional[StockRecord]:
        try:
            return (
                StockRecord.objects.select_related("material")
                .filter(material_id=material_id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> models.QuerySet[StockRecord]:
        queryset = StockRecord.objects.select_related("material")
        if filters:
            queryset = queryset.filter(**filters)
        return queryset

    @transaction.atomic
    def save(self, entity: StockRecord) -> StockRecord:
        entity.save()
        logger.info("stock.record_saved", material_id=entity.material_id)
        return entity

    # ------------------------------------------------------------------
    # Atomic quantity mutations
    # ------------------------------------------------------------------

    def decrement_if_available(
        self, material_id: int, quantity: Decimal, actor_id: Optional[int]
    ) -> int:
        now = timezone.now()
        rows = StockRecord.objects.filter(
            material_id=material_id,
            available_quantity__gte=quantity,
        ).update(
            available_quantity=F("available_quantity") - quantity,
            updated_by_id=actor_id,
            last_updated=now,
            updated_at=now,
        )
        logger.debug(
            "stock.decrement_attempted",
            material_id=material_id,
            quantity=str(quantity),
            rows=rows,
        )
        return rows

    def increment(
        self, material_id: int, quantity: Decimal, actor_id: Optional[int]
    ) -> int:
        now = timezone.now()
        return StockRecord.objects.filter(material_id=material_id).update(
            available_quantity=F("available_quantity") + quantity,
            updated_by_id=actor_id,
            last_updated=now,
            updated_at=now,
        )

    def set_quantities(
        self,
        material_id: int,
        actor_id: Optional[int],
        available_quantity: Optional[Decimal] = None,
        minimum_quantity: Optional[Decimal] = None,
    ) -> int:
        now = timezone.now()
        changes: Dict[str, Any] = {
            "updated_by_id": actor_id,
            "last_updated": now,
            "updated_at": now,
        }
        if available_quantity is not None:
            changes["available_quantity"] = available_quantity
        if minimum_quantity is not None:
            changes["minimum_quantity"] = minimum_quantity
        return StockRecord.objects.filter(material_id=material_id).update(**changes)
