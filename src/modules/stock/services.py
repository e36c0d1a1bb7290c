"""Stock Ledger service (Use Cases).

Owns material quantities.  ``reserve`` and ``increase`` are the only code
paths that move ``available_quantity``; both delegate to a single
conditional/unconditional UPDATE in the repository.

Business rules enforced:
- ``available_quantity`` never goes negative: ``reserve`` is one
  compare-and-swap statement, not check-then-write.
- ``check_availability`` is advisory; ``reserve`` re-validates at write time.
- Every mutation stamps ``updated_by`` and ``last_updated``.
- Insufficient-stock errors state requested vs available quantity.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.db import transaction

from modules.core.exceptions import ValidationError
from modules.core.outbox import record_event
from modules.stock.constants import QUANTITY_PLACES, StockLevel
from modules.stock.dtos import AvailabilityResult
from modules.stock.events import StockIncreased, StockReserved
from modules.stock.exceptions import InsufficientStock, StockRecordNotFound
from modules.stock.levels import estimate_days_remaining, recommended_action

if TYPE_CHECKING:
    from modules.stock.dtos import StockAdjustmentDTO
    from modules.stock.models import StockRecord
    from modules.stock.repositories.interfaces import IStockRepository

logger = structlog.get_logger(__name__)


def to_quantity(value: Any) -> Decimal:
    try:
        return Decimal(str(value)).quantize(QUANTITY_PLACES)
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid quantity: {value!r}.") from None


@dataclass(frozen=True)
class InventoryItem:
    """A stock record enriched with its derived level information."""

    record: StockRecord
    level: str
    stock_percentage: int
    has_alert: bool
    recommended_action: str
    days_remaining: Optional[int]


class StockLedger:
    """Application service for stock quantities.

    Receives an ``IStockRepository`` via constructor injection (DIP).
    """

    def __init__(self, repository: IStockRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_record(self, material_id: int) -> StockRecord:
        """Raises ``StockRecordNotFound`` when the material has no record."""
        record = self._repo.get_by_material(material_id)
        if record is None:
            raise StockRecordNotFound(
                f"No stock record for material {material_id}."
            )
        return record

    def check_availability(
        self, material_id: int, required_quantity: Any
    ) -> AvailabilityResult:
        """Compare ``required_quantity`` with the current stock.

        Read-only and advisory.  A material without a stock record is
        reported as unavailable with a current quantity of 0.
        """
        required = to_quantity(required_quantity)
        if required <= 0:
            raise ValidationError("Required quantity must be greater than zero.")

        record = self._repo.get_by_material(material_id)
        current = record.available_quantity if record else Decimal("0.00")
        available = required <= current

        if available:
            recommendation = "Sufficient stock"
        else:
            recommendation = (
                f"Insufficient stock. Available: {current}, required: {required}"
            )

        return AvailabilityResult(
            material_id=material_id,
            available=available,
            current_quantity=current,
            required_quantity=required,
            remaining_quantity=(current - required) if available else None,
            recommendation=recommendation,
        )

    def get_inventory(self) -> List[InventoryItem]:
        return [self._inventory_item(record) for record in self._repo.list()]

    def get_critical_stock(self) -> List[InventoryItem]:
        return [
            item for item in self.get_inventory() if item.level == StockLevel.CRITICAL
        ]

    def get_inventory_summary(self) -> Dict[str, Any]:
        inventory = self.get_inventory()
        total_value = sum(
            (
                item.record.available_quantity * item.record.material.price_per_unit
                for item in inventory
            ),
            Decimal("0.00"),
        )
        return {
            "total_materials": len(inventory),
            "critical": sum(1 for i in inventory if i.level == StockLevel.CRITICAL),
            "low": sum(1 for i in inventory if i.level == StockLevel.LOW),
            "normal": sum(1 for i in inventory if i.level == StockLevel.NORMAL),
            "total_inventory_value": total_value.quantize(QUANTITY_PLACES),
            "critical_materials": [
                i.record.material.name
                for i in inventory
                if i.level == StockLevel.CRITICAL
            ],
        }

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def reserve(
        self,
        material_id: int,
        quantity: Any,
        actor_id: Optional[int],
        order_id: Optional[int] = None,
    ) -> StockRecord:
        """Atomically subtract ``quantity`` if enough stock is left.

        Raises:
            ValidationError: quantity is not positive.
            StockRecordNotFound: the material has no stock record.
            InsufficientStock: the conditional update matched no row.
        """
        qty = to_quantity(quantity)
        if qty <= 0:
            raise ValidationError("Quantity to reserve must be greater than zero.")

        log = logger.bind(material_id=material_id, quantity=str(qty), order_id=order_id)

        rows = self._repo.decrement_if_available(material_id, qty, actor_id)
        if rows == 0:
            current = self.get_record(material_id).available_quantity
            log.warning("stock.reservation_rejected", available=str(current))
            raise InsufficientStock(
                "Insufficient stock / race condition: "
                f"requested {qty}, available {current}.",
                details={
                    "material_id": material_id,
                    "requested": str(qty),
                    "available": str(current),
                },
            )

        record = self.get_record(material_id)
        record_event(
            StockReserved(
                aggregate_id=material_id,
                quantity=str(qty),
                remaining=str(record.available_quantity),
                order_id=order_id,
            ),
            topic="stock",
        )
        log.info("stock.reserved", remaining=str(record.available_quantity))
        return record

    @transaction.atomic
    def increase(
        self, material_id: int, quantity: Any, actor_id: Optional[int]
    ) -> StockRecord:
        """Unconditionally add ``quantity`` (restock or returned reservation).

        Raises:
            ValidationError: quantity is negative.
            StockRecordNotFound: the material has no stock record.
        """
        qty = to_quantity(quantity)
        if qty < 0:
            raise ValidationError("Quantity to add cannot be negative.")

        rows = self._repo.increment(material_id, qty, actor_id)
        if rows == 0:
            raise StockRecordNotFound(
                f"No stock record for material {material_id}."
            )

        record = self.get_record(material_id)
        record_event(
            StockIncreased(
                aggregate_id=material_id,
                quantity=str(qty),
                available=str(record.available_quantity),
            ),
            topic="stock",
        )
        logger.info(
            "stock.increased",
            material_id=material_id,
            quantity=str(qty),
            available=str(record.available_quantity),
        )
        return record

    @transaction.atomic
    def adjust(
        self, material_id: int, dto: StockAdjustmentDTO, actor_id: Optional[int]
    ) -> StockRecord:
        """Administrative overwrite of available and/or minimum quantity."""
        rows = self._repo.set_quantities(
            material_id,
            actor_id,
            available_quantity=dto.available_quantity,
            minimum_quantity=dto.minimum_quantity,
        )
        if rows == 0:
            raise StockRecordNotFound(
                f"No stock record for material {material_id}."
            )
        record = self.get_record(material_id)
        logger.info(
            "stock.adjusted",
            material_id=material_id,
            available=str(record.available_quantity),
            minimum=str(record.minimum_quantity),
        )
        return record

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _inventory_item(record: StockRecord) -> InventoryItem:
        level = record.level
        return InventoryItem(
            record=record,
            level=level,
            stock_percentage=record.stock_percentage,
            has_alert=level != StockLevel.NORMAL,
            recommended_action=recommended_action(level),
            days_remaining=estimate_days_remaining(
                record.available_quantity, record.minimum_quantity
            ),
        )
