"""Stock repository interface.

The two quantity mutations are expressed as single atomic statements
against the store (compare-and-swap), never as read-then-write.
"""

from __future__ import annotations

from abc import abstractmethod
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.stock.models import StockRecord


class IStockRepository(IRepository["StockRecord"]):
    """Repository contract for stock records."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[StockRecord]":
        """List stock records with their material."""

    @abstractmethod
    def get_by_material(self, material_id: int) -> Optional[StockRecord]:
        """Retrieve the stock record of a material."""

    @abstractmethod
    def decrement_if_available(
        self, material_id: int, quantity: Decimal, actor_id: Optional[int]
    ) -> int:
        """Subtract ``quantity`` only where ``available_quantity >= quantity``.

        Returns the number of rows updated (0 means rejected).
        """

    @abstractmethod
    def increment(
        self, material_id: int, quantity: Decimal, actor_id: Optional[int]
    ) -> int:
        """Add ``quantity`` unconditionally. Returns rows updated."""

    @abstractmethod
    def set_quantities(
        self,
        material_id: int,
        actor_id: Optional[int],
        available_quantity: Optional[Decimal] = None,
        minimum_quantity: Optional[Decimal] = None,
    ) -> int:
        """Overwrite quantities (administrative correction). Returns rows updated."""
