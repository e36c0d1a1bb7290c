"""Order repository interface.

Extends ``IRepository[Order]`` with the methods the Order aggregate
needs: creation with its first history row, row locking for status
changes, tracking-code look-up, and reporting aggregates.

The Service Layer depends exclusively on this contract (DIP).
"""

from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from django.db import models

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.orders.models import Order, OrderStatusHistory


class IOrderRepository(IRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The Order aggregate includes its OrderStatusHistory records.
    """

    @abstractmethod
    def create(self, data: Dict[str, Any]) -> Order:
        """Insert a PENDING order from already validated field values."""

    @abstractmethod
    def list(
        self, filters: Optional[Dict[str, Any]] = None
    ) -> "models.QuerySet[Order]":
        """List orders with optional filters, newest first."""

    @abstractmethod
    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock."""

    @abstractmethod
    def get_by_tracking_code(self, code: str) -> Optional[Order]:
        """Retrieve an order by its (normalised) tracking code."""

    @abstractmethod
    def list_by_client(self, client_id: int) -> List[Order]:
        """Orders placed by one client, newest first."""

    @abstractmethod
    def list_pending_assignment(self) -> List[Order]:
        """CONFIRMED orders that have no vehicle yet, oldest first."""

    @abstractmethod
    def add_history(
        self,
        order_id: int,
        status: str,
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        """Record a status change in the order's audit trail."""

    @abstractmethod
    def stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        client_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Counts per status plus volume and revenue for a period."""
