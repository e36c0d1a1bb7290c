"""Django ORM implementation of the Order repository.

Satisfies ``IOrderRepository`` using Django's QuerySet API.  Domain
events collected on the aggregate are written to the outbox by
``save()`` in the caller's transaction.

Concurrency control on status updates uses ``select_for_update()``.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

import structlog
from django.db import models, transaction
from django.db.models import Count, Q, Sum

from modules.core.outbox import flush_domain_events
from modules.orders.constants import OrderStatus
from modules.orders.models import Order, OrderStatusHistory
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _queryset(self) -> models.QuerySet[Order]:
        return Order.objects.select_related("client", "material", "vehicle")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, data: Dict[str, Any]) -> Order:
        """Insert the order row.

        Not atomic on its own: the service wraps it in a savepoint so a
        tracking-code collision can be retried.
        """
        order = Order(status=OrderStatus.PENDING, **data)
        order.save(force_insert=True)
        logger.info(
            "order.inserted",
            order_id=order.id,
            tracking_code=order.tracking_code,
        )
        return order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: int) -> Optional[Order]:
        """Retrieve an order with its relations and history.

        Returns ``None`` for non-existent or invalid IDs.
        """
        try:
            return (
                self._queryset()
                .prefetch_related("status_history")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def get_for_update(self, id: int) -> Optional[Order]:
        """Retrieve an order with a row-level lock (SELECT FOR UPDATE).

        Only the order row is locked (``of=("self",)``) so the client,
        material and vehicle rows stay free for other transactions.
        """
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("material", "vehicle")
                .filter(id=id)
                .first()
            )
        except (TypeError, ValueError):
            return None

    def get_by_tracking_code(self, code: str) -> Optional[Order]:
        return (
            self._queryset()
            .prefetch_related("status_history")
            .filter(tracking_code=code)
            .first()
        )

    def list(self, filters: Optional[Dict[str, Any]] = None) -> models.QuerySet[Order]:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return queryset.order_by("-created_at", "-id")

    def list_by_client(self, client_id: int) -> List[Order]:
        return list(self.list({"client_id": client_id}))

    def list_pending_assignment(self) -> List[Order]:
        return list(
            self._queryset()
            .filter(status=OrderStatus.CONFIRMED, vehicle__isnull=True)
            .order_by("created_at", "id")
        )

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order) -> Order:
        """Persist an order and flush its domain events to the outbox."""
        entity.save()
        events = flush_domain_events(entity, topic="orders")
        logger.info("order.saved", order_id=entity.id, event_count=len(events))
        return entity

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def add_history(
        self,
        order_id: int,
        status: str,
        old_status: Optional[str] = None,
        user_id: Optional[int] = None,
        notes: str = "",
    ) -> OrderStatusHistory:
        history = OrderStatusHistory.objects.create(
            order_id=order_id,
            old_status=old_status,
            new_status=status,
            user_id=user_id,
            notes=notes,
        )
        logger.info(
            "order.history_added",
            order_id=order_id,
            old_status=old_status,
            new_status=status,
        )
        return history

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    def stats(
        self,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        client_id: Optional[int] = None,
    ) -> Dict[str, Any]:
        queryset = Order.objects.all()
        if start is not None:
            queryset = queryset.filter(created_at__gte=start)
        if end is not None:
            queryset = queryset.filter(created_at__lte=end)
        if client_id is not None:
            queryset = queryset.filter(client_id=client_id)

        per_status = {
            str(value): Count("id", filter=Q(status=value))
            for value in OrderStatus.values
        }
        not_cancelled = ~Q(status=OrderStatus.CANCELLED)
        result = queryset.aggregate(
            total=Count("id"),
            total_quantity=Sum("quantity", filter=not_cancelled),
            total_revenue=Sum("total_price", filter=not_cancelled),
            **per_status,
        )
        return {
            "total": result["total"],
            "by_status": {value: result[value] for value in OrderStatus.values},
            "total_quantity": result["total_quantity"] or Decimal("0.00"),
            "total_revenue": result["total_revenue"] or Decimal("0.00"),
        }
