"""Order, OrderStatusHistory, and TrackingSequence models.

Business rules implemented:
- Invalid status transitions rejected (enforced at service layer through
  ``VALID_TRANSITIONS``).
- Each status change, including creation, generates a history record.
- History contains old/new status, timestamp, user, and notes.
- ``tracking_code`` is unique and never changes after creation.
- Client and Material FKs use PROTECT to preserve delivery history.
- ``unit_price`` snapshots the material price at creation time and
  ``total_price`` is computed once from it; neither is recalculated.
- Orders are never deleted.
"""

from __future__ import annotations

from django.conf import settings
from django.db import models

from modules.core.models import BaseModel
from modules.orders.constants import (
    CANCELLABLE_STATES,
    TERMINAL_STATES,
    OrderStatus,
    describe_status,
    is_allowed,
)
from shared.domain.events import DomainEventMixin


class Order(DomainEventMixin, BaseModel):
    """Order aggregate root.

    ``tracking_code`` is the public identifier (``ZAM000001``) clients use
    to follow a delivery; the numeric ``id`` is used for internal
    references and staff API lookups.

    ``vehicle``, ``estimated_delivery_minutes`` and
    ``assignment_justification`` stay empty until the order is assigned.
    """

    tracking_code = models.CharField(max_length=20, unique=True, editable=False)
    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    material = models.ForeignKey(
        "materials.Material",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    quantity = models.DecimalField(max_digits=10, decimal_places=2)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)
    delivery_address = models.TextField()
    delivery_latitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )
    delivery_longitude = models.DecimalField(
        max_digits=9, decimal_places=6, null=True, blank=True
    )
    contact_phone = models.CharField(max_length=20, blank=True, default="")
    requested_delivery_date = models.DateField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    vehicle = models.ForeignKey(
        "vehicles.Vehicle",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="orders",
    )
    estimated_delivery_minutes = models.PositiveIntegerField(null=True, blank=True)
    assignment_justification = models.TextField(blank=True, default="")

    class Meta:
        db_table = "orders"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
            models.Index(fields=["client", "-created_at"], name="orders_client_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="orders_quantity_positive",
            ),
        ]

    # ------------------------------------------------------------------
    # State Machine helpers
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        """Return ``True`` if the order is in a terminal state."""
        return self.status in TERMINAL_STATES

    @property
    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATES

    @property
    def status_description(self) -> str:
        return describe_status(self.status)

    def can_transition_to(self, new_status: str) -> bool:
        """Check whether transitioning to *new_status* is valid."""
        return is_allowed(self.status, new_status)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def __str__(self) -> str:
        return f"{self.tracking_code} ({self.status})"


class OrderStatusHistory(BaseModel):
    """Append-only audit trail for order status transitions.

    Each record captures a single status change with the responsible user
    and optional notes (e.g. cancellation reason).  ``user`` is nullable:
    ``None`` means the change was performed by the system.
    """

    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="status_history",
    )
    old_status = models.CharField(  # noqa: DJ01
        max_length=20,
        choices=OrderStatus.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    notes = models.TextField(blank=True, default="")

    class Meta:
        db_table = "order_status_history"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["order", "created_at"],
                name="osh_order_created_idx",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.order_id} : {self.old_status} -> {self.new_status}"


class TrackingSequence(models.Model):
    """Counter row behind sequential tracking codes, one per prefix.

    Only ``modules.orders.tracking`` touches it, always under
    ``SELECT ... FOR UPDATE`` inside the order-creation transaction.
    """

    prefix = models.CharField(max_length=10, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = "tracking_sequences"

    def __str__(self) -> str:
        return f"{self.prefix}:{self.last_value}"
