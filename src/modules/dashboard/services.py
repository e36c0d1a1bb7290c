"""Role dashboards.

Read-only composition of the order, fleet and stock services; nothing
here writes.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

import structlog
from django.utils import timezone

from modules.orders.constants import OrderStatus, describe_status
from modules.orders.tracking import short_code

if TYPE_CHECKING:
    from modules.orders.services import OrderService
    from modules.stock.services import StockLedger
    from modules.vehicles.services import VehicleService

logger = structlog.get_logger(__name__)

RECENT_ORDERS_LIMIT = 5
PENDING_ASSIGNMENT_LIMIT = 10

ACTIVE_STATUSES = (
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.ASSIGNED,
    OrderStatus.IN_TRANSIT,
)


class DashboardService:
    def __init__(
        self,
        order_service: OrderService,
        vehicle_service: VehicleService,
        stock_ledger: StockLedger,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._orders = order_service
        self._vehicles = vehicle_service
        self._ledger = stock_ledger
        self._clock = clock or timezone.now

    def staff_dashboard(self) -> Dict[str, Any]:
        """Operations view: today's and this month's orders, work queue,
        fleet and inventory."""
        now = timezone.localtime(self._clock())
        start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)
        start_of_month = start_of_day.replace(day=1)

        pending = self._orders.list_pending_assignment()
        data = {
            "orders_today": self._orders.get_stats_by_period(start=start_of_day, end=now),
            "orders_this_month": self._orders.get_stats_by_period(
                start=start_of_month, end=now
            ),
            "pending_assignment": {
                "count": len(pending),
                "orders": [
                    {
                        "id": order.id,
                        "tracking_code": order.tracking_code,
                        "client": order.client.name,
                        "material": order.material.name,
                        "quantity": order.quantity,
                        "delivery_address": order.delivery_address,
                        "created_at": order.created_at,
                    }
                    for order in pending[:PENDING_ASSIGNMENT_LIMIT]
                ],
            },
            "fleet": self._vehicles.get_fleet_stats(),
            "inventory": self._ledger.get_inventory_summary(),
        }
        logger.info("dashboard.staff_generated", pending_assignment=len(pending))
        return data

    def client_dashboard(self, client_id: int) -> Dict[str, Any]:
        """A client's own order counts and most recent orders."""
        stats = self._orders.get_stats_by_period(client_id=client_id)
        by_status = stats["by_status"]
        billable = stats["total"] - by_status[OrderStatus.CANCELLED]
        average = (
            (stats["total_revenue"] / billable).quantize(Decimal("0.01"))
            if billable
            else Decimal("0.00")
        )

        recent = self._orders.list_client_orders(client_id)[:RECENT_ORDERS_LIMIT]
        data = {
            "summary": {
                "total_orders": stats["total"],
                "delivered_orders": by_status[OrderStatus.DELIVERED],
                "active_orders": sum(by_status[s] for s in ACTIVE_STATUSES),
                "cancelled_orders": by_status[OrderStatus.CANCELLED],
                "total_value": stats["total_revenue"],
                "average_value": average,
            },
            "recent_orders": [
                {
                    "tracking_code": order.tracking_code,
                    "short_code": short_code(order.tracking_code),
                    "status": order.status,
                    "status_description": describe_status(order.status),
                    "material": order.material.name,
                    "quantity": f"{order.quantity} m³",
                    "total_price": order.total_price,
                    "created_at": order.created_at,
                    "requested_delivery_date": order.requested_delivery_date,
                }
                for order in recent
            ],
        }
        logger.info("dashboard.client_generated", client_id=client_id)
        return data
