"""Stock alerts raised by callers after a ledger mutation.

The ledger only moves quantities.  Whoever triggered the movement calls
``emit_stock_alerts`` with the quantity the record had before it, which
logs the alerts and records a ``StockLevelChanged`` outbox event when the
level moved.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, List

import structlog

from modules.core.outbox import record_event
from modules.stock.events import StockLevelChanged
from modules.stock.levels import StockAlert, calculate_stock_level, generate_alerts

if TYPE_CHECKING:
    from modules.stock.models import StockRecord

logger = structlog.get_logger(__name__)


def emit_stock_alerts(record: StockRecord, previous_quantity: Decimal) -> List[StockAlert]:
    alerts = generate_alerts(
        previous_quantity, record.available_quantity, record.minimum_quantity
    )
    if not alerts:
        return alerts

    previous_level = calculate_stock_level(previous_quantity, record.minimum_quantity)
    current_level = record.level
    if previous_level != current_level:
        record_event(
            StockLevelChanged(
                aggregate_id=record.material_id,
                previous_level=str(previous_level),
                current_level=str(current_level),
            ),
            topic="stock",
        )

    for alert in alerts:
        logger.warning(
            "stock.alert",
            material_id=record.material_id,
            alert_type=str(alert.type),
            priority=str(alert.priority),
            message=alert.message,
        )
    return alerts
