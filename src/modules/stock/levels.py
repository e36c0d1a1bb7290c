"""Pure stock-level helpers.

No ORM access here: callers pass quantities in, so the same rules serve
the model properties, the inventory views and the alerts derived after
a reservation or restock.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Optional

from modules.stock.constants import (
    LOW_STOCK_FACTOR,
    MINIMUM_COVERAGE_DAYS,
    RECOMMENDED_ACTIONS,
    SIGNIFICANT_REDUCTION_PERCENT,
    AlertPriority,
    AlertType,
    StockLevel,
)


@dataclass(frozen=True)
class StockAlert:
    type: str
    message: str
    priority: str

    def to_dict(self) -> Dict[str, Any]:
        return {key: str(value) for key, value in asdict(self).items()}


def calculate_stock_level(available: Decimal, minimum: Decimal) -> str:
    available = Decimal(available)
    minimum = Decimal(minimum)
    if available <= minimum:
        return StockLevel.CRITICAL
    if available <= minimum * LOW_STOCK_FACTOR:
        return StockLevel.LOW
    return StockLevel.NORMAL


def calculate_stock_percentage(available: Decimal, minimum: Decimal) -> int:
    """Available stock as a percentage of the minimum (100 when minimum is 0)."""
    minimum = Decimal(minimum)
    if minimum == 0:
        return 100
    ratio = Decimal(available) / minimum * 100
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def recommended_action(level: str) -> str:
    return RECOMMENDED_ACTIONS.get(level, "Review stock")


def estimate_days_remaining(available: Decimal, minimum: Decimal) -> Optional[int]:
    """Rough coverage estimate assuming the minimum lasts a week."""
    daily_consumption = Decimal(minimum) / MINIMUM_COVERAGE_DAYS
    if daily_consumption == 0:
        return None
    days = Decimal(available) / daily_consumption
    return int(days.to_integral_value(rounding=ROUND_FLOOR))


def generate_alerts(
    previous_quantity: Decimal, available: Decimal, minimum: Decimal
) -> List[StockAlert]:
    """Alerts produced by moving a record from ``previous_quantity`` to ``available``."""
    previous_quantity = Decimal(previous_quantity)
    available = Decimal(available)
    alerts: List[StockAlert] = []

    previous_level = calculate_stock_level(previous_quantity, minimum)
    current_level = calculate_stock_level(available, minimum)

    if previous_level != current_level:
        alerts.append(
            StockAlert(
                type=AlertType.LEVEL_CHANGE,
                message=f"Stock level changed from {previous_level} to {current_level}",
                priority=(
                    AlertPriority.HIGH
                    if current_level == StockLevel.CRITICAL
                    else AlertPriority.MEDIUM
                ),
            )
        )

    if current_level == StockLevel.CRITICAL:
        alerts.append(
            StockAlert(
                type=AlertType.CRITICAL_STOCK,
                message="Stock at critical level - needs immediate attention",
                priority=AlertPriority.HIGH,
            )
        )

    if previous_quantity > 0:
        reduction = (previous_quantity - available) / previous_quantity * 100
        if reduction > SIGNIFICANT_REDUCTION_PERCENT:
            rounded = reduction.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
            alerts.append(
                StockAlert(
                    type=AlertType.SIGNIFICANT_REDUCTION,
                    message=f"Stock reduced by {rounded}%",
                    priority=AlertPriority.MEDIUM,
                )
            )

    return alerts
