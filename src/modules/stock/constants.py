"""Stock domain constants.

Level thresholds:
- CRITICAL: ``available <= minimum``
- LOW: ``minimum < available <= minimum * 1.5``
- NORMAL: otherwise
"""

from decimal import Decimal

from django.db import models


class StockLevel(models.TextChoices):
    CRITICAL = "CRITICO", "Crítico"
    LOW = "BAJO", "Bajo"
    NORMAL = "NORMAL", "Normal"


class AlertType(models.TextChoices):
    LEVEL_CHANGE = "cambio_nivel", "Level change"
    CRITICAL_STOCK = "stock_critico", "Critical stock"
    SIGNIFICANT_REDUCTION = "reduccion_significativa", "Significant reduction"


class AlertPriority(models.TextChoices):
    HIGH = "alta", "High"
    MEDIUM = "media", "Medium"


LOW_STOCK_FACTOR = Decimal("1.5")

SIGNIFICANT_REDUCTION_PERCENT = Decimal("50")

# Days of stock a minimum threshold is assumed to cover
MINIMUM_COVERAGE_DAYS = 7

RECOMMENDED_ACTIONS: dict[str, str] = {
    StockLevel.CRITICAL: "URGENT: restock immediately",
    StockLevel.LOW: "ATTENTION: schedule a restock",
    StockLevel.NORMAL: "Stock at normal level",
}

QUANTITY_PLACES = Decimal("0.01")
