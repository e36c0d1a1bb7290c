"""Unit tests for the pure stock-level helpers."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.stock.constants import AlertPriority, AlertType, StockLevel
from modules.stock.levels import (
    calculate_stock_level,
    calculate_stock_percentage,
    estimate_days_remaining,
    generate_alerts,
    recommended_action,
)

pytestmark = pytest.mark.unit


class TestCalculateStockLevel:
    @pytest.mark.parametrize(
        ("available", "minimum", "expected"),
        [
            ("0", "5", StockLevel.CRITICAL),
            ("5", "5", StockLevel.CRITICAL),
            ("5.01", "5", StockLevel.LOW),
            ("7.5", "5", StockLevel.LOW),
            ("7.51", "5", StockLevel.NORMAL),
            ("0", "0", StockLevel.CRITICAL),
            ("1", "0", StockLevel.NORMAL),
        ],
    )
    def test_thresholds(self, available, minimum, expected):
        assert calculate_stock_level(Decimal(available), Decimal(minimum)) == expected


class TestCalculateStockPercentage:
    def test_rounds_half_up(self):
        assert calculate_stock_percentage(Decimal("2.5"), Decimal("4")) == 63

    def test_zero_minimum_is_full(self):
        assert calculate_stock_percentage(Decimal("3"), Decimal("0")) == 100

    def test_above_minimum(self):
        assert calculate_stock_percentage(Decimal("10"), Decimal("5")) == 200


class TestHelpers:
    def test_recommended_action_for_critical(self):
        assert recommended_action(StockLevel.CRITICAL).startswith("URGENT")

    def test_days_remaining_none_without_minimum(self):
        assert estimate_days_remaining(Decimal("10"), Decimal("0")) is None

    def test_days_remaining_floors(self):
        # minimum 7 -> 1 m³/day
        assert estimate_days_remaining(Decimal("10.9"), Decimal("7")) == 10


class TestGenerateAlerts:
    def test_no_alerts_when_level_and_volume_stable(self):
        assert generate_alerts(Decimal("20"), Decimal("19"), Decimal("5")) == []

    def test_drop_to_critical_raises_high_priority_alerts(self):
        alerts = generate_alerts(Decimal("10"), Decimal("2"), Decimal("5"))
        types = [a.type for a in alerts]

        assert types == [
            AlertType.LEVEL_CHANGE,
            AlertType.CRITICAL_STOCK,
            AlertType.SIGNIFICANT_REDUCTION,
        ]
        assert alerts[0].priority == AlertPriority.HIGH
        assert alerts[0].message == "Stock level changed from NORMAL to CRITICO"
        assert alerts[2].message == "Stock reduced by 80%"

    def test_drop_to_low_is_medium_priority(self):
        alerts = generate_alerts(Decimal("10"), Decimal("7"), Decimal("5"))

        assert len(alerts) == 1
        assert alerts[0].type == AlertType.LEVEL_CHANGE
        assert alerts[0].priority == AlertPriority.MEDIUM

    def test_exactly_half_is_not_significant(self):
        alerts = generate_alerts(Decimal("40"), Decimal("20"), Decimal("5"))
        assert alerts == []

    def test_restock_out_of_critical(self):
        alerts = generate_alerts(Decimal("2"), Decimal("30"), Decimal("5"))

        assert [a.type for a in alerts] == [AlertType.LEVEL_CHANGE]
        assert alerts[0].to_dict() == {
            "type": "cambio_nivel",
            "message": "Stock level changed from CRITICO to NORMAL",
            "priority": "media",
        }
