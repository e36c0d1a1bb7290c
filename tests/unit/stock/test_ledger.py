"""Tests for ``StockLedger`` against the test database."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from modules.core.exceptions import ValidationError
from modules.core.models import OutboxEvent
from modules.stock.constants import StockLevel
from modules.stock.dtos import StockAdjustmentDTO
from modules.stock.exceptions import InsufficientStock, StockRecordNotFound
from modules.stock.models import StockRecord
from modules.stock.repositories.django_repository import StockDjangoRepository
from modules.stock.services import StockLedger

pytestmark = pytest.mark.unit


@pytest.fixture()
def ledger():
    return StockLedger(repository=StockDjangoRepository())


@pytest.fixture()
def actor():
    return get_user_model().objects.create_user(username="almacen", password="x")


class TestCheckAvailability:
    def test_sufficient_stock(self, ledger, material):
        result = ledger.check_availability(material.id, Decimal("8"))

        assert result.available is True
        assert result.current_quantity == Decimal("10.00")
        assert result.required_quantity == Decimal("8.00")
        assert result.remaining_quantity == Decimal("2.00")
        assert result.recommendation == "Sufficient stock"

    def test_insufficient_stock_explains_shortfall(self, ledger, material):
        result = ledger.check_availability(material.id, Decimal("12"))

        assert result.available is False
        assert result.remaining_quantity is None
        assert "Available: 10.00" in result.recommendation
        assert "required: 12.00" in result.recommendation

    def test_material_without_record_is_unavailable(self, ledger, make_material):
        material = make_material(with_stock=False)

        result = ledger.check_availability(material.id, Decimal("1"))

        assert result.available is False
        assert result.current_quantity == Decimal("0.00")

    @pytest.mark.parametrize("quantity", ["0", "-3"])
    def test_non_positive_quantity_rejected(self, ledger, material, quantity):
        with pytest.raises(ValidationError):
            ledger.check_availability(material.id, Decimal(quantity))

    def test_does_not_write(self, ledger, material):
        ledger.check_availability(material.id, Decimal("8"))
        assert not OutboxEvent.objects.exists()


class TestReserve:
    def test_reserve_decrements_and_stamps_actor(self, ledger, material, actor):
        record = ledger.reserve(material.id, Decimal("8"), actor.id, order_id=7)

        assert record.available_quantity == Decimal("2.00")
        assert record.updated_by_id == actor.id
        assert record.level == StockLevel.CRITICAL

        event = OutboxEvent.objects.get(event_type="StockReserved")
        assert event.topic == "stock"
        assert event.payload["remaining"] == "2.00"
        assert event.payload["order_id"] == 7

    def test_reserve_everything_leaves_zero(self, ledger, material, actor):
        record = ledger.reserve(material.id, Decimal("10"), actor.id)
        assert record.available_quantity == Decimal("0.00")

    def test_reserve_more_than_available_rejected(self, ledger, material, actor):
        with pytest.raises(InsufficientStock) as exc_info:
            ledger.reserve(material.id, Decimal("10.01"), actor.id)

        assert "requested 10.01, available 10.00" in exc_info.value.message
        assert exc_info.value.status_code == 422
        assert StockRecord.objects.get(material=material).available_quantity == Decimal("10.00")

    def test_reserve_unknown_material(self, ledger, actor):
        with pytest.raises(StockRecordNotFound):
            ledger.reserve(999_999, Decimal("1"), actor.id)

    def test_reserve_rejects_non_positive(self, ledger, material, actor):
        with pytest.raises(ValidationError):
            ledger.reserve(material.id, Decimal("0"), actor.id)


class TestIncrease:
    def test_increase_adds_quantity(self, ledger, material, actor):
        record = ledger.increase(material.id, Decimal("5.5"), actor.id)

        assert record.available_quantity == Decimal("15.50")
        assert OutboxEvent.objects.filter(event_type="StockIncreased").count() == 1

    def test_increase_by_zero_is_allowed(self, ledger, material, actor):
        record = ledger.increase(material.id, Decimal("0"), actor.id)
        assert record.available_quantity == Decimal("10.00")

    def test_negative_increase_rejected(self, ledger, material, actor):
        with pytest.raises(ValidationError):
            ledger.increase(material.id, Decimal("-1"), actor.id)

    def test_increase_unknown_material(self, ledger, actor):
        with pytest.raises(StockRecordNotFound):
            ledger.increase(999_999, Decimal("1"), actor.id)


class TestAdjust:
    def test_adjust_minimum_only(self, ledger, material, actor):
        record = ledger.adjust(
            material.id, StockAdjustmentDTO(minimum_quantity=Decimal("12")), actor.id
        )

        assert record.minimum_quantity == Decimal("12.00")
        assert record.available_quantity == Decimal("10.00")
        assert record.level == StockLevel.CRITICAL


class TestInventory:
    def test_summary_counts_levels_and_value(self, ledger, make_material):
        make_material(available="2", minimum="5", price="100.00", name="Ripio")
        make_material(available="7", minimum="5", price="10.00", name="Grava")
        make_material(available="50", minimum="5", price="1.00", name="Arena")

        summary = ledger.get_inventory_summary()

        assert summary["total_materials"] == 3
        assert summary["critical"] == 1
        assert summary["low"] == 1
        assert summary["normal"] == 1
        assert summary["total_inventory_value"] == Decimal("320.00")
        assert summary["critical_materials"] == ["Ripio"]

    def test_critical_stock_lists_only_critical(self, ledger, make_material):
        make_material(available="2", minimum="5", name="Ripio")
        make_material(available="50", minimum="5", name="Arena")

        items = ledger.get_critical_stock()

        assert [i.record.material.name for i in items] == ["Ripio"]
        assert items[0].has_alert is True
