from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest
from freezegun import freeze_time
from pydantic import ValidationError

from modules.orders.dtos import CreateOrderDTO

pytestmark = pytest.mark.unit

ADDRESS = "Calle Jordán 245, Cercado"


def _dto(**overrides):
    data = {"material_id": 1, "quantity": Decimal("8"), "delivery_address": ADDRESS}
    data.update(overrides)
    return CreateOrderDTO(**data)


class TestCreateOrderDTO:
    def test_minimal(self):
        dto = _dto()

        assert dto.quantity == Decimal("8.00")
        assert dto.contact_phone is None
        assert dto.delivery_latitude is None

    def test_frozen(self):
        dto = _dto()
        with pytest.raises(ValidationError):
            dto.quantity = Decimal("1")

    @pytest.mark.parametrize("quantity", ["0", "-1", "0.001"])
    def test_quantity_must_be_positive(self, quantity):
        with pytest.raises(ValidationError, match="greater than zero"):
            _dto(quantity=Decimal(quantity))

    def test_quantity_upper_bound(self):
        with pytest.raises(ValidationError, match="cannot exceed 1000"):
            _dto(quantity=Decimal("1000.01"))

    def test_quantity_upper_bound_is_injectable(self):
        with pytest.raises(ValidationError, match="cannot exceed 50"):
            _dto(quantity=Decimal("60"), max_quantity=Decimal("50"))

    def test_address_is_trimmed(self):
        assert _dto(delivery_address=f"   {ADDRESS}  ").delivery_address == ADDRESS

    @pytest.mark.parametrize("address", ["short", "         x         ", "a" * 501])
    def test_address_length(self, address):
        with pytest.raises(ValidationError, match="Delivery address"):
            _dto(delivery_address=address)

    @pytest.mark.parametrize("phone", ["71234567", "6123 4567", "(712) 34-567"])
    def test_phone_accepted_and_cleaned(self, phone):
        assert _dto(contact_phone=phone).contact_phone.isdigit()

    @pytest.mark.parametrize("phone", ["51234567", "7123456", "712345678", "+59171234567"])
    def test_phone_rejected(self, phone):
        with pytest.raises(ValidationError, match="Bolivian number"):
            _dto(contact_phone=phone)

    def test_blank_phone_is_none(self):
        assert _dto(contact_phone="").contact_phone is None

    def test_coordinates_must_come_together(self):
        with pytest.raises(ValidationError, match="together"):
            _dto(delivery_latitude=Decimal("-17.39"))

    def test_coordinates_range(self):
        with pytest.raises(ValidationError, match="Latitude"):
            _dto(delivery_latitude=Decimal("95"), delivery_longitude=Decimal("0"))

    def test_coordinates_quantized(self):
        dto = _dto(
            delivery_latitude=Decimal("-17.3935123"),
            delivery_longitude=Decimal("-66.157"),
        )
        assert dto.delivery_latitude == Decimal("-17.393512")
        assert dto.delivery_longitude == Decimal("-66.157000")


@freeze_time("2025-03-12 14:00:00")
class TestRequestedDeliveryDate:
    def test_today_is_accepted(self):
        assert _dto(requested_delivery_date=date(2025, 3, 12)).requested_delivery_date

    def test_past_date_rejected(self):
        with pytest.raises(ValidationError, match="past"):
            _dto(requested_delivery_date=date(2025, 3, 11))

    def test_window_end_is_inclusive(self):
        assert _dto(requested_delivery_date=date(2025, 4, 11))

    def test_beyond_window_rejected(self):
        with pytest.raises(ValidationError, match="30 days ahead"):
            _dto(requested_delivery_date=date(2025, 4, 12))
