"""Tests for ``VehicleService`` against the test database."""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from decimal import Decimal

import pytest

from modules.core.models import OutboxEvent
from modules.orders.constants import OrderStatus
from modules.vehicles.constants import VehicleStatus
from modules.vehicles.dtos import RegisterVehicleDTO, UpdateLocationDTO, UpdateVehicleStatusDTO
from modules.vehicles.exceptions import (
    DuplicatePlate,
    InvalidVehicleStatus,
    VehicleHeldByOrder,
    VehicleNotFound,
    VehicleUnavailable,
)
from modules.vehicles.repositories.django_repository import VehicleDjangoRepository
from modules.vehicles.services import VehicleService

pytestmark = pytest.mark.unit

FIXED_NOW = datetime(2025, 3, 12, 14, 0, tzinfo=dt_timezone.utc)


@pytest.fixture()
def service():
    return VehicleService(repository=VehicleDjangoRepository(), clock=lambda: FIXED_NOW)


class TestQueries:
    def test_list_available_filters_status_and_capacity(self, service, make_vehicle):
        make_vehicle(capacity="8")
        ten = make_vehicle(capacity="10")
        fifteen = make_vehicle(capacity="15")
        make_vehicle(capacity="25", status=VehicleStatus.MAINTENANCE)

        available = service.list_available(Decimal("9"))

        assert [v.id for v in available] == [ten.id, fifteen.id]

    def test_get_missing_vehicle(self, service):
        with pytest.raises(VehicleNotFound):
            service.get_vehicle(999_999)

    def test_fleet_stats(self, service, make_vehicle):
        make_vehicle(capacity="10")
        make_vehicle(capacity="15", status=VehicleStatus.IN_USE)
        make_vehicle(capacity="20", status=VehicleStatus.MAINTENANCE)
        make_vehicle(capacity="5", status=VehicleStatus.BROKEN)

        stats = service.get_fleet_stats()

        assert stats["total"] == 4
        assert stats["available"] == 1
        assert stats["in_use"] == 1
        assert stats["availability_percentage"] == 25.0
        assert stats["total_capacity_m3"] == Decimal("50")
        assert stats["available_capacity_m3"] == Decimal("10")

    def test_fleet_stats_empty(self, service):
        assert service.get_fleet_stats()["availability_percentage"] == 0.0


class TestRegister:
    def test_register_normalizes_plate(self, service):
        vehicle = service.register_vehicle(
            RegisterVehicleDTO(plate="abc-123", capacity_m3=Decimal("12"), brand="Volvo")
        )

        assert vehicle.plate == "ABC123"
        assert vehicle.status == VehicleStatus.AVAILABLE

    def test_duplicate_plate(self, service, make_vehicle):
        make_vehicle(plate="ABC123")

        with pytest.raises(DuplicatePlate):
            service.register_vehicle(RegisterVehicleDTO(plate="ABC123", capacity_m3=Decimal("12")))


class TestStatusChanges:
    def test_mark_in_use_and_release(self, service, make_vehicle):
        vehicle = make_vehicle()

        assert service.mark_in_use(vehicle.id).status == VehicleStatus.IN_USE
        assert service.release(vehicle.id, reason="done").status == VehicleStatus.AVAILABLE

        event_types = list(OutboxEvent.objects.values_list("event_type", flat=True))
        assert event_types.count("VehicleStatusChanged") == 2
        assert "VehicleReleased" in event_types

    def test_mark_in_use_rejects_taken_vehicle(self, service, make_vehicle):
        vehicle = make_vehicle(status=VehicleStatus.IN_USE)

        with pytest.raises(VehicleUnavailable) as exc_info:
            service.mark_in_use(vehicle.id)

        assert "no longer available" in exc_info.value.message

    def test_mark_in_use_missing_vehicle(self, service):
        with pytest.raises(VehicleNotFound):
            service.mark_in_use(999_999)

    def test_release_requires_in_use(self, service, make_vehicle):
        vehicle = make_vehicle()

        with pytest.raises(InvalidVehicleStatus):
            service.release(vehicle.id)

    def test_release_refused_while_order_holds_vehicle(
        self, service, order_service, make_order, make_vehicle, material, staff_user
    ):
        vehicle = make_vehicle(capacity="10")
        order = make_order(material, quantity="8")
        order_service.confirm_order(order.id, actor_id=staff_user.id)
        order_service.assign_vehicle(order.id, actor_id=staff_user.id)

        with pytest.raises(VehicleHeldByOrder) as exc_info:
            service.release(vehicle.id, reason="manual")

        assert exc_info.value.status_code == 422
        assert exc_info.value.details == {"order": order.tracking_code}
        vehicle.refresh_from_db()
        assert vehicle.status == VehicleStatus.IN_USE

        order_service.transition(order.id, OrderStatus.IN_TRANSIT, actor_id=staff_user.id)
        with pytest.raises(VehicleHeldByOrder):
            service.release(vehicle.id)

        order_service.transition(order.id, OrderStatus.DELIVERED, actor_id=staff_user.id)
        assert service.release(vehicle.id).status == VehicleStatus.AVAILABLE

    def test_manual_maintenance_and_back(self, service, make_vehicle):
        vehicle = make_vehicle()

        service.update_status(vehicle.id, UpdateVehicleStatusDTO(status="mantenimiento"))
        updated = service.update_status(vehicle.id, UpdateVehicleStatusDTO(status="disponible"))

        assert updated.status == VehicleStatus.AVAILABLE

    def test_manual_change_cannot_enter_in_use(self, service, make_vehicle):
        vehicle = make_vehicle()

        with pytest.raises(InvalidVehicleStatus):
            service.update_status(vehicle.id, UpdateVehicleStatusDTO(status="en_uso"))

    def test_manual_change_cannot_leave_in_use(self, service, make_vehicle):
        vehicle = make_vehicle(status=VehicleStatus.IN_USE)

        with pytest.raises(InvalidVehicleStatus) as exc_info:
            service.update_status(vehicle.id, UpdateVehicleStatusDTO(status="disponible"))

        assert "release" in exc_info.value.message


class TestLocation:
    def test_update_location_stamps_clock(self, service, make_vehicle):
        vehicle = make_vehicle()

        updated = service.update_location(
            vehicle.id, UpdateLocationDTO(latitude=Decimal("-17.3935"), longitude=Decimal("-66.1570"))
        )

        assert updated.last_latitude == Decimal("-17.393500")
        assert updated.last_location_at == FIXED_NOW

    def test_update_location_missing_vehicle(self, service):
        with pytest.raises(VehicleNotFound):
            service.update_location(
                999_999, UpdateLocationDTO(latitude=Decimal("0"), longitude=Decimal("0"))
            )
