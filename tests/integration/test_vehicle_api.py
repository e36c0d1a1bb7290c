"""Integration tests for the fleet endpoints."""

from __future__ import annotations

import pytest

from modules.vehicles.constants import VehicleStatus

pytestmark = pytest.mark.integration

VEHICLES_URL = "/api/v1/vehicles/"


class TestFleet:
    def test_register_vehicle(self, staff_api):
        response = staff_api.post(
            VEHICLES_URL, {"plate": "abc-123", "capacity_m3": "12", "brand": "Volvo"}, format="json"
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["plate"] == "ABC123"
        assert data["status"] == "disponible"
        assert data["location_is_stale"] is True

    def test_register_rejects_oversized_capacity(self, staff_api):
        response = staff_api.post(
            VEHICLES_URL, {"plate": "ABC123", "capacity_m3": "60"}, format="json"
        )

        assert response.status_code == 400
        assert "cannot exceed 50" in response.json()["error"]["message"]

    def test_duplicate_plate_is_409(self, staff_api, make_vehicle):
        make_vehicle(plate="ABC123")

        response = staff_api.post(
            VEHICLES_URL, {"plate": "ABC123", "capacity_m3": "12"}, format="json"
        )

        assert response.status_code == 409

    def test_available_by_capacity(self, staff_api, make_vehicle):
        make_vehicle(capacity="8")
        make_vehicle(capacity="12")
        make_vehicle(capacity="20", status=VehicleStatus.BROKEN)

        response = staff_api.get(f"{VEHICLES_URL}available/", {"capacity": "9"})

        assert [v["capacity_m3"] for v in response.json()["data"]] == ["12.00"]

    def test_stats(self, staff_api, make_vehicle):
        make_vehicle(capacity="10")
        make_vehicle(capacity="10", status=VehicleStatus.IN_USE)

        data = staff_api.get(f"{VEHICLES_URL}stats/").json()["data"]

        assert data["total"] == 2
        assert data["utilization_percentage"] == 50.0

    def test_status_change(self, staff_api, make_vehicle):
        vehicle = make_vehicle()

        response = staff_api.put(
            f"{VEHICLES_URL}{vehicle.id}/status/", {"status": "mantenimiento"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "mantenimiento"

    def test_status_change_cannot_free_vehicle_in_use(self, staff_api, make_vehicle):
        vehicle = make_vehicle(status=VehicleStatus.IN_USE)

        response = staff_api.put(
            f"{VEHICLES_URL}{vehicle.id}/status/", {"status": "disponible"}, format="json"
        )

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_VEHICLE_STATUS"

    def test_release(self, staff_api, make_vehicle):
        vehicle = make_vehicle(status=VehicleStatus.IN_USE)

        response = staff_api.post(
            f"{VEHICLES_URL}{vehicle.id}/release/", {"reason": "Delivery finished"}, format="json"
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "disponible"

    def test_release_refused_during_assignment(
        self, staff_api, order_service, make_order, make_vehicle, material, staff_user
    ):
        vehicle = make_vehicle(capacity="10")
        order = make_order(material, quantity="8")
        order_service.confirm_order(order.id, actor_id=staff_user.id)
        order_service.assign_vehicle(order.id, actor_id=staff_user.id)

        response = staff_api.post(f"{VEHICLES_URL}{vehicle.id}/release/", {}, format="json")

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "VEHICLE_HELD_BY_ORDER"
        assert order.tracking_code in error["message"]
        vehicle.refresh_from_db()
        assert vehicle.status == VehicleStatus.IN_USE

    def test_location_update(self, staff_api, make_vehicle):
        vehicle = make_vehicle()

        response = staff_api.put(
            f"{VEHICLES_URL}{vehicle.id}/location/",
            {"latitude": "-17.393500", "longitude": "-66.157000"},
            format="json",
        )

        data = response.json()["data"]
        assert data["last_latitude"] == "-17.393500"
        assert data["location_is_stale"] is False
        assert data["minutes_since_last_fix"] == 0

    def test_missing_vehicle(self, staff_api):
        response = staff_api.get(f"{VEHICLES_URL}999999/")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "VEHICLE_NOT_FOUND"

    def test_fleet_is_staff_only(self, client_api):
        assert client_api.get(VEHICLES_URL).status_code == 403
