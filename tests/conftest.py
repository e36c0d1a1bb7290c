from __future__ import annotations

from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from modules.clients.models import Client
from modules.materials.models import Material
from modules.orders.dtos import CreateOrderDTO
from modules.orders.views import build_order_service
from modules.stock.models import StockRecord
from modules.vehicles.constants import VehicleStatus
from modules.vehicles.models import Vehicle

User = get_user_model()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


# ---------------------------------------------------------------------------
# Users and clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def staff_user():
    return User.objects.create_user(username="operador", password="testpass123", is_staff=True)


@pytest.fixture()
def client_user():
    return User.objects.create_user(username="cliente", password="testpass123")


@pytest.fixture()
def client_profile(client_user):
    return Client.objects.create(
        name="Constructora Andina",
        email="andina@example.com",
        phone="71234567",
        address="Av. Blanco Galindo km 4, Cercado",
        user=client_user,
    )


@pytest.fixture()
def other_client():
    return Client.objects.create(
        name="Obras Quillacollo",
        email="quilla@example.com",
        phone="63456789",
        address="Av. Martín Cárdenas 55, Quillacollo",
    )


@pytest.fixture()
def staff_api(api_client, staff_user):
    api_client.force_authenticate(user=staff_user)
    return api_client


@pytest.fixture()
def client_api(client_profile, client_user):
    api = APIClient()
    api.force_authenticate(user=client_user)
    return api


# ---------------------------------------------------------------------------
# Catalog, stock and fleet
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_material():
    counter = {"n": 0}

    def _make(
        available="10",
        minimum="5",
        price="100.00",
        is_active=True,
        name=None,
        with_stock=True,
    ) -> Material:
        counter["n"] += 1
        material = Material.objects.create(
            name=name or f"Arena {counter['n']}",
            price_per_unit=Decimal(price),
            is_active=is_active,
        )
        if with_stock:
            StockRecord.objects.create(
                material=material,
                available_quantity=Decimal(available),
                minimum_quantity=Decimal(minimum),
            )
        return material

    return _make


@pytest.fixture()
def material(make_material):
    return make_material(available="10", minimum="5", price="120.00", name="Arena fina")


@pytest.fixture()
def make_vehicle():
    counter = {"n": 0}

    def _make(
        capacity="10",
        status=VehicleStatus.AVAILABLE,
        plate=None,
        latitude=None,
        longitude=None,
        location_at=None,
    ) -> Vehicle:
        counter["n"] += 1
        return Vehicle.objects.create(
            plate=plate or f"VEH{counter['n']:03d}",
            capacity_m3=Decimal(capacity),
            status=status,
            last_latitude=latitude,
            last_longitude=longitude,
            last_location_at=location_at,
        )

    return _make


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


@pytest.fixture()
def order_service():
    return build_order_service()


@pytest.fixture()
def make_order(order_service, client_profile):
    def _make(material, quantity="8", client=None, address="Calle Jordán 245, Cercado"):
        dto = CreateOrderDTO(
            material_id=material.id,
            quantity=Decimal(quantity),
            delivery_address=address,
        )
        return order_service.create_order(dto, client_id=(client or client_profile).id)

    return _make
