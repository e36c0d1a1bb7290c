"""Integration tests for the role dashboard."""

from __future__ import annotations

from decimal import Decimal

import pytest

pytestmark = pytest.mark.integration

DASHBOARD_URL = "/api/v1/dashboard/"


def test_staff_dashboard(staff_api, order_service, make_order, material, make_vehicle, staff_user):
    make_vehicle(capacity="10")
    confirmed = make_order(material, quantity="2")
    make_order(material, quantity="1")
    order_service.confirm_order(confirmed.id, actor_id=staff_user.id)

    response = staff_api.get(DASHBOARD_URL)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "staff"
    assert data["orders_today"]["total"] == 2
    assert data["orders_this_month"]["total"] == 2
    assert data["pending_assignment"]["count"] == 1
    assert data["pending_assignment"]["orders"][0]["tracking_code"] == confirmed.tracking_code
    assert data["fleet"]["available"] == 1
    assert data["inventory"]["total_materials"] == 1


def test_client_dashboard(client_api, order_service, make_order, material, other_client, staff_user):
    make_order(material, quantity="2")
    cancelled = make_order(material, quantity="1")
    make_order(material, quantity="1", client=other_client)
    order_service.cancel_order(cancelled.id, actor_id=staff_user.id)

    response = client_api.get(DASHBOARD_URL)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["role"] == "client"
    summary = data["summary"]
    assert summary["total_orders"] == 2
    assert summary["active_orders"] == 1
    assert summary["cancelled_orders"] == 1
    assert Decimal(summary["total_value"]) == Decimal("240.00")
    assert Decimal(summary["average_value"]) == Decimal("240.00")
    assert len(data["recent_orders"]) == 2
    assert data["recent_orders"][0]["short_code"] == "0002"
    assert data["recent_orders"][0]["quantity"] == "1.00 m³"


def test_user_without_profile(api_client):
    from django.contrib.auth import get_user_model

    user = get_user_model().objects.create_user(username="visitor", password="x")
    api_client.force_authenticate(user=user)

    response = api_client.get(DASHBOARD_URL)

    assert response.status_code == 404


def test_anonymous(api_client):
    assert api_client.get(DASHBOARD_URL).status_code == 401
