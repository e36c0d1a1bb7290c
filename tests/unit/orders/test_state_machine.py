"""Tests for the order status transition table."""

from __future__ import annotations

import pytest

from modules.orders.constants import (
    VALID_TRANSITIONS,
    OrderStatus,
    describe_status,
    is_allowed,
    next_states,
)
from modules.orders.models import Order

pytestmark = pytest.mark.unit

ALLOWED = [
    (OrderStatus.PENDING, OrderStatus.CONFIRMED),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.CONFIRMED, OrderStatus.ASSIGNED),
    (OrderStatus.CONFIRMED, OrderStatus.CANCELLED),
    (OrderStatus.ASSIGNED, OrderStatus.IN_TRANSIT),
    (OrderStatus.ASSIGNED, OrderStatus.CANCELLED),
    (OrderStatus.IN_TRANSIT, OrderStatus.DELIVERED),
]


class TestTransitionTable:
    @pytest.mark.parametrize("current, new", ALLOWED)
    def test_allowed(self, current, new):
        assert is_allowed(current, new)

    @pytest.mark.parametrize(
        "current, new",
        [
            (current, new)
            for current in OrderStatus.values
            for new in OrderStatus.values
            if (current, new) not in ALLOWED
        ],
    )
    def test_everything_else_rejected(self, current, new):
        assert not is_allowed(current, new)

    def test_every_status_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(OrderStatus.values)

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_terminal_states_have_no_exit(self, status):
        assert next_states(status) == ()

    def test_next_states_order_is_stable(self):
        assert list(next_states("pendiente")) == ["confirmado", "cancelado"]

    def test_unknown_status_has_no_transitions(self):
        assert next_states("perdido") == ()
        assert not is_allowed("perdido", "confirmado")

    def test_descriptions(self):
        assert describe_status("en_transito") == "On the way to the destination"
        assert describe_status("perdido") == "Unknown status"


class TestOrderModelHelpers:
    @pytest.mark.parametrize(
        "status, cancellable, terminal",
        [
            ("pendiente", True, False),
            ("confirmado", True, False),
            ("asignado", True, False),
            ("en_transito", False, False),
            ("entregado", False, True),
            ("cancelado", False, True),
        ],
    )
    def test_flags(self, status, cancellable, terminal):
        order = Order(status=status)

        assert order.can_be_cancelled is cancellable
        assert order.is_terminal is terminal

    def test_can_transition_to(self):
        order = Order(status=OrderStatus.CONFIRMED)

        assert order.can_transition_to(OrderStatus.ASSIGNED)
        assert not order.can_transition_to(OrderStatus.DELIVERED)
