"""Tests for the domain error taxonomy and the API exception handler."""

from __future__ import annotations

from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from rest_framework import exceptions as drf_exceptions

from modules.core.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
    api_exception_handler,
    from_pydantic,
)
from modules.orders.dtos import CreateOrderDTO
from modules.orders.exceptions import InvalidStatusTransition

pytestmark = pytest.mark.unit


class TestTaxonomy:
    @pytest.mark.parametrize(
        "exc_class, status_code",
        [
            (ValidationError, 400),
            (NotFoundError, 404),
            (ConflictError, 409),
            (BusinessLogicError, 422),
        ],
    )
    def test_status_codes(self, exc_class, status_code):
        assert exc_class("boom").status_code == status_code

    def test_subclass_code_and_details(self):
        exc = InvalidStatusTransition("nope", details={"allowed": []})

        assert exc.to_dict() == {
            "code": "INVALID_STATUS_TRANSITION",
            "message": "nope",
            "status": 422,
            "details": {"allowed": []},
        }

    def test_explicit_code_overrides_default(self):
        assert NotFoundError("x", code="SOMETHING").code == "SOMETHING"


class TestPydanticBridge:
    def test_single_error_becomes_message(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            CreateOrderDTO(material_id=1, quantity=Decimal("-1"), delivery_address="Calle Jordán 245")

        exc = from_pydantic(exc_info.value)

        assert exc.message == "Quantity must be greater than zero."
        assert exc.details == [{"field": "quantity", "message": "Quantity must be greater than zero."}]


class TestApiExceptionHandler:
    def test_domain_error_envelope(self):
        response = api_exception_handler(NotFoundError("Order 9 not found."), {})

        assert response.status_code == 404
        assert response.data["success"] is False
        assert response.data["error"] == {
            "code": "NOT_FOUND",
            "message": "Order 9 not found.",
            "status": 404,
            "details": None,
        }
        assert "timestamp" in response.data

    def test_pydantic_error_envelope(self):
        with pytest.raises(PydanticValidationError) as exc_info:
            CreateOrderDTO(material_id=1, quantity=Decimal("1"), delivery_address="short")

        response = api_exception_handler(exc_info.value, {})

        assert response.status_code == 400
        assert response.data["error"]["code"] == "VALIDATION_ERROR"
        assert response.data["error"]["details"][0]["field"] == "delivery_address"

    def test_drf_validation_error_envelope(self):
        exc = drf_exceptions.ValidationError({"quantity": ["This field is required."]})

        response = api_exception_handler(exc, {})

        assert response.status_code == 400
        assert response.data["error"]["message"] == "Invalid input."
        assert response.data["error"]["details"] == {"quantity": ["This field is required."]}

    def test_drf_not_authenticated_envelope(self):
        response = api_exception_handler(drf_exceptions.NotAuthenticated(), {})

        assert response.status_code == 401
        assert response.data["error"]["code"] == "NOT_AUTHENTICATED"
        assert response.data["error"]["details"] is None

    def test_unknown_exception_is_left_to_django(self):
        assert api_exception_handler(RuntimeError("boom"), {}) is None
