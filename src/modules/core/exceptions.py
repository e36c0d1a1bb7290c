"""Domain error taxonomy and the API exception handler.

Every service raises one of the four kinds below (or an app-specific
subclass).  Views never catch them: ``api_exception_handler`` is the
single place where they are translated into the JSON error envelope::

    {
        "success": false,
        "error": {"code": ..., "message": ..., "status": ..., "details": ...},
        "timestamp": "2025-01-01T12:00:00+00:00",
        "request_id": "<X-Request-ID of the request>"
    }

Kinds:
- ``ValidationError`` (400): malformed or out-of-range input.
- ``NotFoundError`` (404): referenced entity missing or inactive.
- ``ConflictError`` (409): uniqueness violation surfaced from persistence.
- ``BusinessLogicError`` (422): well-formed input that breaks a domain rule.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import pydantic
import structlog
from django.utils import timezone
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from modules.core.middleware import get_correlation_id

logger = structlog.get_logger(__name__)


class DomainError(Exception):
    """Base class for errors raised by the service layer."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: str = "DOMAIN_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Any] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "status": self.status_code,
            "details": self.details,
        }


class ValidationError(DomainError):
    """Input is malformed or out of range; never reaches persistence."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """The referenced entity does not exist or is inactive."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictError(DomainError):
    """A uniqueness constraint was violated at the persistence layer."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class BusinessLogicError(DomainError):
    """Well-formed input that violates a domain rule."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    default_code = "BUSINESS_RULE_VIOLATION"


# ---------------------------------------------------------------------------
# Pydantic bridge
# ---------------------------------------------------------------------------


def pydantic_error_details(exc: pydantic.ValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors into ``[{"field": ..., "message": ...}]``."""
    details = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "__all__"
        message = error.get("msg", "Invalid value")
        # pydantic prefixes custom ValueError messages
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        details.append({"field": field, "message": message})
    return details


def from_pydantic(exc: pydantic.ValidationError) -> ValidationError:
    details = pydantic_error_details(exc)
    message = details[0]["message"] if len(details) == 1 else "Invalid input."
    return ValidationError(message, details=details)


# ---------------------------------------------------------------------------
# DRF exception handler
# ---------------------------------------------------------------------------


def error_envelope(
    code: str, message: str, status_code: int, details: Any = None
) -> Dict[str, Any]:
    return {
        "success": False,
        "error": {
            "code": code,
            "message": message,
            "status": status_code,
            "details": details,
        },
        "timestamp": timezone.now().isoformat(),
        "request_id": get_correlation_id() or None,
    }


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Optional[Response]:
    """Render domain and DRF errors with the standard envelope.

    Returns ``None`` for anything else so Django produces a 500.
    """
    view = context.get("view")
    view_name = type(view).__name__ if view is not None else None

    if isinstance(exc, pydantic.ValidationError):
        exc = from_pydantic(exc)

    if isinstance(exc, DomainError):
        log_method = logger.warning if exc.status_code < 500 else logger.error
        log_method(
            "api.domain_error",
            view=view_name,
            code=exc.code,
            status_code=exc.status_code,
            error=exc.message,
        )
        return Response(
            error_envelope(exc.code, exc.message, exc.status_code, exc.details),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        logger.error("api.unhandled_error", view=view_name, error=str(exc))
        return None

    data = response.data
    if isinstance(data, dict) and set(data.keys()) == {"detail"}:
        message = str(data["detail"])
        details = None
    else:
        message = "Invalid input." if response.status_code == 400 else str(exc)
        details = data

    code = getattr(exc, "default_code", "error")
    detail = getattr(exc, "detail", None)
    if hasattr(detail, "code") and detail.code:
        code = detail.code

    response.data = error_envelope(
        str(code).upper(), message, response.status_code, details
    )
    return response
