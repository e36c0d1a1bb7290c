"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.  Each one
subclasses a kind from ``modules.core.exceptions``; the API exception
handler turns them into the error envelope, so views never catch them.
"""

from __future__ import annotations

from modules.core.exceptions import (
    BusinessLogicError,
    ConflictError,
    NotFoundError,
    ValidationError,
)


class OrderNotFound(NotFoundError):
    """The requested order does not exist."""

    default_code = "ORDER_NOT_FOUND"


class InvalidStatusTransition(BusinessLogicError):
    """The requested transition is not in ``VALID_TRANSITIONS``."""

    default_code = "INVALID_STATUS_TRANSITION"


class StatusRequiresOperation(BusinessLogicError):
    """The target status is set by a dedicated use case, not a bare transition."""

    default_code = "STATUS_REQUIRES_OPERATION"


class UnknownOrderStatus(ValidationError):
    """The requested status is not one of the order statuses."""

    default_code = "UNKNOWN_STATUS"


class InvalidTrackingCode(ValidationError):
    """A tracking code does not match the expected format."""

    default_code = "INVALID_TRACKING_CODE"


class TrackingCodeConflict(ConflictError):
    """A generated tracking code collided with an existing order."""

    default_code = "TRACKING_CODE_CONFLICT"
