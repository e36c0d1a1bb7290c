"""Vehicle domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BusinessLogicError, ConflictError, NotFoundError


class VehicleNotFound(NotFoundError):
    """The requested vehicle does not exist."""

    default_code = "VEHICLE_NOT_FOUND"


class VehicleUnavailable(BusinessLogicError):
    """The vehicle is not available or too small for the load."""

    default_code = "VEHICLE_UNAVAILABLE"


class NoVehicleAvailable(BusinessLogicError):
    """No available vehicle has enough capacity for the order."""

    default_code = "NO_VEHICLE_AVAILABLE"


class InvalidVehicleStatus(BusinessLogicError):
    """The requested fleet status change is not allowed."""

    default_code = "INVALID_VEHICLE_STATUS"


class VehicleHeldByOrder(BusinessLogicError):
    """The vehicle still serves an assigned or in-transit order."""

    default_code = "VEHICLE_HELD_BY_ORDER"


class DuplicatePlate(ConflictError):
    """Another vehicle already uses this plate."""

    default_code = "DUPLICATE_PLATE"
