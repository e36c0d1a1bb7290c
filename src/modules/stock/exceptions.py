"""Stock domain exceptions."""

from __future__ import annotations

from modules.core.exceptions import BusinessLogicError, NotFoundError


class StockRecordNotFound(NotFoundError):
    """The material has no stock record."""

    default_code = "STOCK_NOT_FOUND"


class InsufficientStock(BusinessLogicError):
    """The conditional decrement matched no row.

    Either the stock was already too low or a concurrent reservation
    drew it down first.
    """

    default_code = "INSUFFICIENT_STOCK"
