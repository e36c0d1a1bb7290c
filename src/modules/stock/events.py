"""Domain events for the Stock bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class StockReserved(DomainEvent):
    """Raised when an order confirmation decrements stock."""

    quantity: str
    remaining: str
    order_id: Optional[int] = None


@dataclass(frozen=True, kw_only=True)
class StockIncreased(DomainEvent):
    """Raised when stock is returned or restocked."""

    quantity: str
    available: str


@dataclass(frozen=True, kw_only=True)
class StockLevelChanged(DomainEvent):
    """Raised when a mutation moves a record to another stock level."""

    previous_level: str
    current_level: str
