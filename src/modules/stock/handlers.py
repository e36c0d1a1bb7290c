"""Event handlers for Stock domain events."""

from __future__ import annotations

import structlog

from modules.stock.constants import StockLevel
from modules.stock.events import StockIncreased, StockLevelChanged, StockReserved
from shared.domain.bus import IEventHandler

logger = structlog.get_logger(__name__)


class StockReservedHandler(IEventHandler[StockReserved]):
    def handle(self, event: StockReserved) -> None:
        logger.info(
            "stock.event.reserved",
            material_id=event.aggregate_id,
            order_id=event.order_id,
            quantity=event.quantity,
            remaining=event.remaining,
        )


class StockIncreasedHandler(IEventHandler[StockIncreased]):
    def handle(self, event: StockIncreased) -> None:
        logger.info(
            "stock.event.increased",
            material_id=event.aggregate_id,
            quantity=event.quantity,
            available=event.available,
        )


class StockLevelChangedHandler(IEventHandler[StockLevelChanged]):
    def handle(self, event: StockLevelChanged) -> None:
        log_method = (
            logger.warning
            if event.current_level == StockLevel.CRITICAL
            else logger.info
        )
        log_method(
            "stock.event.level_changed",
            material_id=event.aggregate_id,
            previous_level=event.previous_level,
            current_level=event.current_level,
        )


stock_reserved_handler = StockReservedHandler()
stock_increased_handler = StockIncreasedHandler()
stock_level_changed_handler = StockLevelChangedHandler()
