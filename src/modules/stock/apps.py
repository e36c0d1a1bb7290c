from django.apps import AppConfig


class StockConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.stock"
    label = "stock"

    def ready(self) -> None:
        from modules.stock.events import StockIncreased, StockLevelChanged, StockReserved
        from modules.stock.handlers import (
            stock_increased_handler,
            stock_level_changed_handler,
            stock_reserved_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(StockReserved, stock_reserved_handler)
        event_bus.subscribe(StockIncreased, stock_increased_handler)
        event_bus.subscribe(StockLevelChanged, stock_level_changed_handler)
