from django.apps import AppConfig


class VehiclesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.vehicles"
    label = "vehicles"

    def ready(self) -> None:
        from modules.vehicles.events import VehicleReleased, VehicleStatusChanged
        from modules.vehicles.handlers import (
            vehicle_released_handler,
            vehicle_status_changed_handler,
        )
        from shared.infrastructure.bus import event_bus

        event_bus.subscribe(VehicleStatusChanged, vehicle_status_changed_handler)
        event_bus.subscribe(VehicleReleased, vehicle_released_handler)
