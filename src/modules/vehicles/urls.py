"""Vehicle URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.vehicles.views import VehicleViewSet

router = DefaultRouter(trailing_slash=True)
router.register("vehicles", VehicleViewSet, basename="vehicle")

urlpatterns = router.urls
