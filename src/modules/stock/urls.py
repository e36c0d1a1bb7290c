"""Stock URL configuration."""

from __future__ import annotations

from rest_framework.routers import DefaultRouter

from modules.stock.views import StockViewSet

router = DefaultRouter(trailing_slash=True)
router.register("stock", StockViewSet, basename="stock")

urlpatterns = router.urls
