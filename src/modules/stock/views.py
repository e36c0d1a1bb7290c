"""Stock API views.

Exposes the ``StockLedger`` via HTTP.  Domain errors propagate to
``api_exception_handler``; views only validate input and shape output.
"""

from __future__ import annotations

from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import ViewSet

from modules.core.responses import success_response
from modules.stock.alerts import emit_stock_alerts
from modules.stock.dtos import StockAdjustmentDTO, StockIncreaseDTO
from modules.stock.repositories.django_repository import StockDjangoRepository
from modules.stock.serializers import (
    AvailabilityQuerySerializer,
    AvailabilitySerializer,
    InventoryItemSerializer,
    StockAdjustmentSerializer,
    StockAlertSerializer,
    StockIncreaseSerializer,
    StockRecordSerializer,
)
from modules.stock.services import StockLedger


class StockViewSet(ViewSet):
    """Inventory endpoints keyed by material id.

    Availability checks are open to any authenticated user (clients use
    them before ordering); everything else is staff only.
    """

    lookup_field = "material_id"
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._ledger = StockLedger(repository=StockDjangoRepository())

    def get_permissions(self):
        if self.action == "availability":
            return [IsAuthenticated()]
        return [IsAdminUser()]

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/stock/"""
        items = self._ledger.get_inventory()
        return success_response(InventoryItemSerializer(items, many=True).data)

    def retrieve(self, request: Request, material_id: str | None = None) -> Response:
        """GET /api/v1/stock/{material_id}/"""
        record = self._ledger.get_record(int(material_id))
        return success_response(StockRecordSerializer(record).data)

    @action(detail=True, methods=["get"])
    def availability(self, request: Request, material_id: str | None = None) -> Response:
        """GET /api/v1/stock/{material_id}/availability/?quantity=8"""
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        result = self._ledger.check_availability(
            int(material_id), query.validated_data["quantity"]
        )
        return success_response(AvailabilitySerializer(result.model_dump()).data)

    @action(detail=False, methods=["get"])
    def alerts(self, request: Request) -> Response:
        """GET /api/v1/stock/alerts/ (records at critical level)"""
        items = self._ledger.get_critical_stock()
        return success_response(InventoryItemSerializer(items, many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request: Request) -> Response:
        """GET /api/v1/stock/summary/"""
        return success_response(self._ledger.get_inventory_summary())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @action(detail=True, methods=["post"])
    def increase(self, request: Request, material_id: str | None = None) -> Response:
        """POST /api/v1/stock/{material_id}/increase/"""
        serializer = StockIncreaseSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = StockIncreaseDTO(**serializer.validated_data)

        record = self._ledger.increase(int(material_id), dto.quantity, request.user.id)
        alerts = emit_stock_alerts(
            record, previous_quantity=record.available_quantity - dto.quantity
        )
        return success_response(
            {
                "stock": StockRecordSerializer(record).data,
                "alerts": StockAlertSerializer(alerts, many=True).data,
            },
            message="Stock increased",
        )

    def update(self, request: Request, material_id: str | None = None) -> Response:
        """PUT /api/v1/stock/{material_id}/"""
        serializer = StockAdjustmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = StockAdjustmentDTO(**serializer.validated_data)

        previous = self._ledger.get_record(int(material_id)).available_quantity
        record = self._ledger.adjust(int(material_id), dto, request.user.id)
        alerts = emit_stock_alerts(record, previous_quantity=previous)
        return success_response(
            {
                "stock": StockRecordSerializer(record).data,
                "alerts": StockAlertSerializer(alerts, many=True).data,
            },
            message="Stock updated",
        )
