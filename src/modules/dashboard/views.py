"""Dashboard API view: one endpoint, content chosen by role."""

from __future__ import annotations

from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from modules.clients.exceptions import ClientNotFound
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.responses import success_response
from modules.dashboard.services import DashboardService
from modules.orders.views import build_order_service
from modules.stock.repositories.django_repository import StockDjangoRepository
from modules.stock.services import StockLedger
from modules.vehicles.repositories.django_repository import VehicleDjangoRepository
from modules.vehicles.services import VehicleService


class DashboardView(APIView):
    """GET /api/v1/dashboard/

    Staff get the operations dashboard; client users get their own.
    """

    permission_classes = [IsAuthenticated]

    def get(self, request: Request) -> Response:
        service = DashboardService(
            order_service=build_order_service(),
            vehicle_service=VehicleService(repository=VehicleDjangoRepository()),
            stock_ledger=StockLedger(repository=StockDjangoRepository()),
        )
        if request.user.is_staff:
            return success_response(
                {"role": "staff", **service.staff_dashboard()},
                message="Operations dashboard",
            )

        client = ClientDjangoRepository().get_by_user(request.user.id)
        if client is None:
            raise ClientNotFound("No client profile is linked to this user.")
        return success_response(
            {"role": "client", **service.client_dashboard(client.id)},
            message="Client dashboard",
        )
