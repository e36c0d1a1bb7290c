"""Order API views.

Exposes the ``OrderService`` via HTTP using a DRF ViewSet.  Views only
validate input and shape output: domain exceptions propagate to
``api_exception_handler``, which renders the error envelope.

Staff manage every order; a client user sees, creates and (while still
pending) cancels only the orders of their own client profile.  Tracking
by code is public.
"""

from __future__ import annotations

from typing import Optional

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.filters import OrderingFilter, SearchFilter
from rest_framework.permissions import AllowAny, IsAdminUser, IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import BaseThrottle
from rest_framework.viewsets import GenericViewSet

from modules.clients.exceptions import ClientNotFound
from modules.clients.repositories.django_repository import ClientDjangoRepository
from modules.core.exceptions import ValidationError
from modules.core.responses import success_response
from modules.materials.repositories.django_repository import MaterialDjangoRepository
from modules.orders.constants import OrderStatus
from modules.orders.dtos import CreateOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.serializers import (
    AssignVehicleSerializer,
    CancelOrderSerializer,
    CreateOrderSerializer,
    OrderListSerializer,
    OrderSerializer,
    PeriodQuerySerializer,
    UpdateStatusSerializer,
    VehicleScoreSerializer,
)
from modules.orders.services import OrderService
from modules.stock.repositories.django_repository import StockDjangoRepository
from modules.stock.serializers import StockAlertSerializer, StockRecordSerializer
from modules.stock.services import StockLedger
from modules.vehicles.repositories.django_repository import VehicleDjangoRepository
from modules.vehicles.serializers import VehicleSerializer
from modules.vehicles.services import VehicleService

STAFF_ACTIONS = {
    "list",
    "change_status",
    "confirm",
    "assign_vehicle",
    "pending_assignment",
    "stats",
}


def build_order_service() -> OrderService:
    """Wire ``OrderService`` with the Django repositories."""
    return OrderService(
        order_repository=OrderDjangoRepository(),
        client_repository=ClientDjangoRepository(),
        material_repository=MaterialDjangoRepository(),
        stock_ledger=StockLedger(repository=StockDjangoRepository()),
        vehicle_service=VehicleService(repository=VehicleDjangoRepository()),
    )


class OrderViewSet(GenericViewSet):
    """ViewSet for Order operations.

    Uses ``OrderService`` with injected repositories (DIP).
    Does **not** extend ``ModelViewSet``: all writes go through the
    service layer.
    """

    filterset_class = OrderFilter
    search_fields = ["tracking_code", "client__name", "delivery_address"]
    ordering_fields = ["created_at", "total_price", "quantity", "status"]
    ordering = ["-created_at", "-id"]
    filter_backends = [DjangoFilterBackend, SearchFilter, OrderingFilter]
    serializer_class = OrderSerializer
    lookup_value_regex = r"\d+"

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = build_order_service()
        self._clients = ClientDjangoRepository()

    def get_queryset(self):
        return self._service.list_orders()

    def get_permissions(self):
        if self.action == "tracking":
            return [AllowAny()]
        if self.action in STAFF_ACTIONS:
            return [IsAdminUser()]
        return [IsAuthenticated()]

    def get_throttles(self) -> list[BaseThrottle]:
        """Throttle scope per action."""
        throttle_scope: str | None
        if self.action == "create":
            throttle_scope = "order_creation"
        elif self.action in {"list", "retrieve", "mine"}:
            throttle_scope = "order_listing"
        else:
            throttle_scope = None
        self.throttle_scope = throttle_scope
        return super().get_throttles()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _own_client_id(self, request: Request) -> int:
        """Client profile of the requesting user."""
        client = self._clients.get_by_user(request.user.id)
        if client is None:
            raise ClientNotFound("No client profile is linked to this user.")
        return client.id

    def _scope_client_id(self, request: Request) -> Optional[int]:
        """``None`` for staff (no restriction), the own client id otherwise."""
        if request.user.is_staff:
            return None
        return self._own_client_id(request)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/orders/"""
        serializer = CreateOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        requested_client = data.pop("client_id", None)
        if request.user.is_staff:
            if requested_client is None:
                raise ValidationError(
                    "client_id is required when staff create an order.",
                    details=[{"field": "client_id", "message": "This field is required."}],
                )
            client_id = requested_client
        else:
            client_id = self._own_client_id(request)

        dto = CreateOrderDTO(
            **data,
            max_quantity=settings.ORDER_MAX_QUANTITY,
            max_days_ahead=settings.ORDER_MAX_DAYS_AHEAD,
        )
        order = self._service.create_order(dto, client_id=client_id, actor_id=request.user.id)
        return success_response(
            OrderSerializer(order).data,
            message=f"Order created. Tracking code: {order.tracking_code}",
            status=status.HTTP_201_CREATED,
        )

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/orders/

        Filtering (status, client, date range, total range) is handled
        by ``OrderFilter``; ordering by ``OrderingFilter``.  Paginated.
        """
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is None:
            return success_response(OrderListSerializer(queryset, many=True).data)
        paginator = self.paginator.page.paginator
        return success_response(
            OrderListSerializer(page, many=True).data,
            meta={
                "count": paginator.count,
                "page": self.paginator.page.number,
                "pages": paginator.num_pages,
                "next": self.paginator.get_next_link(),
                "previous": self.paginator.get_previous_link(),
            },
        )

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/orders/{pk}/"""
        order = self._service.get_order(int(pk), client_id=self._scope_client_id(request))
        return success_response(OrderSerializer(order).data)

    @action(detail=False, methods=["get"])
    def mine(self, request: Request) -> Response:
        """GET /api/v1/orders/mine/"""
        orders = self._service.list_client_orders(self._own_client_id(request))
        return success_response(OrderListSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"], url_path=r"tracking/(?P<code>[^/]+)")
    def tracking(self, request: Request, code: str | None = None) -> Response:
        """GET /api/v1/orders/tracking/{code}/ (public)"""
        info = self._service.get_tracking_info(code or "")
        return success_response(info.model_dump(mode="json"))

    @action(detail=False, methods=["get"], url_path="pending-assignment")
    def pending_assignment(self, request: Request) -> Response:
        """GET /api/v1/orders/pending-assignment/"""
        orders = self._service.list_pending_assignment()
        return success_response(OrderListSerializer(orders, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/orders/stats/?start=...&end=..."""
        query = PeriodQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        return success_response(
            self._service.get_stats_by_period(
                start=query.validated_data.get("start"),
                end=query.validated_data.get("end"),
            )
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @action(detail=True, methods=["put"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/status/

        Only moves along edges without side effects (in transit, delivered).
        Confirmation, assignment and cancellation have their own endpoints
        (``confirm/``, ``assign-vehicle/``, ``cancel/``); the service refuses
        them here with ``STATUS_REQUIRES_OPERATION``.
        """
        serializer = UpdateStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data["status"].strip().lower()

        order = self._service.transition(
            int(pk),
            new_status,
            actor_id=request.user.id,
            notes=serializer.validated_data["notes"],
        )
        return success_response(
            OrderSerializer(order).data, message=f"Order status updated to {order.status}"
        )

    @action(detail=True, methods=["put"])
    def confirm(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/confirm/"""
        result = self._service.confirm_order(int(pk), actor_id=request.user.id)
        return success_response(
            {
                "order": OrderSerializer(result.order).data,
                "stock": StockRecordSerializer(result.stock_record).data,
                "alerts": StockAlertSerializer(result.alerts, many=True).data,
            },
            message="Order confirmed and stock reserved",
        )

    @action(detail=True, methods=["put"], url_path="assign-vehicle")
    def assign_vehicle(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/orders/{pk}/assign-vehicle/

        Without ``vehicle_id`` the assignment engine picks the vehicle.
        """
        serializer = AssignVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = self._service.assign_vehicle(
            int(pk),
            actor_id=request.user.id,
            vehicle_id=serializer.validated_data.get("vehicle_id"),
        )
        data = {
            "order": OrderSerializer(result.order).data,
            "vehicle": VehicleSerializer(result.vehicle).data,
            "automatic": result.decision is not None,
        }
        if result.decision is not None:
            data["ranking"] = VehicleScoreSerializer(result.decision.ranking, many=True).data
        return success_response(data, message=result.order.assignment_justification)

    @action(detail=True, methods=["post"])
    def cancel(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/orders/{pk}/cancel/

        Staff may cancel any cancellable order; clients only their own
        pending ones.
        """
        serializer = CancelOrderSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        client_id = self._scope_client_id(request)
        if client_id is not None:
            order = self._service.get_order(int(pk), client_id=client_id)
            if order.status != OrderStatus.PENDING:
                raise PermissionDenied("Clients can only cancel pending orders.")

        order = self._service.cancel_order(
            int(pk),
            actor_id=request.user.id,
            notes=serializer.validated_data["notes"],
        )
        return success_response(OrderSerializer(order).data, message="Order cancelled")
