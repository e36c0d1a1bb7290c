"""Vehicle API views.

Exposes ``VehicleService`` via HTTP.  Fleet views are staff only; domain
errors propagate to ``api_exception_handler``.
"""

from __future__ import annotations

from django.conf import settings
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.responses import success_response
from modules.vehicles.dtos import (
    RegisterVehicleDTO,
    UpdateLocationDTO,
    UpdateVehicleStatusDTO,
)
from modules.vehicles.filters import VehicleFilter
from modules.vehicles.repositories.django_repository import VehicleDjangoRepository
from modules.vehicles.serializers import (
    AvailableVehiclesQuerySerializer,
    RegisterVehicleSerializer,
    UpdateLocationSerializer,
    UpdateVehicleStatusSerializer,
    VehicleSerializer,
)
from modules.vehicles.services import VehicleService


class VehicleViewSet(GenericViewSet):
    """ViewSet for fleet operations.

    Does **not** extend ``ModelViewSet``: every write goes through the
    service so status changes stay conditional.
    """

    permission_classes = [IsAdminUser]
    filterset_class = VehicleFilter
    filter_backends = [DjangoFilterBackend]
    serializer_class = VehicleSerializer

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._repo = VehicleDjangoRepository()
        self._service = VehicleService(repository=self._repo)

    def get_queryset(self):
        return self._repo.list()

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/vehicles/"""
        queryset = self.filter_queryset(self.get_queryset())
        return success_response(VehicleSerializer(queryset, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/vehicles/{pk}/"""
        vehicle = self._service.get_vehicle(int(pk))
        return success_response(VehicleSerializer(vehicle).data)

    @action(detail=False, methods=["get"])
    def available(self, request: Request) -> Response:
        """GET /api/v1/vehicles/available/?capacity=9"""
        query = AvailableVehiclesQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        vehicles = self._service.list_available(query.validated_data["capacity"])
        return success_response(VehicleSerializer(vehicles, many=True).data)

    @action(detail=False, methods=["get"])
    def stats(self, request: Request) -> Response:
        """GET /api/v1/vehicles/stats/"""
        return success_response(self._service.get_fleet_stats())

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/vehicles/"""
        serializer = RegisterVehicleSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = RegisterVehicleDTO(
            **serializer.validated_data,
            max_capacity=settings.VEHICLE_MAX_CAPACITY,
        )
        vehicle = self._service.register_vehicle(dto)
        return success_response(
            VehicleSerializer(vehicle).data,
            message="Vehicle registered",
            status=status.HTTP_201_CREATED,
        )

    @action(detail=True, methods=["put"], url_path="status")
    def change_status(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/vehicles/{pk}/status/"""
        serializer = UpdateVehicleStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateVehicleStatusDTO(**serializer.validated_data)
        vehicle = self._service.update_status(int(pk), dto)
        return success_response(
            VehicleSerializer(vehicle).data, message="Vehicle status updated"
        )

    @action(detail=True, methods=["put"])
    def location(self, request: Request, pk: str | None = None) -> Response:
        """PUT /api/v1/vehicles/{pk}/location/"""
        serializer = UpdateLocationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        dto = UpdateLocationDTO(**serializer.validated_data)
        vehicle = self._service.update_location(int(pk), dto)
        return success_response(
            VehicleSerializer(vehicle).data, message="Vehicle location updated"
        )

    @action(detail=True, methods=["post"])
    def release(self, request: Request, pk: str | None = None) -> Response:
        """POST /api/v1/vehicles/{pk}/release/"""
        vehicle = self._service.release(int(pk), reason=request.data.get("reason", ""))
        return success_response(
            VehicleSerializer(vehicle).data, message="Vehicle released"
        )
