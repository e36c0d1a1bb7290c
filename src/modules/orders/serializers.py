"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.models import Order, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class CreateOrderSerializer(serializers.Serializer):
    """Validates the order creation request payload.

    ``client_id`` is only honoured for staff; clients always order for
    their own profile.
    """

    client_id = serializers.IntegerField(required=False, min_value=1)
    material_id = serializers.IntegerField(min_value=1)
    quantity = serializers.DecimalField(max_digits=10, decimal_places=2)
    delivery_address = serializers.CharField(trim_whitespace=True)
    delivery_latitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True
    )
    delivery_longitude = serializers.DecimalField(
        max_digits=9, decimal_places=6, required=False, allow_null=True
    )
    contact_phone = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, max_length=20
    )
    requested_delivery_date = serializers.DateField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class AssignVehicleSerializer(serializers.Serializer):
    vehicle_id = serializers.IntegerField(required=False, allow_null=True, min_value=1)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class PeriodQuerySerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class StatusHistorySerializer(serializers.ModelSerializer):
    """Read serializer for order status history records."""

    class Meta:
        model = OrderStatusHistory
        fields = [
            "id",
            "old_status",
            "new_status",
            "user_id",
            "notes",
            "created_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with history and assignment details."""

    client_name = serializers.CharField(source="client.name", read_only=True)
    material_name = serializers.CharField(source="material.name", read_only=True)
    vehicle_plate = serializers.SerializerMethodField()
    status_description = serializers.CharField(read_only=True)
    can_be_cancelled = serializers.BooleanField(read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "tracking_code",
            "client_id",
            "client_name",
            "material_id",
            "material_name",
            "quantity",
            "unit_price",
            "total_price",
            "delivery_address",
            "delivery_latitude",
            "delivery_longitude",
            "contact_phone",
            "requested_delivery_date",
            "notes",
            "status",
            "status_description",
            "can_be_cancelled",
            "vehicle_id",
            "vehicle_plate",
            "estimated_delivery_minutes",
            "assignment_justification",
            "created_at",
            "updated_at",
            "status_history",
        ]
        read_only_fields = fields

    def get_vehicle_plate(self, obj: Order) -> str | None:
        return obj.vehicle.plate if obj.vehicle_id else None


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order list (no nested relations)."""

    client_name = serializers.CharField(source="client.name", read_only=True)
    material_name = serializers.CharField(source="material.name", read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "tracking_code",
            "client_id",
            "client_name",
            "material_name",
            "quantity",
            "total_price",
            "status",
            "vehicle_id",
            "created_at",
        ]
        read_only_fields = fields


class VehicleScoreSerializer(serializers.Serializer):
    """Read serializer for one entry of an assignment ranking."""

    vehicle_id = serializers.IntegerField(source="vehicle.id")
    plate = serializers.CharField(source="vehicle.plate")
    capacity_m3 = serializers.DecimalField(
        source="vehicle.capacity_m3", max_digits=6, decimal_places=2
    )
    score = serializers.IntegerField()
    utilization = serializers.DecimalField(max_digits=6, decimal_places=4)
    distance_km = serializers.FloatField(allow_null=True)
    breakdown = serializers.ListField(child=serializers.DictField())
