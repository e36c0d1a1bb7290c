"""Vehicle DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

from modules.vehicles.models import Vehicle

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class UpdateVehicleStatusSerializer(serializers.Serializer):
    status = serializers.CharField()


class UpdateLocationSerializer(serializers.Serializer):
    latitude = serializers.DecimalField(max_digits=9, decimal_places=6)
    longitude = serializers.DecimalField(max_digits=9, decimal_places=6)


class AvailableVehiclesQuerySerializer(serializers.Serializer):
    capacity = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=0, required=False, default=0
    )


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class VehicleSerializer(serializers.ModelSerializer):
    minutes_since_last_fix = serializers.SerializerMethodField()
    location_is_stale = serializers.SerializerMethodField()

    class Meta:
        model = Vehicle
        fields = [
            "id",
            "plate",
            "brand",
            "model",
            "capacity_m3",
            "status",
            "last_latitude",
            "last_longitude",
            "last_location_at",
            "minutes_since_last_fix",
            "location_is_stale",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_minutes_since_last_fix(self, obj: Vehicle):
        return obj.minutes_since_last_fix()

    def get_location_is_stale(self, obj: Vehicle) -> bool:
        return obj.location_is_stale()


class VehicleSummarySerializer(serializers.ModelSerializer):
    """Compact vehicle view embedded in order responses."""

    class Meta:
        model = Vehicle
        fields = ["id", "plate", "capacity_m3", "status"]
        read_only_fields = fields


class RegisterVehicleSerializer(serializers.Serializer):
    plate = serializers.CharField(max_length=20)
    capacity_m3 = serializers.DecimalField(max_digits=6, decimal_places=2)
    brand = serializers.CharField(max_length=60, required=False, default="", allow_blank=True)
    model = serializers.CharField(max_length=60, required=False, default="", allow_blank=True)
