"""Stock DRF serializers for API input/output."""

from __future__ import annotations

from rest_framework import serializers

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class StockIncreaseSerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)


class StockAdjustmentSerializer(serializers.Serializer):
    available_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )
    minimum_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False
    )


class AvailabilityQuerySerializer(serializers.Serializer):
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2)


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class InventoryItemSerializer(serializers.Serializer):
    """Read serializer for ``services.InventoryItem``."""

    material_id = serializers.IntegerField(source="record.material_id")
    material_name = serializers.CharField(source="record.material.name")
    unit = serializers.CharField(source="record.material.unit")
    price_per_unit = serializers.DecimalField(
        source="record.material.price_per_unit", max_digits=10, decimal_places=2
    )
    available_quantity = serializers.DecimalField(
        source="record.available_quantity", max_digits=12, decimal_places=2
    )
    minimum_quantity = serializers.DecimalField(
        source="record.minimum_quantity", max_digits=12, decimal_places=2
    )
    level = serializers.CharField()
    stock_percentage = serializers.IntegerField()
    has_alert = serializers.BooleanField()
    recommended_action = serializers.CharField()
    days_remaining = serializers.IntegerField(allow_null=True)
    updated_by = serializers.IntegerField(source="record.updated_by_id", allow_null=True)
    last_updated = serializers.DateTimeField(source="record.last_updated")


class StockRecordSerializer(serializers.Serializer):
    material_id = serializers.IntegerField()
    available_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    minimum_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    level = serializers.CharField()
    stock_percentage = serializers.IntegerField()
    updated_by = serializers.IntegerField(source="updated_by_id", allow_null=True)
    last_updated = serializers.DateTimeField()


class StockAlertSerializer(serializers.Serializer):
    type = serializers.CharField()
    message = serializers.CharField()
    priority = serializers.CharField()


class AvailabilitySerializer(serializers.Serializer):
    material_id = serializers.IntegerField()
    available = serializers.BooleanField()
    current_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    required_quantity = serializers.DecimalField(max_digits=12, decimal_places=2)
    remaining_quantity = serializers.DecimalField(
        max_digits=12, decimal_places=2, allow_null=True
    )
    recommendation = serializers.CharField()
