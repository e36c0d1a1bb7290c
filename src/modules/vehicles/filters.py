import django_filters

from modules.vehicles.models import Vehicle


class VehicleFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    plate = django_filters.CharFilter(field_name="plate", lookup_expr="icontains")
    min_capacity = django_filters.NumberFilter(
        field_name="capacity_m3", lookup_expr="gte"
    )
    max_capacity = django_filters.NumberFilter(
        field_name="capacity_m3", lookup_expr="lte"
    )

    class Meta:
        model = Vehicle
        fields = ["status", "plate", "min_capacity", "max_capacity"]
