import django_filters

from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    client = django_filters.NumberFilter(field_name="client_id")
    material = django_filters.NumberFilter(field_name="material_id")
    vehicle = django_filters.NumberFilter(field_name="vehicle_id")
    tracking_code = django_filters.CharFilter(
        field_name="tracking_code", lookup_expr="icontains"
    )
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "status",
            "client",
            "material",
            "vehicle",
            "tracking_code",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]
