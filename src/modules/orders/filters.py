import django_filters

from modules.orders.constants import OrderStatus
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    status = django_filters.ChoiceFilter(choices=OrderStatus.choices)
    search = django_filters.CharFilter(
        field_name="order_number", lookup_expr="icontains"
    )

    class Meta:
        model = Order
        fields = ["status", "search"]
