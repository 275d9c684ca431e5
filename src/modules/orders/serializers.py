"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).  Business logic
lives in the Service Layer, which receives Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.orders.constants import DeliveryOption, PaymentMethod
from modules.orders.models import Order, OrderItem, OrderStatusHistory

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ShippingAddressSerializer(serializers.Serializer):
    label = serializers.CharField(max_length=50, required=False, default="", allow_blank=True)
    street = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(
        max_length=20, required=False, default="", allow_blank=True
    )


class CheckoutSerializer(serializers.Serializer):
    """Validates the checkout request payload."""

    shipping_address = ShippingAddressSerializer()
    delivery_option = serializers.ChoiceField(
        choices=DeliveryOption.choices, default=DeliveryOption.STANDARD
    )
    payment_method = serializers.ChoiceField(
        choices=PaymentMethod.choices, default=PaymentMethod.COD
    )
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class CancelOrderSerializer(serializers.Serializer):
    notes = serializers.CharField(required=False, default="", allow_blank=True)


class ChangeStatusSerializer(serializers.Serializer):
    """``status`` is validated by the service so unknown values map to ``invalid_status``."""

    status = serializers.CharField()
    notes = serializers.CharField(required=False, default="", allow_blank=True)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Frozen line snapshot."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "product_id",
            "name",
            "image",
            "unit_price",
            "quantity",
            "size",
            "color",
            "subtotal",
        ]
        read_only_fields = fields


class StatusHistorySerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderStatusHistory
        fields = ["id", "old_status", "new_status", "notes", "created_at"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with nested items and history."""

    items = OrderItemSerializer(many=True, read_only=True)
    status_history = StatusHistorySerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "shipping_address",
            "delivery_option",
            "payment_method",
            "payment_status",
            "subtotal",
            "delivery_fee",
            "total",
            "notes",
            "delivered_at",
            "cancelled_at",
            "created_at",
            "updated_at",
            "items",
            "status_history",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists."""

    item_count = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "user_id",
            "status",
            "payment_method",
            "payment_status",
            "total",
            "item_count",
            "created_at",
        ]
        read_only_fields = fields

    def get_item_count(self, obj: Order) -> int:
        return sum(item.quantity for item in obj.items.all())
