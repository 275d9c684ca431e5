"""Cart DRF serializers."""

from __future__ import annotations

from rest_framework import serializers

from modules.cart.models import CartLine
from modules.products.serializers import ProductSummarySerializer

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class ColorSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=50)
    hex = serializers.RegexField(r"^#[0-9A-Fa-f]{6}$")


class AddCartLineSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1, default=1)
    size = serializers.CharField(max_length=32)
    color = ColorSerializer(required=False, allow_null=True, default=None)


class UpdateCartLineSerializer(serializers.Serializer):
    """``quantity <= 0`` removes the line."""

    quantity = serializers.IntegerField()


# ---------------------------------------------------------------------------
# Output Serializers
# ---------------------------------------------------------------------------


class CartLineSerializer(serializers.ModelSerializer):
    product = ProductSummarySerializer(read_only=True)
    line_total = serializers.DecimalField(
        max_digits=12, decimal_places=2, read_only=True
    )

    class Meta:
        model = CartLine
        fields = ["id", "product", "quantity", "size", "color", "line_total"]
        read_only_fields = fields


class CartSerializer(serializers.Serializer):
    """Renders a ``CartSummary``."""

    id = serializers.UUIDField(source="cart.id", read_only=True)
    lines = CartLineSerializer(many=True, read_only=True)
    subtotal = serializers.DecimalField(max_digits=12, decimal_places=2)
    item_count = serializers.IntegerField()
    delivery_fee = serializers.DecimalField(max_digits=12, decimal_places=2)
    free_delivery_remaining = serializers.DecimalField(
        max_digits=12, decimal_places=2
    )
