"""Read-only product summary embedded in cart responses."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSummarySerializer(serializers.ModelSerializer):
    image = serializers.CharField(source="primary_image", read_only=True)

    class Meta:
        model = Product
        fields = ["id", "sku", "name", "price", "stock_quantity", "image", "status"]
        read_only_fields = fields
