"""Product representations embedded in promotion and order responses."""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ["id", "name", "price", "image_url", "is_active"]
        read_only_fields = fields
