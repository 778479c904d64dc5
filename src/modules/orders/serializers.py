"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from modules.orders.constants import OrderItemType, OrderStatus
from modules.orders.models import Order, OrderItem

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class OrderItemInputSerializer(serializers.Serializer):
    """One order line: exactly the id matching ``type`` must be present."""

    type = serializers.ChoiceField(choices=OrderItemType.choices)
    product_id = serializers.UUIDField(required=False, allow_null=True)
    promotion_id = serializers.UUIDField(required=False, allow_null=True)
    quantity = serializers.IntegerField(min_value=1)

    def validate(self, attrs):
        product_id = attrs.get("product_id")
        promotion_id = attrs.get("promotion_id")
        if attrs["type"] == OrderItemType.PRODUCT:
            if product_id is None:
                raise serializers.ValidationError({"product_id": "Required for PRODUCT items."})
            if promotion_id is not None:
                raise serializers.ValidationError({"promotion_id": "Not allowed for PRODUCT items."})
        else:
            if promotion_id is None:
                raise serializers.ValidationError({"promotion_id": "Required for PROMOTION items."})
            if product_id is not None:
                raise serializers.ValidationError({"product_id": "Not allowed for PROMOTION items."})
        return attrs


class OrderInputSerializer(serializers.Serializer):
    """Payload for creating an order and for replacing its items."""

    items = OrderItemInputSerializer(many=True)
    tip = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, default=Decimal("0.00"))

    def to_dto_payload(self) -> dict:
        data = self.validated_data
        return {
            "items": [
                {key: value for key, value in item.items() if value is not None}
                for item in data["items"]
            ],
            "tip": data.get("tip", Decimal("0.00")),
        }


class UpdateTipSerializer(serializers.Serializer):
    tip = serializers.DecimalField(max_digits=10, decimal_places=2)


class UpdateStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=OrderStatus.choices)


class UpdateEstimatedTimeSerializer(serializers.Serializer):
    estimated_time = serializers.CharField(allow_blank=True, trim_whitespace=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class OrderItemSerializer(serializers.ModelSerializer):
    """Line item with the price and name frozen at purchase time."""

    class Meta:
        model = OrderItem
        fields = [
            "id",
            "item_type",
            "product_id",
            "promotion_id",
            "item_name",
            "quantity",
            "unit_price",
            "line_total",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "status",
            "subtotal",
            "tip",
            "total",
            "estimated_time",
            "created_at",
            "updated_at",
            "delivered_at",
            "canceled_at",
            "items",
        ]
        read_only_fields = fields


class OrderListSerializer(serializers.ModelSerializer):
    """Lightweight serializer for order lists (no nested items)."""

    class Meta:
        model = Order
        fields = [
            "id",
            "user_id",
            "status",
            "total",
            "estimated_time",
            "created_at",
        ]
        read_only_fields = fields


class OrderStatisticsSerializer(serializers.Serializer):
    total_orders = serializers.IntegerField()
    active_orders = serializers.IntegerField()
    by_status = serializers.DictField(child=serializers.IntegerField())
    delivered_revenue = serializers.DecimalField(max_digits=12, decimal_places=2)
