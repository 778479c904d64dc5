"""Promotion DRF serializers for API input/output.

Input serializers validate the payload shape; the view turns
``validated_data`` into Pydantic DTOs for the Service Layer.  Output
serializers compute ``currently_valid`` and ``active_now`` against the
``now`` instant passed in the serializer context.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from rest_framework import serializers

from modules.products.serializers import ProductSummarySerializer
from modules.promotions.constants import PROMOTION_NAME_MAX_LENGTH, DayOfWeek, PromotionType
from modules.promotions.models import Promotion, PromotionWeeklyRule
from modules.promotions.validity import currently_valid, is_rule_active_at
from shared.domain.clock import to_local

# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class WeeklyRuleInputSerializer(serializers.Serializer):
    day_of_week = serializers.ChoiceField(choices=DayOfWeek.choices)
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()


class CreatePromotionSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=PROMOTION_NAME_MAX_LENGTH)
    description = serializers.CharField(required=False, default="", allow_blank=True)
    price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=Decimal("0.01"))
    type = serializers.ChoiceField(choices=PromotionType.choices)
    starts_at = serializers.DateField(required=False, allow_null=True, default=None)
    ends_at = serializers.DateField(required=False, allow_null=True, default=None)
    product_ids = serializers.ListField(child=serializers.UUIDField(), required=False, default=list)
    weekly_rules = WeeklyRuleInputSerializer(many=True, required=False, default=list)


class UpdatePromotionSerializer(serializers.Serializer):
    """Every field optional; absent fields are left untouched."""

    name = serializers.CharField(max_length=PROMOTION_NAME_MAX_LENGTH, required=False)
    description = serializers.CharField(required=False, allow_blank=True)
    price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=Decimal("0.01"), required=False
    )
    starts_at = serializers.DateField(required=False, allow_null=True)
    ends_at = serializers.DateField(required=False, allow_null=True)
    active = serializers.BooleanField(required=False)
    product_ids = serializers.ListField(child=serializers.UUIDField(), required=False)
    weekly_rules = WeeklyRuleInputSerializer(many=True, required=False)


class PromotionImageSerializer(serializers.Serializer):
    image = serializers.FileField()


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class _ClockContextMixin:
    def _now(self) -> datetime:
        return self.context["now"]


class WeeklyRuleSerializer(_ClockContextMixin, serializers.ModelSerializer):
    active_now = serializers.SerializerMethodField()

    class Meta:
        model = PromotionWeeklyRule
        fields = ["id", "day_of_week", "start_time", "end_time", "active_now"]
        read_only_fields = fields

    def get_active_now(self, obj: PromotionWeeklyRule) -> bool:
        return is_rule_active_at(obj.window, self._now(), promotion_active=obj.promotion.is_active)


class PromotionSummarySerializer(_ClockContextMixin, serializers.ModelSerializer):
    currently_valid = serializers.SerializerMethodField()

    class Meta:
        model = Promotion
        fields = ["id", "name", "image_url", "price", "type", "is_active", "currently_valid"]
        read_only_fields = fields

    def get_currently_valid(self, obj: Promotion) -> bool:
        return currently_valid(obj, to_local(self._now()).date())


class PromotionDetailSerializer(PromotionSummarySerializer):
    products = ProductSummarySerializer(many=True, read_only=True)
    weekly_rules = WeeklyRuleSerializer(many=True, read_only=True)

    class Meta(PromotionSummarySerializer.Meta):
        fields = PromotionSummarySerializer.Meta.fields + [
            "description",
            "starts_at",
            "ends_at",
            "products",
            "weekly_rules",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class SweepResultSerializer(serializers.Serializer):
    deactivated = serializers.IntegerField()
