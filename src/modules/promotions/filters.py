import django_filters

from modules.promotions.constants import PromotionType
from modules.promotions.models import Promotion


class PromotionFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(field_name="type", choices=PromotionType.choices)
    active = django_filters.BooleanFilter(field_name="is_active")
    name = django_filters.CharFilter(field_name="name", lookup_expr="icontains")

    class Meta:
        model = Promotion
        fields = ["type", "active", "name"]
