from django.contrib import admin

from modules.promotions.models import Promotion, PromotionWeeklyRule


class PromotionWeeklyRuleInline(admin.TabularInline):
    model = PromotionWeeklyRule
    extra = 0


@admin.register(Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "price", "is_active", "starts_at", "ends_at")
    list_filter = ("type", "is_active")
    search_fields = ("name",)
    filter_horizontal = ("products",)
    inlines = [PromotionWeeklyRuleInline]
