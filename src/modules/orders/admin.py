from django.contrib import admin

from modules.orders.models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ("item_type", "product", "promotion", "item_name", "quantity", "unit_price", "line_total")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "status", "total", "estimated_time", "created_at")
    list_filter = ("status",)
    readonly_fields = ("subtotal", "tip", "total", "delivered_at", "canceled_at")
    inlines = [OrderItemInline]
