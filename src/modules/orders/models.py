"""Order and OrderItem models.

Business rules implemented:
- Status transitions follow ``VALID_TRANSITIONS`` (enforced by
  ``OrderStateMachine`` at service layer).
- ``subtotal`` is the sum of item ``line_total``; ``total = subtotal + tip``.
- ``tip`` is never negative.
- ``delivered_at`` / ``canceled_at`` are stamped on entering DELIVERED /
  CANCELLED.
- OrderItem freezes ``unit_price``, ``line_total`` and ``item_name`` at
  purchase time; later catalog changes never touch historical orders.
- An item references exactly one of product / promotion, matching
  ``item_type`` (database check constraint).
- ``created_at`` is set by the service from its clock so the
  modification window is deterministic.
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel
from modules.orders.constants import (
    ACTIVE_STATES,
    DEFAULT_ESTIMATED_TIME,
    TERMINAL_STATES,
    OrderItemType,
    OrderStatus,
)


class Order(BaseModel):
    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    tip = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    estimated_time = models.CharField(max_length=5, default=DEFAULT_ESTIMATED_TIME)
    delivered_at = models.DateTimeField(null=True, blank=True)
    canceled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["user", "status"], name="orders_user_status_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=models.Q(tip__gte=0), name="orders_tip_non_negative"),
        ]

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATES

    def __str__(self) -> str:
        return f"Order {self.id} ({self.status})"


class OrderItem(BaseModel):
    """Line item frozen at purchase time.

    ``product`` and ``promotion`` use SET_NULL so deleting catalog entries
    never erases order history; ``item_name`` keeps the label.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    item_type = models.CharField(max_length=10, choices=OrderItemType.choices)
    product = models.ForeignKey(
        "products.Product",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    promotion = models.ForeignKey(
        "promotions.Promotion",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    item_name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    line_total = models.DecimalField(max_digits=10, decimal_places=2)
    position = models.PositiveSmallIntegerField(default=0)

    class Meta:
        db_table = "order_items"
        ordering = ["position"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gte=1), name="order_items_quantity_positive"),
            models.CheckConstraint(
                condition=(
                    models.Q(item_type=OrderItemType.PRODUCT, promotion__isnull=True)
                    | models.Q(item_type=OrderItemType.PROMOTION, product__isnull=True)
                ),
                name="order_items_single_reference",
            ),
        ]

    @property
    def reference_id(self):
        return self.product_id if self.item_type == OrderItemType.PRODUCT else self.promotion_id

    def __str__(self) -> str:
        return f"{self.quantity}x {self.item_name}"
