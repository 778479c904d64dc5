"""Order domain constants.

Status choices and the transition table of the order state machine.
"""

from datetime import timedelta

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    IN_PREPARATION = "IN_PREPARATION", "In preparation"
    READY = "READY", "Ready"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class OrderItemType(models.TextChoices):
    PRODUCT = "PRODUCT", "Product"
    PROMOTION = "PROMOTION", "Promotion"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.PENDING: {OrderStatus.IN_PREPARATION, OrderStatus.CANCELLED},
    OrderStatus.IN_PREPARATION: {OrderStatus.READY, OrderStatus.CANCELLED},
    OrderStatus.READY: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

TERMINAL_STATES: set[str] = {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

# Orders counted against the per-user limit.
ACTIVE_STATES: set[str] = {OrderStatus.PENDING, OrderStatus.IN_PREPARATION}

# A user cancels only before the order is ready.
USER_CANCELLABLE_STATES: set[str] = {OrderStatus.PENDING, OrderStatus.IN_PREPARATION}

DEFAULT_MAX_ACTIVE_ORDERS = 3

DEFAULT_MODIFICATION_GRACE = timedelta(minutes=5)

DEFAULT_ESTIMATED_TIME = "30:00"

ESTIMATED_TIME_PATTERN = r"[0-9]{2}:[0-9]{2}"
