"""Order domain exceptions.

Each error subclasses one kind from ``shared.domain.errors``; the API
exception handler maps the kind to an HTTP status.
"""

from __future__ import annotations

from typing import Any

from shared.domain.errors import (
    AccessDenied,
    CannotModify,
    Conflict,
    InvalidTransition,
    NotFound,
    ValidationFailed,
)


class OrderNotFound(NotFound):
    """The requested order does not exist."""

    code = "order_not_found"

    def __init__(self, order_id: Any) -> None:
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found.")


class EmptyOrder(ValidationFailed):
    """An order must contain at least one item."""

    code = "empty_order"


class InvalidEstimatedTime(ValidationFailed):
    """The estimated time is not a ``MM:SS`` value."""

    code = "invalid_estimated_time"


class InvalidTip(ValidationFailed):
    """The tip must be zero or positive."""

    code = "invalid_tip"


class ProductNotAvailable(ValidationFailed):
    """A product referenced by an item is missing or inactive."""

    code = "product_not_available"


class PromotionNotAvailable(ValidationFailed):
    """A promotion referenced by an item is missing or not redeemable now."""

    code = "promotion_not_available"


class ActiveOrderLimitReached(Conflict):
    """The user already has the maximum number of active orders."""

    code = "active_order_limit_reached"


class InvalidOrderTransition(InvalidTransition):
    """The requested status change is not in the transition table."""

    code = "invalid_order_transition"

    def __init__(self, from_status: str, to_status: str) -> None:
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot transition order from {from_status} to {to_status}.")


class OrderCannotBeModified(CannotModify):
    """Items or tip can no longer be edited."""

    code = "order_cannot_be_modified"


class OrderCannotBeCancelled(CannotModify):
    """The order is too far along (or already closed) to be cancelled."""

    code = "order_cannot_be_cancelled"


class OrderAccessDenied(AccessDenied):
    """The order belongs to another user."""

    code = "order_access_denied"

    def __init__(self, order_id: Any) -> None:
        self.order_id = order_id
        super().__init__(f"You do not have access to order {order_id}.")
