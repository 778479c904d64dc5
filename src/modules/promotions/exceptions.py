"""Promotion domain exceptions.

Each error subclasses one kind from ``shared.domain.errors``; the API
exception handler maps the kind to an HTTP status.
"""

from __future__ import annotations

from typing import Any

from shared.domain.errors import Conflict, Expired, NotFound, ValidationFailed


class PromotionNotFound(NotFound):
    """The requested promotion does not exist."""

    code = "promotion_not_found"

    def __init__(self, promotion_id: Any) -> None:
        self.promotion_id = promotion_id
        super().__init__(f"Promotion {promotion_id} not found.")


class PromotionMustHaveProducts(ValidationFailed):
    """A promotion must reference at least one product."""

    code = "promotion_must_have_products"


class InvalidTemporaryPromotion(ValidationFailed):
    """Dates of a temporary promotion are missing or inconsistent."""

    code = "invalid_temporary_promotion"


class InvalidRecurringPromotion(ValidationFailed):
    """Weekly rules of a recurring promotion are missing or forbidden."""

    code = "invalid_recurring_promotion"


class InvalidTimeWindow(ValidationFailed):
    """A weekly window does not start strictly before it ends."""

    code = "invalid_time_window"


class PromotionTypeMismatch(ValidationFailed):
    """The requested change does not apply to this promotion type."""

    code = "promotion_type_mismatch"


class InvalidPromotionImage(ValidationFailed):
    """The uploaded file is not an acceptable image."""

    code = "invalid_promotion_image"


class ConflictingWeeklyRules(Conflict):
    """Two weekly windows on the same day overlap."""

    code = "conflicting_weekly_rules"


class DuplicatePromotionName(Conflict):
    """Another active promotion already uses this name."""

    code = "duplicate_promotion_name"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"An active promotion named '{name}' already exists.")


class PromotionCannotBeDeleted(Conflict):
    """Only inactive promotions can be deleted."""

    code = "promotion_cannot_be_deleted"


class PromotionExpired(Expired):
    """A temporary promotion past its end date cannot be activated."""

    code = "promotion_expired"

    def __init__(self, promotion_id: Any) -> None:
        self.promotion_id = promotion_id
        super().__init__(f"Promotion {promotion_id} has expired and cannot be activated.")
