"""Explicit promotion validation functions.

Each function returns a ``ValidationResult`` listing every problem it
found; ``PromotionService`` raises the matching error before touching
any state.
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from modules.promotions.constants import PromotionType
from modules.promotions.dtos import CreatePromotionDTO, UpdatePromotionDTO
from shared.domain.validation import ValidationResult


def check_products(product_ids: Optional[Sequence[object]]) -> ValidationResult:
    result = ValidationResult()
    if not product_ids:
        result.add("A promotion must include at least one product.")
    return result


def check_temporary_dates(
    starts_at: Optional[date],
    ends_at: Optional[date],
    today: Optional[date] = None,
    *,
    require_both: bool = True,
) -> ValidationResult:
    """Ordering of the two dates; ``ends_at`` is also checked against *today* when given."""
    result = ValidationResult()
    if require_both and (starts_at is None or ends_at is None):
        result.add("Temporary promotions require both starts_at and ends_at.")
    if starts_at is not None and ends_at is not None and starts_at > ends_at:
        result.add("starts_at must be on or before ends_at.")
    if today is not None and ends_at is not None and ends_at < today:
        result.add("ends_at cannot be in the past.")
    return result


def check_create_temporary(dto: CreatePromotionDTO, today: date) -> ValidationResult:
    result = check_temporary_dates(dto.starts_at, dto.ends_at, today)
    if dto.weekly_rules:
        result.add("Temporary promotions cannot have weekly rules.")
    return result


def check_create_recurring(dto: CreatePromotionDTO) -> ValidationResult:
    result = ValidationResult()
    if not dto.weekly_rules:
        result.add("Recurring promotions require at least one weekly rule.")
    if dto.starts_at is not None or dto.ends_at is not None:
        result.add("Recurring promotions cannot have starts_at or ends_at.")
    return result


def check_update_type_scope(dto: UpdatePromotionDTO, promotion_type: str) -> ValidationResult:
    """Dates only apply to TEMPORARY, weekly rules only to RECURRING."""
    result = ValidationResult()
    touches_dates = dto.supplied("starts_at") or dto.supplied("ends_at")
    if touches_dates and promotion_type != PromotionType.TEMPORARY:
        result.add("Dates can only be changed on temporary promotions.")
    if dto.supplied("weekly_rules") and promotion_type != PromotionType.RECURRING:
        result.add("Weekly rules can only be changed on recurring promotions.")
    return result


def check_update_recurring(dto: UpdatePromotionDTO) -> ValidationResult:
    result = ValidationResult()
    if dto.supplied("weekly_rules") and not dto.weekly_rules:
        result.add("Recurring promotions require at least one weekly rule.")
    return result
