"""Promotion validity.

Two levels of answer:

* ``is_valid_on`` works at day granularity and is what listings show as
  ``currently_valid``.  An active RECURRING promotion is always valid at
  this level.
* ``is_redeemable_at`` is used when an order redeems a promotion: on top
  of day validity, a RECURRING promotion needs a weekly window that
  contains the current local time.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Optional

from modules.promotions.constants import DayOfWeek, PromotionType
from modules.promotions.scheduling import TimeWindow, WeeklyRuleSet
from shared.domain.clock import to_local


def is_valid_on(
    *,
    is_active: bool,
    promotion_type: str,
    starts_at: Optional[date],
    ends_at: Optional[date],
    today: date,
) -> bool:
    if not is_active:
        return False
    if promotion_type == PromotionType.RECURRING:
        return True
    if starts_at is not None and starts_at > today:
        return False
    if ends_at is not None and ends_at < today:
        return False
    return True


def is_expired(*, promotion_type: str, ends_at: Optional[date], today: date) -> bool:
    """Only TEMPORARY promotions expire: ``ends_at`` strictly before today."""
    return promotion_type == PromotionType.TEMPORARY and ends_at is not None and ends_at < today


def is_rule_active_at(window: TimeWindow, moment: datetime, *, promotion_active: bool) -> bool:
    if not promotion_active:
        return False
    local = to_local(moment)
    return window.contains(DayOfWeek.from_weekday(local.weekday()), local.time())


def currently_valid(promotion: Any, today: date) -> bool:
    return is_valid_on(
        is_active=promotion.is_active,
        promotion_type=promotion.type,
        starts_at=promotion.starts_at,
        ends_at=promotion.ends_at,
        today=today,
    )


def is_redeemable_at(promotion: Any, moment: datetime) -> bool:
    """*promotion* must also expose ``rule_set()`` returning a ``WeeklyRuleSet``."""
    local = to_local(moment)
    if not currently_valid(promotion, local.date()):
        return False
    if promotion.type != PromotionType.RECURRING:
        return True
    rules: WeeklyRuleSet = promotion.rule_set()
    return rules.is_active_at(DayOfWeek.from_weekday(local.weekday()), local.time())
