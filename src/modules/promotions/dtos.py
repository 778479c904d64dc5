"""Promotion DTOs for the Service Layer.

Pydantic v2 frozen models; the contract between the DRF serializers and
``PromotionService``.  Type-specific rules (dates vs weekly rules) are
checked by ``validation.py`` so that every problem is reported together.

``UpdatePromotionDTO`` is a partial update: only fields present in
``model_fields_set`` are applied.
"""

from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.promotions.constants import PROMOTION_NAME_MAX_LENGTH, DayOfWeek, PromotionType


class WeeklyRuleDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_of_week: DayOfWeek
    start_time: time
    end_time: time


class CreatePromotionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, max_length=PROMOTION_NAME_MAX_LENGTH)
    description: str = ""
    price: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    type: PromotionType
    starts_at: Optional[date] = None
    ends_at: Optional[date] = None
    product_ids: List[UUID] = Field(default_factory=list)
    weekly_rules: List[WeeklyRuleDTO] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v


class UpdatePromotionDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=PROMOTION_NAME_MAX_LENGTH)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    starts_at: Optional[date] = None
    ends_at: Optional[date] = None
    active: Optional[bool] = None
    product_ids: Optional[List[UUID]] = None
    weekly_rules: Optional[List[WeeklyRuleDTO]] = None

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Name must not be blank.")
        return v

    def supplied(self, field_name: str) -> bool:
        """``True`` when the caller sent *field_name* with a non-null value."""
        return field_name in self.model_fields_set and getattr(self, field_name) is not None
