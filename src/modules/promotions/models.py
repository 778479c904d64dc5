"""Promotion and PromotionWeeklyRule models.

Business rules implemented:
- Price must be greater than zero.
- TEMPORARY promotions carry ``starts_at``/``ends_at``; RECURRING ones
  carry weekly rules instead (enforced at service layer).
- ``type`` never changes after creation.
- Weekly rules are owned by one promotion and replaced as a whole by the
  repository (delete-then-insert), never through ORM cascades.
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import BaseModel
from modules.promotions.constants import PROMOTION_NAME_MAX_LENGTH, DayOfWeek, PromotionType
from modules.promotions.scheduling import TimeWindow, WeeklyRuleSet


class Promotion(BaseModel):
    name = models.CharField(max_length=PROMOTION_NAME_MAX_LENGTH)
    description = models.TextField(blank=True, default="")
    image_url = models.CharField(max_length=500, blank=True, default="")
    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    type = models.CharField(max_length=20, choices=PromotionType.choices)
    is_active = models.BooleanField(default=True)
    starts_at = models.DateField(null=True, blank=True)
    ends_at = models.DateField(null=True, blank=True)
    products = models.ManyToManyField(
        "products.Product",
        related_name="promotions",
    )

    class Meta:
        db_table = "promotions"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["type", "is_active"], name="promotions_type_active_idx"),
            models.Index(fields=["ends_at"], name="promotions_ends_at_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="promotions_price_positive",
            ),
            models.CheckConstraint(
                condition=(
                    models.Q(starts_at__isnull=True)
                    | models.Q(ends_at__isnull=True)
                    | models.Q(starts_at__lte=models.F("ends_at"))
                ),
                name="promotions_dates_ordered",
            ),
        ]

    @property
    def is_recurring(self) -> bool:
        return self.type == PromotionType.RECURRING

    def rule_set(self) -> WeeklyRuleSet:
        return WeeklyRuleSet.from_rules(self.weekly_rules.all())

    def __str__(self) -> str:
        return f"{self.name} ({self.type})"


class PromotionWeeklyRule(BaseModel):
    promotion = models.ForeignKey(
        Promotion,
        on_delete=models.CASCADE,
        related_name="weekly_rules",
    )
    day_of_week = models.CharField(max_length=10, choices=DayOfWeek.choices)
    start_time = models.TimeField()
    end_time = models.TimeField()

    class Meta:
        db_table = "promotion_weekly_rules"
        ordering = ["day_of_week", "start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="weekly_rules_start_before_end",
            ),
        ]

    @property
    def window(self) -> TimeWindow:
        return TimeWindow.from_rule(self)

    def __str__(self) -> str:
        return f"{self.day_of_week} {self.window}"
