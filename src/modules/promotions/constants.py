"""Promotion domain constants."""

from django.db import models


class PromotionType(models.TextChoices):
    TEMPORARY = "TEMPORARY", "Temporary"
    RECURRING = "RECURRING", "Recurring"


class DayOfWeek(models.TextChoices):
    MONDAY = "MONDAY", "Monday"
    TUESDAY = "TUESDAY", "Tuesday"
    WEDNESDAY = "WEDNESDAY", "Wednesday"
    THURSDAY = "THURSDAY", "Thursday"
    FRIDAY = "FRIDAY", "Friday"
    SATURDAY = "SATURDAY", "Saturday"
    SUNDAY = "SUNDAY", "Sunday"

    @classmethod
    def from_weekday(cls, weekday: int) -> "DayOfWeek":
        """Map ``date.weekday()`` (Monday == 0) onto the enum."""
        return list(cls)[weekday]


PROMOTION_NAME_MAX_LENGTH = 120

IMAGE_MAX_SIZE_BYTES = 5 * 1024 * 1024

IMAGE_ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
)

IMAGE_UPLOAD_FOLDER = "promotions"
