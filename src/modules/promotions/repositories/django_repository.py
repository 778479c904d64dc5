"""Django ORM implementation of the Promotion repository.

Every read prefetches ``products`` and ``weekly_rules`` so serializers
and validity checks never trigger N+1 queries.  Missing or malformed
ids yield ``None``; the service decides which domain error to raise.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Q, QuerySet

from modules.products.models import Product
from modules.promotions.constants import PromotionType
from modules.promotions.models import Promotion, PromotionWeeklyRule
from modules.promotions.repositories.interfaces import IPromotionRepository
from modules.promotions.scheduling import TimeWindow

logger = structlog.get_logger(__name__)


class PromotionDjangoRepository(IPromotionRepository):
    """Concrete Promotion repository backed by Django ORM."""

    def _queryset(self) -> QuerySet[Promotion]:
        return Promotion.objects.prefetch_related("products", "weekly_rules")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Promotion:
        payload = dict(data)
        products: List[Product] = list(payload.pop("products", []))
        windows: List[TimeWindow] = list(payload.pop("weekly_rules", []))

        promotion = Promotion(**payload)
        promotion.save()
        promotion.products.set(products)
        self._insert_rules(promotion, windows)

        logger.info(
            "promotion.persisted",
            promotion_id=str(promotion.id),
            product_count=len(products),
            rule_count=len(windows),
        )
        return self.get_by_id(promotion.id) or promotion

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Promotion]:
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Promotion]:
        try:
            return Promotion.objects.select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Promotion]:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def exists_active_with_name(self, name: str, exclude_id: Any = None) -> bool:
        queryset = Promotion.objects.filter(is_active=True, name__iexact=name.strip())
        if exclude_id is not None:
            queryset = queryset.exclude(id=exclude_id)
        return queryset.exists()

    def search_active_by_name(self, name: str) -> List[Promotion]:
        return list(self._queryset().filter(is_active=True, name__icontains=name.strip()))

    def list_currently_valid(self, today: date) -> List[Promotion]:
        temporary_in_range = (
            Q(type=PromotionType.TEMPORARY)
            & (Q(starts_at__isnull=True) | Q(starts_at__lte=today))
            & (Q(ends_at__isnull=True) | Q(ends_at__gte=today))
        )
        return list(
            self._queryset().filter(Q(is_active=True) & (Q(type=PromotionType.RECURRING) | temporary_in_range))
        )

    def list_active_by_product(self, product_id: Any) -> List[Promotion]:
        try:
            return list(self._queryset().filter(is_active=True, products__id=product_id).distinct())
        except (ValueError, ValidationError):
            return []

    def list_expired(self, today: date, active_only: bool = False) -> List[Promotion]:
        queryset = self._queryset().filter(type=PromotionType.TEMPORARY, ends_at__lt=today)
        if active_only:
            queryset = queryset.filter(is_active=True)
        return list(queryset)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Promotion, update_fields: Optional[Sequence[str]] = None) -> Promotion:
        if update_fields:
            entity.save(update_fields=list(update_fields))
        else:
            entity.save()
        logger.info("promotion.saved", promotion_id=str(entity.id))
        return entity

    @transaction.atomic
    def set_products(self, promotion: Promotion, products: Iterable[Product]) -> None:
        promotion.products.set(list(products))

    @transaction.atomic
    def replace_weekly_rules(self, promotion: Promotion, windows: Iterable[TimeWindow]) -> None:
        deleted, _ = PromotionWeeklyRule.objects.filter(promotion=promotion).delete()
        inserted = self._insert_rules(promotion, windows)
        logger.info(
            "promotion.weekly_rules_replaced",
            promotion_id=str(promotion.id),
            deleted=deleted,
            inserted=inserted,
        )

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        promotion = self.get_by_id(id)
        if not promotion:
            return False
        PromotionWeeklyRule.objects.filter(promotion=promotion).delete()
        promotion.products.clear()
        promotion.delete()
        logger.info("promotion.deleted", promotion_id=str(id))
        return True

    @staticmethod
    def _insert_rules(promotion: Promotion, windows: Iterable[TimeWindow]) -> int:
        rules = [
            PromotionWeeklyRule(
                promotion=promotion,
                day_of_week=window.day,
                start_time=window.start,
                end_time=window.end,
            )
            for window in windows
        ]
        PromotionWeeklyRule.objects.bulk_create(rules)
        return len(rules)
