"""Django ORM implementation of the Order repository.

All write operations run inside ``transaction.atomic()`` so the Order
aggregate (Order + OrderItems) is persisted as a unit.  Status changes
lock the row with ``select_for_update()`` through ``get_for_update``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

import structlog
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count, QuerySet, Sum

from modules.orders.constants import ACTIVE_STATES, OrderStatus
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    def _queryset(self) -> QuerySet[Order]:
        return Order.objects.select_related("user").prefetch_related("items")

    # ------------------------------------------------------------------
    # Create (aggregate root + children)
    # ------------------------------------------------------------------

    @transaction.atomic
    def create(self, data: Dict[str, Any]) -> Order:
        payload = dict(data)
        items = payload.pop("items", [])

        order = Order(**payload)
        order.save()
        self._insert_items(order, items)

        logger.info("order.persisted", order_id=str(order.id), item_count=len(items))
        return self.get_by_id(order.id) or order

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_by_id(self, id: Any) -> Optional[Order]:
        """Returns ``None`` for non-existent or invalid IDs."""
        try:
            return self._queryset().filter(id=id).first()
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: Any) -> Optional[Order]:
        try:
            return (
                Order.objects.select_for_update(of=("self",))
                .select_related("user")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def list(self, filters: Optional[Dict[str, Any]] = None) -> List[Order]:
        queryset = self._queryset()
        if filters:
            queryset = queryset.filter(**filters)
        return list(queryset)

    def count_active_for_user(self, user_id: Any) -> int:
        return Order.objects.filter(user_id=user_id, status__in=ACTIVE_STATES).count()

    def list_active(self) -> List[Order]:
        return list(self._queryset().filter(status__in=ACTIVE_STATES).order_by("created_at"))

    def count_by_status(self) -> Dict[str, int]:
        rows = Order.objects.order_by().values("status").annotate(count=Count("id"))
        return {row["status"]: row["count"] for row in rows}

    def delivered_revenue(self) -> Decimal:
        result = Order.objects.filter(status=OrderStatus.DELIVERED).aggregate(revenue=Sum("total"))
        return result["revenue"] or Decimal("0.00")

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    @transaction.atomic
    def save(self, entity: Order, update_fields: Optional[Sequence[str]] = None) -> Order:
        if update_fields:
            entity.save(update_fields=list(update_fields))
        else:
            entity.save()
        logger.info("order.saved", order_id=str(entity.id), status=entity.status)
        return entity

    @transaction.atomic
    def replace_items(self, order: Order, items: List[Dict[str, Any]]) -> None:
        deleted, _ = OrderItem.objects.filter(order=order).delete()
        self._insert_items(order, items)
        logger.info(
            "order.items_replaced",
            order_id=str(order.id),
            deleted=deleted,
            inserted=len(items),
        )

    @transaction.atomic
    def delete(self, id: Any) -> bool:
        deleted, _ = Order.objects.filter(id=id).delete()
        if deleted:
            logger.info("order.deleted", order_id=str(id))
        return bool(deleted)

    @staticmethod
    def _insert_items(order: Order, items: List[Dict[str, Any]]) -> None:
        OrderItem.objects.bulk_create(
            [OrderItem(order=order, position=index, **item) for index, item in enumerate(items)]
        )
