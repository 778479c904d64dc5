"""Integration tests for OrderDjangoRepository.

Covers:
- Create: order and items persisted together, items kept in input order.
- Read: malformed ids yield None; items prefetched.
- Active counting, active board ordering, status counts and revenue.
- Item replacement.
"""

from __future__ import annotations

from datetime import timedelta
from decimal import Decimal

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from modules.orders.constants import OrderItemType, OrderStatus
from modules.orders.models import OrderItem
from modules.orders.repositories.django_repository import OrderDjangoRepository

pytestmark = pytest.mark.integration


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def repo():
    return OrderDjangoRepository()


def _product_line(product, quantity=1):
    return {
        "item_type": OrderItemType.PRODUCT,
        "product": product,
        "promotion": None,
        "item_name": product.name,
        "quantity": quantity,
        "unit_price": product.price,
        "line_total": product.price * quantity,
    }


def _promotion_line(promotion, quantity=1):
    return {
        "item_type": OrderItemType.PROMOTION,
        "product": None,
        "promotion": promotion,
        "item_name": promotion.name,
        "quantity": quantity,
        "unit_price": promotion.price,
        "line_total": promotion.price * quantity,
    }


# ---------------------------------------------------------------------------
# Create / Read
# ---------------------------------------------------------------------------


class TestCreateAndRead:
    def test_create_persists_items_in_order(self, repo, user, burger, temporary_promotion, now):
        order = repo.create(
            {
                "user": user,
                "status": OrderStatus.PENDING,
                "subtotal": Decimal("63.90"),
                "tip": Decimal("0.00"),
                "total": Decimal("63.90"),
                "created_at": now,
                "items": [_promotion_line(temporary_promotion), _product_line(burger)],
            }
        )

        assert order.created_at == now
        assert [item.item_name for item in order.items.all()] == ["Burger Week", "Classic Burger"]
        assert [item.position for item in order.items.all()] == [0, 1]

    def test_get_by_id_with_malformed_id(self, repo):
        assert repo.get_by_id("nope") is None
        assert repo.get_for_update("nope") is None

    def test_get_by_id_prefetches_items(self, repo, user, burger, make_order):
        order = repo.get_by_id(make_order(user, product=burger).id)
        with CaptureQueriesContext(connection) as ctx:
            list(order.items.all())
            _ = order.user.username
        assert len(ctx.captured_queries) == 0


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


class TestQueries:
    def test_count_active_for_user(self, repo, user, other_user, burger, make_order):
        make_order(user, product=burger)
        make_order(user, product=burger, status=OrderStatus.IN_PREPARATION)
        make_order(user, product=burger, status=OrderStatus.READY)
        make_order(other_user, product=burger)

        assert repo.count_active_for_user(user.pk) == 2

    def test_list_active_oldest_first(self, repo, user, burger, make_order, now):
        late = make_order(user, product=burger)
        early = make_order(user, product=burger, created_at=now - timedelta(minutes=10))
        make_order(user, product=burger, status=OrderStatus.DELIVERED)

        assert repo.list_active() == [early, late]

    def test_count_by_status_and_revenue(self, repo, user, burger, make_order):
        make_order(user, product=burger, status=OrderStatus.DELIVERED, tip=Decimal("2.00"))
        make_order(user, product=burger, status=OrderStatus.CANCELLED)

        assert repo.count_by_status() == {"DELIVERED": 1, "CANCELLED": 1}
        assert repo.delivered_revenue() == Decimal("30.90")

    def test_revenue_without_deliveries(self, repo):
        assert repo.delivered_revenue() == Decimal("0.00")


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


class TestWrite:
    def test_replace_items(self, repo, user, burger, fries, make_order):
        order = make_order(user, product=burger)

        repo.replace_items(order, [_product_line(fries, 2), _product_line(burger)])

        items = list(OrderItem.objects.filter(order=order))
        assert [(item.item_name, item.quantity) for item in items] == [("Fries", 2), ("Classic Burger", 1)]

    def test_save_with_update_fields(self, repo, user, burger, make_order):
        order = make_order(user, product=burger)
        order.status = OrderStatus.IN_PREPARATION
        order.tip = Decimal("9.99")

        repo.save(order, update_fields=["status"])

        order.refresh_from_db()
        assert order.status == OrderStatus.IN_PREPARATION
        assert order.tip == Decimal("0.00")
