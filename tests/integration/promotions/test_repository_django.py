"""Integration tests for PromotionDjangoRepository.

Covers:
- Create: promotion, products and weekly rules persisted together.
- Read: malformed ids yield None; prefetching avoids N+1 queries.
- Name lookups: case-insensitive, active only, exclusion of self.
- Validity queries: currently valid, by product, expired.
- Weekly rule replacement and deletion.
"""

from __future__ import annotations

from datetime import time, timedelta
from decimal import Decimal

import pytest
from django.db import connection
from django.test.utils import CaptureQueriesContext

from modules.promotions.constants import DayOfWeek, PromotionType
from modules.promotions.models import Promotion, PromotionWeeklyRule
from modules.promotions.repositories.django_repository import PromotionDjangoRepository
from modules.promotions.scheduling import TimeWindow

pytestmark = pytest.mark.integration


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def repo():
    return PromotionDjangoRepository()


# ---------------------------------------------------------------------------
# Create / Read
# ---------------------------------------------------------------------------


class TestCreateAndRead:
    def test_create_persists_products_and_rules(self, repo, fries):
        promotion = repo.create(
            {
                "name": "Lunch Rings",
                "price": Decimal("18.00"),
                "type": PromotionType.RECURRING,
                "is_active": True,
                "products": [fries],
                "weekly_rules": [
                    TimeWindow(DayOfWeek.MONDAY, time(11, 0), time(14, 0)),
                    TimeWindow(DayOfWeek.TUESDAY, time(11, 0), time(14, 0)),
                ],
            }
        )

        assert list(promotion.products.all()) == [fries]
        assert promotion.weekly_rules.count() == 2

    def test_get_by_id_with_malformed_id(self, repo):
        assert repo.get_by_id("not-a-uuid") is None
        assert repo.get_for_update("not-a-uuid") is None

    def test_get_by_id_prefetches_relations(self, repo, recurring_promotion):
        promotion = repo.get_by_id(recurring_promotion.id)
        with CaptureQueriesContext(connection) as ctx:
            list(promotion.products.all())
            list(promotion.weekly_rules.all())
        assert len(ctx.captured_queries) == 0


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class TestNameLookups:
    def test_exists_active_with_name(self, repo, temporary_promotion):
        assert repo.exists_active_with_name("  BURGER week ")
        assert not repo.exists_active_with_name("Burger Week", exclude_id=temporary_promotion.id)

    def test_inactive_names_are_free(self, repo, make_temporary_promotion, burger):
        make_temporary_promotion([burger], name="Old Combo", is_active=False)
        assert not repo.exists_active_with_name("Old Combo")

    def test_search_active_by_name(self, repo, temporary_promotion, recurring_promotion):
        assert repo.search_active_by_name("hour") == [recurring_promotion]


class TestValidityQueries:
    def test_list_currently_valid(self, repo, today, temporary_promotion, recurring_promotion, make_temporary_promotion, burger):
        make_temporary_promotion(
            [burger], name="Future", starts_at=today + timedelta(days=2), ends_at=today + timedelta(days=3)
        )
        make_temporary_promotion([burger], name="Paused", is_active=False)

        valid = repo.list_currently_valid(today)

        assert set(valid) == {temporary_promotion, recurring_promotion}

    def test_boundaries_are_inclusive(self, repo, today, make_temporary_promotion, burger):
        single_day = make_temporary_promotion([burger], name="Flash", starts_at=today, ends_at=today)
        assert repo.list_currently_valid(today) == [single_day]

    def test_list_active_by_product_is_distinct(self, repo, temporary_promotion, burger):
        assert repo.list_active_by_product(burger.id) == [temporary_promotion]
        assert repo.list_active_by_product("bad") == []

    def test_list_expired(self, repo, today, temporary_promotion, make_temporary_promotion, burger):
        past = dict(starts_at=today - timedelta(days=5), ends_at=today - timedelta(days=1))
        active_expired = make_temporary_promotion([burger], name="Carnival", **past)
        inactive_expired = make_temporary_promotion([burger], name="Easter", is_active=False, **past)

        assert set(repo.list_expired(today)) == {active_expired, inactive_expired}
        assert repo.list_expired(today, active_only=True) == [active_expired]


# ---------------------------------------------------------------------------
# Write
# ---------------------------------------------------------------------------


class TestWrite:
    def test_replace_weekly_rules(self, repo, recurring_promotion):
        repo.replace_weekly_rules(
            recurring_promotion,
            [TimeWindow(DayOfWeek.FRIDAY, time(17, 0), time(19, 0))],
        )
        rules = list(PromotionWeeklyRule.objects.filter(promotion=recurring_promotion))
        assert [(r.day_of_week, r.start_time) for r in rules] == [(DayOfWeek.FRIDAY, time(17, 0))]

    def test_save_with_update_fields(self, repo, temporary_promotion):
        temporary_promotion.is_active = False
        temporary_promotion.name = "Not persisted"
        repo.save(temporary_promotion, update_fields=["is_active"])

        stored = Promotion.objects.get(id=temporary_promotion.id)
        assert stored.is_active is False
        assert stored.name == "Burger Week"

    def test_set_products(self, repo, temporary_promotion, fries):
        repo.set_products(temporary_promotion, [fries])
        assert list(temporary_promotion.products.all()) == [fries]

    def test_delete_removes_rules(self, repo, recurring_promotion, fries):
        assert repo.delete(recurring_promotion.id) is True
        assert not PromotionWeeklyRule.objects.exists()
        assert fries.promotions.count() == 0

    def test_delete_unknown(self, repo):
        assert repo.delete("018f0000-0000-7000-8000-000000000000") is False
