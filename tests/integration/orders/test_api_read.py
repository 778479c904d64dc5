"""Integration tests for Order read endpoints.

Covers:
- List: customers see their own orders, staff see every order.
- Filters: status, user, date range; pagination envelope.
- Retrieve: owner and staff allowed, other customers 403, unknown 404.
"""

from __future__ import annotations

from datetime import timedelta

import pytest

from modules.orders.constants import OrderStatus

pytestmark = pytest.mark.integration

BASE_URL = "/api/v1/orders/"


@pytest.fixture()
def orders(user, other_user, burger, make_order, now):
    return {
        "mine_pending": make_order(user, product=burger),
        "mine_delivered": make_order(
            user, product=burger, status=OrderStatus.DELIVERED, created_at=now - timedelta(days=3)
        ),
        "theirs": make_order(other_user, product=burger),
    }


def _ids(response):
    return {item["id"] for item in response.json()["results"]}


class TestListOrders:
    def test_customer_sees_only_own_orders(self, auth_client, orders):
        response = auth_client.get(BASE_URL)

        assert response.status_code == 200
        assert _ids(response) == {str(orders["mine_pending"].id), str(orders["mine_delivered"].id)}
        assert response.json()["count"] == 2

    def test_staff_sees_all_orders(self, staff_client, orders):
        response = staff_client.get(BASE_URL)
        assert response.json()["count"] == 3

    def test_list_items_are_lightweight(self, auth_client, orders):
        item = auth_client.get(BASE_URL).json()["results"][0]
        assert set(item) == {"id", "user_id", "status", "total", "estimated_time", "created_at"}

    def test_filter_by_status(self, auth_client, orders):
        response = auth_client.get(BASE_URL, {"status": OrderStatus.DELIVERED})
        assert _ids(response) == {str(orders["mine_delivered"].id)}

    def test_staff_filter_by_user(self, staff_client, orders, other_user):
        response = staff_client.get(BASE_URL, {"user": other_user.pk})
        assert _ids(response) == {str(orders["theirs"].id)}

    def test_filter_by_date_range(self, auth_client, orders, today):
        recent = auth_client.get(BASE_URL, {"start_date": (today - timedelta(days=1)).isoformat()})
        older = auth_client.get(BASE_URL, {"end_date": (today - timedelta(days=2)).isoformat()})

        assert _ids(recent) == {str(orders["mine_pending"].id)}
        assert _ids(older) == {str(orders["mine_delivered"].id)}

    def test_newest_first(self, auth_client, orders):
        results = auth_client.get(BASE_URL).json()["results"]
        assert [r["id"] for r in results] == [str(orders["mine_pending"].id), str(orders["mine_delivered"].id)]

    def test_unauthenticated(self, api_client):
        assert api_client.get(BASE_URL).status_code == 401


class TestRetrieveOrder:
    def test_owner_gets_detail_with_items(self, auth_client, orders):
        order = orders["mine_pending"]
        response = auth_client.get(f"{BASE_URL}{order.id}/")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == str(order.id)
        assert [i["item_name"] for i in data["items"]] == ["Classic Burger"]

    def test_staff_can_read_any_order(self, staff_client, orders):
        response = staff_client.get(f"{BASE_URL}{orders['theirs'].id}/")
        assert response.status_code == 200

    def test_other_customer_denied(self, auth_client, orders):
        response = auth_client.get(f"{BASE_URL}{orders['theirs'].id}/")
        assert response.status_code == 403
        assert response.json()["errors"][0]["code"] == "order_access_denied"

    def test_unknown_order(self, auth_client):
        response = auth_client.get(f"{BASE_URL}not-a-uuid/")
        assert response.status_code == 404
        assert response.json()["errors"][0]["code"] == "order_not_found"
