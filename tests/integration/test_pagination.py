"""Integration tests for standardized pagination."""

from __future__ import annotations

from decimal import Decimal

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.integration


@pytest.fixture()
def order_batch(user):
    """Create a batch of delivered orders for pagination tests."""
    orders = [
        Order(user=user, status=OrderStatus.DELIVERED, subtotal=Decimal("9.99"), total=Decimal("9.99"))
        for _ in range(120)
    ]
    Order.objects.bulk_create(orders)
    return orders


class TestPagination:
    def test_default_page_size(self, auth_client, order_batch):
        response = auth_client.get("/api/v1/orders/")
        assert response.status_code == 200
        assert len(response.data["results"]) == 20
        assert response.data["count"] == 120
        assert response.data["next"] is not None
        assert response.data["previous"] is None

    def test_custom_page_size(self, auth_client, order_batch):
        response = auth_client.get("/api/v1/orders/?page_size=50")
        assert response.status_code == 200
        assert len(response.data["results"]) == 50
        assert response.data["next"] is not None

    def test_max_page_size(self, auth_client, order_batch):
        response = auth_client.get("/api/v1/orders/?page_size=1000")
        assert response.status_code == 200
        assert len(response.data["results"]) == 100
        assert response.data["next"] is not None

    def test_last_page(self, auth_client, order_batch):
        response = auth_client.get("/api/v1/orders/?page=6")
        assert response.status_code == 200
        assert len(response.data["results"]) == 20
        assert response.data["next"] is None
