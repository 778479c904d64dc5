from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone as dt_timezone
from decimal import Decimal
from typing import Iterable, Optional

import pytest
from django.contrib.auth import get_user_model
from freezegun import freeze_time
from rest_framework.test import APIClient

from modules.orders.constants import OrderItemType, OrderStatus
from modules.orders.models import Order, OrderItem
from modules.products.models import Product
from modules.promotions.constants import DayOfWeek, PromotionType
from modules.promotions.models import Promotion, PromotionWeeklyRule
from shared.domain.clock import FixedClock

User = get_user_model()

# Wednesday 2026-03-04 12:00 UTC (tests run with TIME_ZONE = "UTC")
NOW = datetime(2026, 3, 4, 12, 0, tzinfo=dt_timezone.utc)
TODAY = NOW.date()


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def api_client():
    """DRF APIClient for testing API endpoints."""
    return APIClient()


@pytest.fixture()
def api_client_with_correlation(api_client):
    """APIClient pre-configured with a known correlation ID header."""
    cid = "test-correlation-id-fixture"
    api_client.defaults["HTTP_X_REQUEST_ID"] = cid
    return api_client, cid


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def today():
    return TODAY


@pytest.fixture()
def fixed_clock():
    return FixedClock(NOW)


@pytest.fixture()
def frozen_now():
    """Pin wall-clock time (and so ``SystemClock``) to ``NOW``."""
    with freeze_time(NOW) as frozen:
        yield frozen


# ---------------------------------------------------------------------------
# Users and clients
# ---------------------------------------------------------------------------


@pytest.fixture()
def user():
    return User.objects.create_user(username="customer", password="testpass123", first_name="Carla")


@pytest.fixture()
def other_user():
    return User.objects.create_user(username="other", password="testpass123")


@pytest.fixture()
def staff_user():
    return User.objects.create_user(username="staff", password="testpass123", is_staff=True)


@pytest.fixture()
def auth_client(user):
    """APIClient force-authenticated as a regular customer."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture()
def other_client(other_user):
    client = APIClient()
    client.force_authenticate(user=other_user)
    return client


@pytest.fixture()
def staff_client(staff_user):
    """APIClient force-authenticated as staff."""
    client = APIClient()
    client.force_authenticate(user=staff_user)
    return client


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


@pytest.fixture()
def burger():
    return Product.objects.create(name="Classic Burger", price=Decimal("28.90"))


@pytest.fixture()
def fries():
    return Product.objects.create(name="Fries", price=Decimal("12.00"))


@pytest.fixture()
def inactive_product():
    return Product.objects.create(name="Seasonal Shake", price=Decimal("15.00"), is_active=False)


def _create_temporary_promotion(
    products: Iterable[Product],
    *,
    name: str = "Burger Week",
    price: Decimal = Decimal("35.00"),
    starts_at: Optional[date] = None,
    ends_at: Optional[date] = None,
    is_active: bool = True,
) -> Promotion:
    promotion = Promotion.objects.create(
        name=name,
        price=price,
        type=PromotionType.TEMPORARY,
        is_active=is_active,
        starts_at=starts_at if starts_at is not None else TODAY - timedelta(days=1),
        ends_at=ends_at if ends_at is not None else TODAY + timedelta(days=6),
    )
    promotion.products.set(list(products))
    return promotion


def _create_recurring_promotion(
    products: Iterable[Product],
    *,
    name: str = "Happy Hour",
    price: Decimal = Decimal("18.00"),
    windows: Iterable[tuple[str, time, time]] = ((DayOfWeek.WEDNESDAY, time(11, 0), time(14, 0)),),
    is_active: bool = True,
) -> Promotion:
    promotion = Promotion.objects.create(
        name=name,
        price=price,
        type=PromotionType.RECURRING,
        is_active=is_active,
    )
    promotion.products.set(list(products))
    PromotionWeeklyRule.objects.bulk_create(
        PromotionWeeklyRule(promotion=promotion, day_of_week=day, start_time=start, end_time=end)
        for day, start, end in windows
    )
    return promotion


@pytest.fixture()
def temporary_promotion(burger, fries):
    return _create_temporary_promotion([burger, fries])


@pytest.fixture()
def recurring_promotion(fries):
    return _create_recurring_promotion([fries])


@pytest.fixture()
def make_temporary_promotion():
    return _create_temporary_promotion


@pytest.fixture()
def make_recurring_promotion():
    return _create_recurring_promotion


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


def _create_order(
    user,
    *,
    product: Optional[Product] = None,
    quantity: int = 1,
    status: str = OrderStatus.PENDING,
    tip: Decimal = Decimal("0.00"),
    created_at: Optional[datetime] = None,
) -> Order:
    """Persist an order directly, bypassing the service rules."""
    unit_price = product.price if product is not None else Decimal("10.00")
    subtotal = unit_price * quantity
    order = Order.objects.create(
        user=user,
        status=status,
        subtotal=subtotal,
        tip=tip,
        total=subtotal + tip,
        created_at=created_at or NOW,
    )
    OrderItem.objects.create(
        order=order,
        item_type=OrderItemType.PRODUCT,
        product=product,
        item_name=product.name if product is not None else "Item",
        quantity=quantity,
        unit_price=unit_price,
        line_total=subtotal,
    )
    return order


@pytest.fixture()
def make_order():
    return _create_order
