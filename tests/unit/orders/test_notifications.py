"""Unit tests for order notification routing and adapters."""

from __future__ import annotations

import json
from datetime import datetime, timezone as dt_timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.notifications import (
    LoggingOrderNotifier,
    NotificationType,
    OrderNotificationService,
    RedisOrderNotifier,
    get_order_notifier,
)

pytestmark = pytest.mark.unit


@pytest.fixture()
def order():
    user = SimpleNamespace(pk=7, get_full_name=lambda: "", get_username=lambda: "carla")
    return SimpleNamespace(
        id=uuid4(),
        user=user,
        status=OrderStatus.READY,
        total=Decimal("29.90"),
        estimated_time="10:00",
        created_at=datetime(2026, 3, 4, 12, 0, tzinfo=dt_timezone.utc),
        get_status_display=lambda: "Ready",
    )


class TestOrderNotificationService:
    def test_payload_fields(self, order):
        notification = OrderNotificationService.build(order, NotificationType.ORDER_CREATED, "hello")
        payload = notification.to_payload()

        assert payload == {
            "order_id": str(order.id),
            "user_id": "7",
            "user_name": "carla",
            "status": "READY",
            "total": "29.90",
            "estimated_time": "10:00",
            "created_at": "2026-03-04T12:00:00Z",
            "notification_type": "ORDER_CREATED",
            "message": "hello",
        }

    @pytest.mark.parametrize(
        "method,kind",
        [
            ("order_created", NotificationType.ORDER_CREATED),
            ("order_updated", NotificationType.ORDER_UPDATED),
            ("order_cancelled", NotificationType.ORDER_CANCELLED),
        ],
    )
    def test_employee_events(self, order, method, kind):
        notifier = MagicMock()
        getattr(OrderNotificationService(notifier), method)(order)

        notification = notifier.notify_employees.call_args.args[0]
        assert notification.notification_type == kind
        notifier.notify_user.assert_not_called()

    def test_status_change_goes_to_owner(self, order):
        notifier = MagicMock()
        OrderNotificationService(notifier).status_changed(order, OrderStatus.IN_PREPARATION)

        user_id, notification = notifier.notify_user.call_args.args
        assert user_id == "7"
        assert notification.message == "Your order is now Ready."

    def test_estimated_time_goes_to_owner(self, order):
        notifier = MagicMock()
        OrderNotificationService(notifier).estimated_time_changed(order)

        _, notification = notifier.notify_user.call_args.args
        assert notification.notification_type == NotificationType.ORDER_ESTIMATED_TIME_CHANGED
        assert "10:00" in notification.message

    def test_delivery_failure_is_swallowed(self, order):
        notifier = MagicMock()
        notifier.notify_employees.side_effect = RuntimeError("boom")
        OrderNotificationService(notifier).order_created(order)

    def test_payload_failure_is_swallowed(self, order):
        del order.user
        notifier = MagicMock()
        OrderNotificationService(notifier).order_created(order)
        notifier.notify_employees.assert_not_called()


class TestRedisOrderNotifier:
    def test_publishes_json_on_prefixed_channels(self, order):
        client = MagicMock()
        client.publish.return_value = 1
        notifier = RedisOrderNotifier(client=client, channel_prefix="truck")
        notification = OrderNotificationService.build(order, NotificationType.ORDER_CREATED, "new")

        notifier.notify_employees(notification)
        notifier.notify_user("7", notification)

        first, second = client.publish.call_args_list
        assert first.args[0] == "truck.employees"
        assert second.args[0] == "truck.user.7"
        assert json.loads(first.args[1])["notification_type"] == "ORDER_CREATED"


class TestNotifierFactory:
    def test_uses_configured_class(self, settings):
        settings.ORDER_NOTIFIER_CLASS = "modules.orders.notifications.LoggingOrderNotifier"
        assert isinstance(get_order_notifier(), LoggingOrderNotifier)
