"""Order notifications.

``OrderNotificationService`` builds the payload for each order event and
hands it to an ``IOrderNotifier``.  Delivery is fire-and-forget: a
failing notifier is logged and never breaks the order operation.

Routing:
- created, updated and cancelled go to the employees channel;
- status and estimated-time changes go to the order's owner.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Optional
from uuid import UUID

import redis
import structlog
from django.conf import settings
from django.db import models
from django.utils.module_loading import import_string
from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


class NotificationType(models.TextChoices):
    ORDER_CREATED = "ORDER_CREATED", "Order created"
    ORDER_UPDATED = "ORDER_UPDATED", "Order updated"
    ORDER_STATUS_CHANGED = "ORDER_STATUS_CHANGED", "Order status changed"
    ORDER_ESTIMATED_TIME_CHANGED = "ORDER_ESTIMATED_TIME_CHANGED", "Estimated time changed"
    ORDER_CANCELLED = "ORDER_CANCELLED", "Order cancelled"


class OrderNotificationDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: UUID
    user_id: str
    user_name: str
    status: str
    total: Decimal
    estimated_time: str
    created_at: datetime
    notification_type: NotificationType
    message: str

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Port and adapters
# ---------------------------------------------------------------------------


class IOrderNotifier(ABC):
    @abstractmethod
    def notify_employees(self, notification: OrderNotificationDTO) -> None:
        """Broadcast to every staff client."""

    @abstractmethod
    def notify_user(self, user_id: str, notification: OrderNotificationDTO) -> None:
        """Send to the clients of a single user."""


class RedisOrderNotifier(IOrderNotifier):
    """Publish JSON payloads on Redis pub/sub channels.

    Channels are ``<prefix>.employees`` and ``<prefix>.user.<user_id>``;
    the real-time gateway subscribes to them.
    """

    def __init__(self, client: Optional[redis.Redis] = None, channel_prefix: Optional[str] = None) -> None:
        self._client = client or redis.Redis.from_url(settings.REDIS_URL)
        self._prefix = channel_prefix or settings.ORDER_NOTIFICATION_CHANNEL_PREFIX

    def employees_channel(self) -> str:
        return f"{self._prefix}.employees"

    def user_channel(self, user_id: str) -> str:
        return f"{self._prefix}.user.{user_id}"

    def notify_employees(self, notification: OrderNotificationDTO) -> None:
        self._publish(self.employees_channel(), notification)

    def notify_user(self, user_id: str, notification: OrderNotificationDTO) -> None:
        self._publish(self.user_channel(user_id), notification)

    def _publish(self, channel: str, notification: OrderNotificationDTO) -> None:
        receivers = self._client.publish(channel, json.dumps(notification.to_payload()))
        logger.info(
            "order.notification_published",
            channel=channel,
            order_id=str(notification.order_id),
            notification_type=notification.notification_type,
            receivers=receivers,
        )


class LoggingOrderNotifier(IOrderNotifier):
    """Write notifications to the log; used in tests and local runs."""

    def notify_employees(self, notification: OrderNotificationDTO) -> None:
        logger.info("order.notification", target="employees", **notification.to_payload())

    def notify_user(self, user_id: str, notification: OrderNotificationDTO) -> None:
        logger.info("order.notification", target=f"user:{user_id}", **notification.to_payload())


def get_order_notifier() -> IOrderNotifier:
    """Build the adapter configured by ``ORDER_NOTIFIER_CLASS``."""
    return import_string(settings.ORDER_NOTIFIER_CLASS)()


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class OrderNotificationService:
    def __init__(self, notifier: IOrderNotifier) -> None:
        self._notifier = notifier

    def order_created(self, order: Order) -> None:
        self._to_employees(order, NotificationType.ORDER_CREATED, f"New order {order.id} received.")

    def order_updated(self, order: Order) -> None:
        self._to_employees(order, NotificationType.ORDER_UPDATED, f"Order {order.id} was modified by the customer.")

    def order_cancelled(self, order: Order) -> None:
        self._to_employees(order, NotificationType.ORDER_CANCELLED, f"Order {order.id} was cancelled.")

    def status_changed(self, order: Order, previous_status: str) -> None:
        self._to_owner(
            order,
            NotificationType.ORDER_STATUS_CHANGED,
            f"Your order is now {order.get_status_display()}.",
            previous_status=previous_status,
        )

    def estimated_time_changed(self, order: Order) -> None:
        self._to_owner(
            order,
            NotificationType.ORDER_ESTIMATED_TIME_CHANGED,
            f"Your order will be ready in about {order.estimated_time}.",
        )

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _to_employees(self, order: Order, kind: NotificationType, message: str) -> None:
        self._dispatch(order, kind, message, self._notifier.notify_employees)

    def _to_owner(self, order: Order, kind: NotificationType, message: str, **context: Any) -> None:
        self._dispatch(
            order,
            kind,
            message,
            lambda notification: self._notifier.notify_user(notification.user_id, notification),
            **context,
        )

    @staticmethod
    def build(order: Order, kind: NotificationType, message: str) -> OrderNotificationDTO:
        user = order.user
        return OrderNotificationDTO(
            order_id=order.id,
            user_id=str(user.pk),
            user_name=user.get_full_name() or user.get_username(),
            status=order.status,
            total=order.total,
            estimated_time=order.estimated_time,
            created_at=order.created_at,
            notification_type=kind,
            message=message,
        )

    def _dispatch(
        self,
        order: Order,
        kind: NotificationType,
        message: str,
        send: Callable[[OrderNotificationDTO], None],
        **context: Any,
    ) -> None:
        log = logger.bind(order_id=str(order.id), notification_type=kind, **context)
        try:
            send(self.build(order, kind, message))
        except Exception as exc:
            log.error("order.notification_failed", error=str(exc))
            return
        log.info("order.notification_sent")
