"""Order service layer (Use Cases).

Orchestrates order creation, item replacement, tip/estimated-time edits
and status changes.  Write operations are atomic and lock the order row
before applying the state machine.

Business rules enforced:
- An order has at least one item; quantities are >= 1 (DTO level).
- A user has at most ``ORDER_MAX_ACTIVE_PER_USER`` orders in PENDING or
  IN_PREPARATION.
- Products must be active; promotions must be redeemable at the current
  instant (day range for TEMPORARY, an active weekly window for
  RECURRING).
- ``unit_price``, ``line_total`` and ``item_name`` are frozen per item;
  ``subtotal`` = sum of line totals, ``total`` = subtotal + tip.
- Items and tip change only while the order is modifiable (see
  ``OrderStateMachine.is_modifiable``) and only by the owner.
- Users cancel only PENDING / IN_PREPARATION orders they own.
- Estimated time is ``MM:SS`` with seconds below 60.
"""

from __future__ import annotations

import re
from datetime import timedelta
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Dict, List, Optional

import structlog
from django.conf import settings
from django.db import transaction

from modules.orders.constants import (
    DEFAULT_ESTIMATED_TIME,
    DEFAULT_MAX_ACTIVE_ORDERS,
    ESTIMATED_TIME_PATTERN,
    OrderItemType,
    OrderStatus,
)
from modules.orders.dtos import CreateOrderDTO, OrderStatisticsDTO, ProductItemDTO, UpdateOrderDTO
from modules.orders.exceptions import (
    ActiveOrderLimitReached,
    EmptyOrder,
    InvalidEstimatedTime,
    InvalidOrderTransition,
    InvalidTip,
    OrderAccessDenied,
    OrderNotFound,
    ProductNotAvailable,
    PromotionNotAvailable,
)
from modules.orders.notifications import OrderNotificationService
from modules.orders.pricing import compute_totals, line_total, quantize
from modules.orders.state_machine import OrderStateMachine
from modules.promotions.validity import is_redeemable_at
from shared.domain.clock import Clock, SystemClock
from shared.domain.validation import ValidationResult

if TYPE_CHECKING:
    from modules.orders.dtos import PromotionItemDTO
    from modules.orders.models import Order
    from modules.orders.notifications import IOrderNotifier
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from modules.promotions.repositories.interfaces import IPromotionRepository

logger = structlog.get_logger(__name__)

_ESTIMATED_TIME_RE = re.compile(ESTIMATED_TIME_PATTERN)


def check_estimated_time(value: Optional[str]) -> ValidationResult:
    result = ValidationResult()
    if value is None or not value.strip():
        result.add("Estimated time must not be empty.")
        return result
    if not _ESTIMATED_TIME_RE.fullmatch(value):
        result.add("Estimated time must use the MM:SS format.")
        return result
    _minutes, seconds = (int(part) for part in value.split(":"))
    if seconds >= 60:
        result.add("Seconds must be between 00 and 59.")
    return result


def check_order_input(dto: CreateOrderDTO) -> ValidationResult:
    result = ValidationResult()
    if not dto.items:
        result.add("An order must contain at least one item.")
    return result


class OrderService:
    """Application service for Order use-cases.

    Receives repositories, the notifier, the clock and the state machine
    via constructor injection.
    """

    def __init__(
        self,
        order_repository: IOrderRepository,
        product_repository: IProductRepository,
        promotion_repository: IPromotionRepository,
        notifier: IOrderNotifier,
        clock: Optional[Clock] = None,
        state_machine: Optional[OrderStateMachine] = None,
        max_active_orders: Optional[int] = None,
    ) -> None:
        self._order_repo = order_repository
        self._product_repo = product_repository
        self._promotion_repo = promotion_repository
        self._notifications = OrderNotificationService(notifier)
        self._clock = clock or SystemClock()
        self._state_machine = state_machine or OrderStateMachine(
            grace=timedelta(minutes=getattr(settings, "ORDER_MODIFICATION_GRACE_MINUTES", 5))
        )
        self._max_active = (
            max_active_orders
            if max_active_orders is not None
            else getattr(settings, "ORDER_MAX_ACTIVE_PER_USER", DEFAULT_MAX_ACTIVE_ORDERS)
        )

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    @transaction.atomic
    def create_order(self, dto: CreateOrderDTO, user: Any) -> Order:
        """Create an order for *user*.

        Raises:
            EmptyOrder: no items.
            InvalidTip: negative tip.
            ActiveOrderLimitReached: the user already has too many active orders.
            ProductNotAvailable / PromotionNotAvailable: an item cannot be sold now.
        """
        log = logger.bind(user_id=str(user.pk), item_count=len(dto.items))
        log.info("order.creation_started")

        check_order_input(dto).raise_if_failed(EmptyOrder)
        tip = self._checked_tip(dto.tip)

        active = self._order_repo.count_active_for_user(user.pk)
        if active >= self._max_active:
            log.warning("order.active_limit_reached", active_orders=active)
            raise ActiveOrderLimitReached(
                f"You cannot have more than {self._max_active} active orders at the same time."
            )

        now = self._clock.now()
        lines = self._price_items(dto.items, now)
        subtotal, total = compute_totals((line["line_total"] for line in lines), tip)

        order = self._order_repo.create(
            {
                "user": user,
                "status": OrderStatus.PENDING,
                "subtotal": subtotal,
                "tip": tip,
                "total": total,
                "estimated_time": getattr(settings, "ORDER_DEFAULT_ESTIMATED_TIME", DEFAULT_ESTIMATED_TIME),
                "created_at": now,
                "items": lines,
            }
        )
        log.info("order.created", order_id=str(order.id), total=str(total))
        self._notifications.order_created(order)
        return order

    @transaction.atomic
    def update_order(self, order_id: Any, dto: UpdateOrderDTO, user: Any) -> Order:
        """Replace every item and the tip of a modifiable order owned by *user*."""
        order = self._get_for_update(order_id)
        self._ensure_owner(order, user)
        now = self._clock.now()
        self._state_machine.ensure_modifiable(order, now)

        check_order_input(dto).raise_if_failed(EmptyOrder)
        tip = self._checked_tip(dto.tip)
        lines = self._price_items(dto.items, now)

        order.subtotal, order.total = compute_totals((line["line_total"] for line in lines), tip)
        order.tip = tip
        self._order_repo.replace_items(order, lines)
        self._order_repo.save(order, update_fields=["subtotal", "tip", "total"])

        logger.info("order.updated", order_id=str(order.id), total=str(order.total))
        order = self._reload(order)
        self._notifications.order_updated(order)
        return order

    @transaction.atomic
    def update_tip(self, order_id: Any, tip: Decimal, user: Any) -> Order:
        order = self._get_for_update(order_id)
        self._ensure_owner(order, user)
        self._state_machine.ensure_modifiable(order, self._clock.now())

        order.tip = self._checked_tip(tip)
        order.subtotal, order.total = compute_totals([order.subtotal], order.tip)
        self._order_repo.save(order, update_fields=["tip", "total"])

        logger.info("order.tip_updated", order_id=str(order.id), tip=str(order.tip))
        order = self._reload(order)
        self._notifications.order_updated(order)
        return order

    @transaction.atomic
    def update_status(self, order_id: Any, new_status: str) -> Order:
        """Staff transition through the state machine.

        Raises:
            OrderNotFound: order does not exist.
            InvalidOrderTransition: transition is not allowed.
        """
        order = self._get_for_update(order_id)
        log = logger.bind(order_id=str(order.id), current_status=order.status, new_status=new_status)

        try:
            previous = self._state_machine.apply(order, new_status, self._clock.now())
        except InvalidOrderTransition:
            log.warning("order.invalid_transition")
            raise

        self._order_repo.save(order, update_fields=["status", "delivered_at", "canceled_at"])
        log.info("order.status_updated")

        order = self._reload(order)
        if new_status == OrderStatus.CANCELLED:
            self._notifications.order_cancelled(order)
        self._notifications.status_changed(order, previous)
        return order

    @transaction.atomic
    def cancel_order(self, order_id: Any, user: Any) -> Order:
        """Owner cancellation; READY, DELIVERED and CANCELLED orders are refused."""
        order = self._get_for_update(order_id)
        self._ensure_owner(order, user)
        self._state_machine.ensure_cancellable(order)

        self._state_machine.apply(order, OrderStatus.CANCELLED, self._clock.now())
        self._order_repo.save(order, update_fields=["status", "canceled_at"])
        logger.info("order.cancelled", order_id=str(order.id))

        order = self._reload(order)
        self._notifications.order_cancelled(order)
        return order

    @transaction.atomic
    def update_estimated_time(self, order_id: Any, estimated_time: str) -> Order:
        """Staff-only at the edge; no ownership check."""
        check_estimated_time(estimated_time).raise_if_failed(InvalidEstimatedTime)
        order = self._get_for_update(order_id)

        order.estimated_time = estimated_time
        self._order_repo.save(order, update_fields=["estimated_time"])
        logger.info("order.estimated_time_updated", order_id=str(order.id), estimated_time=estimated_time)

        order = self._reload(order)
        self._notifications.estimated_time_changed(order)
        return order

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_order(self, order_id: Any, user: Any) -> Order:
        """Owner or staff only.

        Raises:
            OrderNotFound: the order does not exist.
            OrderAccessDenied: *user* is neither the owner nor staff.
        """
        order = self._order_repo.get_by_id(order_id)
        if not order:
            raise OrderNotFound(order_id)
        if not getattr(user, "is_staff", False):
            self._ensure_owner(order, user)
        return order

    def list_active_orders(self) -> List[Order]:
        return self._order_repo.list_active()

    def statistics(self) -> OrderStatisticsDTO:
        counts = self._order_repo.count_by_status()
        by_status = {status.value: counts.get(status.value, 0) for status in OrderStatus}
        return OrderStatisticsDTO(
            total_orders=sum(by_status.values()),
            active_orders=by_status[OrderStatus.PENDING] + by_status[OrderStatus.IN_PREPARATION],
            by_status=by_status,
            delivered_revenue=quantize(self._order_repo.delivered_revenue()),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _get_for_update(self, order_id: Any) -> Order:
        order = self._order_repo.get_for_update(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def _reload(self, order: Order) -> Order:
        return self._order_repo.get_by_id(order.id) or order

    @staticmethod
    def _ensure_owner(order: Order, user: Any) -> None:
        if str(order.user_id) != str(user.pk):
            logger.warning("order.access_denied", order_id=str(order.id), user_id=str(user.pk))
            raise OrderAccessDenied(order.id)

    @staticmethod
    def _checked_tip(tip: Optional[Decimal]) -> Decimal:
        tip = quantize(tip if tip is not None else Decimal("0"))
        if tip < 0:
            raise InvalidTip("Tip cannot be negative.")
        return tip

    def _price_items(self, items, now) -> List[Dict[str, Any]]:
        lines: List[Dict[str, Any]] = []
        for item in items:
            if isinstance(item, ProductItemDTO):
                lines.append(self._price_product(item))
            else:
                lines.append(self._price_promotion(item, now))
        return lines

    def _price_product(self, item: ProductItemDTO) -> Dict[str, Any]:
        product = self._product_repo.get_by_id(item.product_id)
        if not product:
            raise ProductNotAvailable(f"Product {item.product_id} is not available.")
        if not product.is_active:
            raise ProductNotAvailable(f"Product '{product.name}' is not available.")
        return {
            "item_type": OrderItemType.PRODUCT,
            "product": product,
            "promotion": None,
            "item_name": product.name,
            "quantity": item.quantity,
            "unit_price": quantize(product.price),
            "line_total": line_total(product.price, item.quantity),
        }

    def _price_promotion(self, item: PromotionItemDTO, now) -> Dict[str, Any]:
        promotion = self._promotion_repo.get_by_id(item.promotion_id)
        if not promotion:
            raise PromotionNotAvailable(f"Promotion {item.promotion_id} is not available.")
        if not is_redeemable_at(promotion, now):
            raise PromotionNotAvailable(f"Promotion '{promotion.name}' is not available right now.")
        return {
            "item_type": OrderItemType.PROMOTION,
            "product": None,
            "promotion": promotion,
            "item_name": promotion.name,
            "quantity": item.quantity,
            "unit_price": quantize(promotion.price),
            "line_total": line_total(promotion.price, item.quantity),
        }
