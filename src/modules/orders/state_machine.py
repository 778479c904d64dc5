"""Order state machine and mutability window.

Transitions::

    PENDING -> IN_PREPARATION -> READY -> DELIVERED
    PENDING | IN_PREPARATION -> CANCELLED

DELIVERED and CANCELLED are terminal.  Entering DELIVERED stamps
``delivered_at``; entering CANCELLED stamps ``canceled_at``.

Items and tip are editable while the order is PENDING, or while it is
IN_PREPARATION and no more than the grace period has elapsed since
``created_at``.  The window is measured from creation, not from the
moment preparation started.

The machine works on a single in-memory snapshot; callers lock the row
(``get_for_update``) before applying a transition.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any, Mapping, Optional, Set

from modules.orders.constants import (
    DEFAULT_MODIFICATION_GRACE,
    TERMINAL_STATES,
    USER_CANCELLABLE_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
)
from modules.orders.exceptions import (
    InvalidOrderTransition,
    OrderCannotBeCancelled,
    OrderCannotBeModified,
)


class OrderStateMachine:
    def __init__(
        self,
        transitions: Optional[Mapping[str, Set[str]]] = None,
        grace: timedelta = DEFAULT_MODIFICATION_GRACE,
    ) -> None:
        self._transitions = transitions if transitions is not None else VALID_TRANSITIONS
        self.grace = grace

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def allowed_targets(self, status: str) -> Set[str]:
        return set(self._transitions.get(status, set()))

    def can_transition(self, from_status: str, to_status: str) -> bool:
        return to_status in self._transitions.get(from_status, set())

    @staticmethod
    def is_terminal(status: str) -> bool:
        return status in TERMINAL_STATES

    def apply(self, order: Any, target: str, now: datetime) -> str:
        """Move *order* to *target* and return the previous status.

        Raises:
            InvalidOrderTransition: *target* is not reachable from the
                current status.
        """
        previous = order.status
        if not self.can_transition(previous, target):
            raise InvalidOrderTransition(previous, target)

        order.status = target
        if target == OrderStatus.DELIVERED:
            order.delivered_at = now
        elif target == OrderStatus.CANCELLED:
            order.canceled_at = now
        return previous

    # ------------------------------------------------------------------
    # Mutability
    # ------------------------------------------------------------------

    def is_modifiable(self, order: Any, now: datetime) -> bool:
        if order.status == OrderStatus.PENDING:
            return True
        if order.status == OrderStatus.IN_PREPARATION:
            return now - order.created_at <= self.grace
        return False

    def ensure_modifiable(self, order: Any, now: datetime) -> None:
        if self.is_modifiable(order, now):
            return
        if order.status == OrderStatus.IN_PREPARATION:
            minutes = int(self.grace.total_seconds() // 60)
            raise OrderCannotBeModified(
                f"Order {order.id} can no longer be modified: more than {minutes} minutes "
                f"have passed since it was placed."
            )
        raise OrderCannotBeModified(f"Order {order.id} cannot be modified while {order.status}.")

    @staticmethod
    def ensure_cancellable(order: Any) -> None:
        if order.status not in USER_CANCELLABLE_STATES:
            raise OrderCannotBeCancelled(f"Order {order.id} cannot be cancelled while {order.status}.")
