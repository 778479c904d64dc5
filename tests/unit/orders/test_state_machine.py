"""Unit tests for the order state machine and modification window.

Covers:
- Every valid transition and a sample of invalid ones.
- Terminal states have no way out.
- Timestamps stamped on DELIVERED / CANCELLED.
- Modification window: PENDING always, IN_PREPARATION within the grace
  period measured from creation, never afterwards.
- Cancellation allowed only before READY.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from modules.orders.constants import TERMINAL_STATES, VALID_TRANSITIONS, OrderStatus
from modules.orders.exceptions import (
    InvalidOrderTransition,
    OrderCannotBeCancelled,
    OrderCannotBeModified,
)
from modules.orders.state_machine import OrderStateMachine

pytestmark = pytest.mark.unit

CREATED = datetime(2026, 3, 4, 12, 0, tzinfo=dt_timezone.utc)


def order(status: str = OrderStatus.PENDING) -> SimpleNamespace:
    return SimpleNamespace(
        id=uuid4(),
        status=status,
        created_at=CREATED,
        delivered_at=None,
        canceled_at=None,
    )


@pytest.fixture()
def machine():
    return OrderStateMachine()


VALID_PAIRS = [(source, target) for source, targets in VALID_TRANSITIONS.items() for target in targets]
INVALID_PAIRS = [
    (OrderStatus.PENDING, OrderStatus.READY),
    (OrderStatus.PENDING, OrderStatus.DELIVERED),
    (OrderStatus.IN_PREPARATION, OrderStatus.PENDING),
    (OrderStatus.IN_PREPARATION, OrderStatus.DELIVERED),
    (OrderStatus.READY, OrderStatus.CANCELLED),
    (OrderStatus.READY, OrderStatus.IN_PREPARATION),
    (OrderStatus.DELIVERED, OrderStatus.CANCELLED),
    (OrderStatus.CANCELLED, OrderStatus.PENDING),
    (OrderStatus.PENDING, OrderStatus.PENDING),
]


class TestTransitions:
    def test_transition_table_is_complete(self):
        assert set(VALID_TRANSITIONS) == set(OrderStatus.values)

    @pytest.mark.parametrize("source,target", VALID_PAIRS)
    def test_valid_transition(self, machine, source, target):
        o = order(source)
        previous = machine.apply(o, target, CREATED)
        assert previous == source
        assert o.status == target

    @pytest.mark.parametrize("source,target", INVALID_PAIRS)
    def test_invalid_transition(self, machine, source, target):
        o = order(source)
        with pytest.raises(InvalidOrderTransition) as exc_info:
            machine.apply(o, target, CREATED)
        assert o.status == source
        assert str(exc_info.value) == f"Cannot transition order from {source} to {target}."

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATES))
    def test_terminal_states_have_no_targets(self, machine, status):
        assert machine.is_terminal(status)
        assert machine.allowed_targets(status) == set()

    def test_delivered_stamps_delivered_at(self, machine):
        o = order(OrderStatus.READY)
        moment = CREATED + timedelta(minutes=25)
        machine.apply(o, OrderStatus.DELIVERED, moment)
        assert o.delivered_at == moment
        assert o.canceled_at is None

    def test_cancelled_stamps_canceled_at(self, machine):
        o = order(OrderStatus.PENDING)
        machine.apply(o, OrderStatus.CANCELLED, CREATED)
        assert o.canceled_at == CREATED
        assert o.delivered_at is None

    def test_full_lifecycle(self, machine):
        o = order()
        for target in (OrderStatus.IN_PREPARATION, OrderStatus.READY, OrderStatus.DELIVERED):
            machine.apply(o, target, CREATED)
        assert o.status == OrderStatus.DELIVERED


class TestModificationWindow:
    def test_pending_is_always_modifiable(self, machine):
        assert machine.is_modifiable(order(), CREATED + timedelta(hours=3))

    def test_in_preparation_at_exactly_five_minutes(self, machine):
        assert machine.is_modifiable(order(OrderStatus.IN_PREPARATION), CREATED + timedelta(minutes=5))

    def test_in_preparation_one_second_late(self, machine):
        o = order(OrderStatus.IN_PREPARATION)
        late = CREATED + timedelta(minutes=5, seconds=1)
        assert not machine.is_modifiable(o, late)
        with pytest.raises(OrderCannotBeModified, match="5 minutes"):
            machine.ensure_modifiable(o, late)

    @pytest.mark.parametrize("status", [OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_later_states_never_modifiable(self, machine, status):
        with pytest.raises(OrderCannotBeModified):
            machine.ensure_modifiable(order(status), CREATED)

    def test_custom_grace(self):
        machine = OrderStateMachine(grace=timedelta(minutes=10))
        assert machine.is_modifiable(order(OrderStatus.IN_PREPARATION), CREATED + timedelta(minutes=9))


class TestCancellation:
    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.IN_PREPARATION])
    def test_cancellable(self, machine, status):
        machine.ensure_cancellable(order(status))

    @pytest.mark.parametrize("status", [OrderStatus.READY, OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_not_cancellable(self, machine, status):
        with pytest.raises(OrderCannotBeCancelled):
            machine.ensure_cancellable(order(status))
