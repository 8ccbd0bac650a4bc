"""Tests for the order status transition map."""

import pytest
from ordering.order.order import (
    RELEASING_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStatus,
    can_transition,
)


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.CONFIRMED),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.CONFIRMED, OrderStatus.PROCESSING),
            (OrderStatus.CONFIRMED, OrderStatus.REFUNDED),
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
            (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (OrderStatus.PENDING, OrderStatus.SHIPPED),
            (OrderStatus.PENDING, OrderStatus.REFUNDED),
            (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
            (OrderStatus.DELIVERED, OrderStatus.REFUNDED),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_terminal_states(self):
        assert TERMINAL_STATES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}

    def test_every_status_has_an_entry(self):
        assert set(VALID_TRANSITIONS) == set(OrderStatus)

    def test_releasing_states_are_terminal(self):
        assert RELEASING_STATES <= TERMINAL_STATES
