# orders/status.py
"""
Order status state machine.

TRANSITIONS is the single table every status write goes through.
DELIVERY_TRANSITIONS is the subset sellers may drive from the delivery endpoint.
"""
from __future__ import annotations

from core.api import BadRequest

from .models import Order

S = Order.Status

TRANSITIONS: dict[str, frozenset[str]] = {
    S.PENDING: frozenset({S.PLACED, S.CONFIRMED, S.CANCELLED}),
    S.PLACED: frozenset({S.CONFIRMED}),
    S.CONFIRMED: frozenset({S.PROCESSING, S.SHIPPED, S.CANCELLED}),
    S.PROCESSING: frozenset({S.SHIPPED}),
    S.SHIPPED: frozenset({S.DELIVERED, S.RETURNED}),
    S.CANCELLED: frozenset({S.REFUNDED}),
}

DELIVERY_TRANSITIONS: dict[str, frozenset[str]] = {
    S.CONFIRMED: frozenset({S.PROCESSING, S.SHIPPED}),
    S.PROCESSING: frozenset({S.SHIPPED}),
    S.SHIPPED: frozenset({S.DELIVERED, S.RETURNED}),
}

DELIVERY_EDITABLE_STATUSES = frozenset(DELIVERY_TRANSITIONS)

BUYER_CANCELLABLE_STATUSES = frozenset({S.PENDING, S.CONFIRMED})

# Statuses in which the order total counts as marketplace revenue.
REVENUE_BEARING_STATUSES = frozenset({S.CONFIRMED, S.PROCESSING, S.SHIPPED, S.DELIVERED, S.RETURNED})


def can_transition(current: str, new: str, *, table: dict[str, frozenset[str]] = TRANSITIONS) -> bool:
    return new in table.get(current, frozenset())


def assert_transition(current: str, new: str, *, table: dict[str, frozenset[str]] = TRANSITIONS) -> None:
    if new not in S.values:
        raise BadRequest(f"Invalid status: {new}")
    if not can_transition(current, new, table=table):
        raise BadRequest(f"Cannot transition from {current} to {new}")


def delivery_note(status: str, *, carrier: str = "", tracking_number: str = "") -> str:
    if status == S.PROCESSING:
        return "Order set to processing"
    if status == S.SHIPPED:
        return f"Order shipped via {carrier or 'carrier'} - Tracking: {tracking_number or 'N/A'}"
    if status == S.DELIVERED:
        return "Order delivered successfully"
    if status == S.RETURNED:
        return "Order returned by buyer"
    return "Order status updated"
