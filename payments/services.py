# payments/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass

from django.db import IntegrityError, transaction
from django.db.models import Sum

from orders.models import Order
from orders.status import REVENUE_BEARING_STATUSES
from payments.models import RevenueEntry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RevenueDrift:
    order_id: str
    order_number: str
    status: str
    expected_cents: int
    actual_cents: int

    @property
    def delta_cents(self) -> int:
        return self.expected_cents - self.actual_cents


def _post_once(*, order: Order, reason: str, amount_cents: int, actor=None, note: str = "") -> RevenueEntry | None:
    """
    Append one ledger row for (order, reason). A second post for the same
    pair is a no-op, so retried transitions never double-count.
    """
    if RevenueEntry.objects.filter(order=order, reason=reason).exists():
        logger.info("Revenue entry %s already recorded for order %s", reason, order.pk)
        return None
    try:
        with transaction.atomic():
            entry = RevenueEntry.objects.create(
                order=order,
                reason=reason,
                amount_cents=amount_cents,
                actor=actor if getattr(actor, "is_authenticated", False) else None,
                note=note,
            )
    except IntegrityError:
        logger.info("Revenue entry %s raced for order %s; keeping the first", reason, order.pk)
        return None
    logger.info("Revenue %s %+d cents for order %s", reason, amount_cents, order.order_number)
    return entry


def record_order_confirmed(order: Order, *, actor=None) -> RevenueEntry | None:
    return _post_once(
        order=order,
        reason=RevenueEntry.Reason.ORDER_CONFIRMED,
        amount_cents=int(order.total_cents),
        actor=actor,
        note=f"Order {order.order_number} confirmed",
    )


def record_order_cancelled(order: Order, *, actor=None) -> RevenueEntry | None:
    return _post_once(
        order=order,
        reason=RevenueEntry.Reason.ORDER_CANCELLED,
        amount_cents=-int(order.total_cents),
        actor=actor,
        note=f"Confirmed order {order.order_number} cancelled",
    )


def get_revenue_cents() -> int:
    agg = RevenueEntry.objects.aggregate(total=Sum("amount_cents"))
    return int(agg["total"] or 0)


def expected_revenue_cents(order: Order) -> int:
    return int(order.total_cents) if order.status in REVENUE_BEARING_STATUSES else 0


def expected_revenue_by_order() -> dict:
    """order pk -> (order, cents the ledger should hold for it)."""
    qs = Order.objects.only("id", "order_number", "status", "total_cents").order_by("created_at")
    return {order.pk: (order, expected_revenue_cents(order)) for order in qs.iterator(chunk_size=500)}


def reconcile_revenue(*, fix: bool = False, actor=None) -> list[RevenueDrift]:
    """
    Compare the ledger sum per order with what the order's status implies.
    With fix=True, post one `adjustment` entry per drifting order.
    """
    ledger = {
        row["order_id"]: int(row["total"] or 0)
        for row in RevenueEntry.objects.filter(order__isnull=False)
        .values("order_id")
        .annotate(total=Sum("amount_cents"))
    }

    drifts: list[RevenueDrift] = []
    for order_id, (order, expected) in expected_revenue_by_order().items():
        actual = ledger.get(order_id, 0)
        if expected != actual:
            drifts.append(RevenueDrift(str(order.pk), order.order_number, order.status, expected, actual))

    if fix and drifts:
        with transaction.atomic():
            for d in drifts:
                RevenueEntry.objects.create(
                    order_id=d.order_id,
                    reason=RevenueEntry.Reason.ADJUSTMENT,
                    amount_cents=d.delta_cents,
                    actor=actor,
                    note=f"Reconciliation: status={d.status} expected={d.expected_cents} ledger={d.actual_cents}",
                )
                logger.warning("Posted revenue adjustment %+d cents for order %s", d.delta_cents, d.order_number)
    return drifts
