# refunds/services.py

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from core.api import BadRequest, NotFound
from core.config import get_allowed_image_exts, get_upload_max_mb
from core.uploads import attach_file, validate_upload
from orders.models import Order
from orders.services import mark_refunded
from payments.utils import money_to_cents, to_decimal

from .models import Refund

logger = logging.getLogger(__name__)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _get_order_for_update(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Order not found")


def process_refund(*, admin, data: dict, screenshot=None) -> Refund:
    """
    Record a refund paid out for a cancelled order.

    The refund starts as `processed`; the admin later marks it completed
    or failed. A failed screenshot upload does not fail the refund.
    """
    order_id = data.get("orderId")
    if any(_blank(data.get(k)) for k in ("orderId", "refundAmount", "refundMethod", "refundReason")):
        raise BadRequest("Missing required fields")

    method = str(data.get("refundMethod")).strip()
    if method not in Refund.Method.values:
        raise BadRequest(f"Invalid refund method: {method}")

    validate_upload(
        screenshot,
        allowed_exts=get_allowed_image_exts(),
        max_mb=get_upload_max_mb(),
        label="refundScreenshot",
    )

    with transaction.atomic():
        order = _get_order_for_update(order_id)

        if order.status != Order.Status.CANCELLED:
            raise BadRequest("Refunds can only be processed for cancelled orders")

        if Refund.objects.filter(order=order).exists():
            raise BadRequest("A refund already exists for this order")

        amount = to_decimal(data.get("refundAmount"))
        # Refund amounts arrive in dollars, ints included.
        amount_cents = money_to_cents(str(amount)) if amount is not None else 0
        if amount_cents <= 0 or amount_cents > order.total_cents:
            raise BadRequest("Refund amount must be greater than 0 and not exceed order total")

        now = timezone.now()
        refund = Refund.objects.create(
            order=order,
            buyer_id=order.buyer_id,
            seller_id=order.seller_id,
            amount_cents=amount_cents,
            method=method,
            reason=str(data.get("refundReason")).strip(),
            notes=str(data.get("refundNotes") or "").strip(),
            status=Refund.Status.PROCESSED,
            processed_by=admin,
            processed_at=now,
        )

        order.refund_status = Order.RefundStatus.PROCESSED
        order.save(update_fields=["refund_status", "updated_at"])

    logger.info(
        "Refund %s processed for order %s: %s cents via %s",
        refund.pk,
        order.order_number,
        amount_cents,
        method,
    )

    if screenshot:
        attach_file(refund, "screenshot", screenshot, update_fields=["updated_at"])

    return refund


_ORDER_REFUND_STATUS = {
    Refund.Status.PENDING: Order.RefundStatus.PENDING,
    Refund.Status.PROCESSED: Order.RefundStatus.PROCESSED,
    Refund.Status.COMPLETED: Order.RefundStatus.COMPLETED,
    Refund.Status.FAILED: Order.RefundStatus.FAILED,
}


@transaction.atomic
def update_refund_status(*, refund_id, admin, status: str, notes: str = "") -> Refund:
    refund = get_refund(refund_id, for_update=True)

    status = (status or "").strip().lower()
    if status not in Refund.Status.values:
        raise BadRequest(f"Invalid refund status: {status}")

    if refund.is_final and status != refund.status:
        raise BadRequest("Refund is already completed")

    previous = refund.status
    refund.status = status
    fields = ["status", "updated_at"]
    if notes:
        refund.notes = notes.strip()
        fields.append("notes")
    if status == Refund.Status.COMPLETED and not refund.completed_at:
        refund.completed_at = timezone.now()
        fields.append("completed_at")
    refund.save(update_fields=fields)

    order = _get_order_for_update(refund.order_id)
    order.refund_status = _ORDER_REFUND_STATUS[status]
    if status == Refund.Status.COMPLETED:
        mark_refunded(order, actor=admin, note=f"Refund of order {order.order_number} completed")
    else:
        order.save(update_fields=["refund_status", "updated_at"])

    logger.info("Refund %s: %s -> %s by %s", refund.pk, previous, status, getattr(admin, "pk", None))
    return refund


def refund_queryset():
    return Refund.objects.select_related(
        "order",
        "buyer",
        "buyer__profile",
        "seller",
        "seller__profile",
        "processed_by",
        "processed_by__profile",
    )


def get_refund(refund_id, *, for_update: bool = False) -> Refund:
    qs = Refund.objects.select_for_update() if for_update else refund_queryset()
    try:
        return qs.get(pk=refund_id)
    except (Refund.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Refund not found")


def refund_history():
    return refund_queryset().order_by("-created_at")
