# refunds/serializers.py
from __future__ import annotations

from orders.serializers import user_summary
from payments.utils import cents_to_float
from products.serializers import seller_summary

from .models import Refund


def refund_to_dict(refund: Refund) -> dict:
    order = refund.order
    screenshot = None
    if refund.screenshot:
        try:
            screenshot = refund.screenshot.url
        except ValueError:
            screenshot = None
    return {
        "id": str(refund.id),
        "order": {
            "id": str(order.id),
            "orderNumber": order.order_number,
            "totalAmount": cents_to_float(order.total_cents),
            "status": order.status,
            "createdAt": order.created_at,
        },
        "buyer": user_summary(refund.buyer),
        "seller": seller_summary(refund.seller),
        "refundAmount": cents_to_float(refund.amount_cents),
        "refundMethod": refund.method,
        "refundReason": refund.reason,
        "refundNotes": refund.notes,
        "refundScreenshot": screenshot,
        "status": refund.status,
        "processedBy": user_summary(refund.processed_by),
        "processedAt": refund.processed_at,
        "completedAt": refund.completed_at,
        "createdAt": refund.created_at,
    }
