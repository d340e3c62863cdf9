# complaints/serializers.py
from __future__ import annotations

from orders.serializers import user_summary
from payments.utils import cents_to_float
from products.serializers import seller_summary

from .models import Complaint, ComplaintAttachment


def attachment_to_dict(att: ComplaintAttachment) -> dict:
    url = None
    if att.file:
        try:
            url = att.file.url
        except ValueError:
            url = None
    return {
        "id": att.pk,
        "originalName": att.original_name,
        "mimetype": att.content_type,
        "size": att.size,
        "path": url,
    }


def complaint_to_dict(complaint: Complaint) -> dict:
    order = complaint.order
    return {
        "id": str(complaint.id),
        "user": user_summary(complaint.user),
        "order": {
            "id": str(order.id),
            "orderNumber": order.order_number,
            "totalAmount": cents_to_float(order.total_cents),
            "status": order.status,
            "seller": seller_summary(order.seller),
            "createdAt": order.created_at,
        },
        "subject": complaint.subject,
        "category": complaint.category,
        "priority": complaint.priority,
        "description": complaint.description,
        "attachments": [attachment_to_dict(a) for a in complaint.attachments.all()],
        "status": complaint.status,
        "resolution": complaint.resolution,
        "adminNotes": complaint.admin_notes,
        "resolvedBy": user_summary(complaint.resolved_by),
        "resolvedAt": complaint.resolved_at,
        "createdAt": complaint.created_at,
        "updatedAt": complaint.updated_at,
    }
