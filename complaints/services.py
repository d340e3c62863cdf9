# complaints/services.py

from __future__ import annotations

import logging

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import Count, Q
from django.utils import timezone

from accounts.permissions import is_admin_user
from core.api import BadRequest, Forbidden, NotFound
from core.config import (
    COMPLAINT_ATTACHMENT_EXTS,
    get_complaint_attachment_max_mb,
    get_complaint_max_attachments,
)
from core.uploads import attach_file, validate_upload
from orders.models import Order

from .models import Complaint, ComplaintAttachment

logger = logging.getLogger(__name__)

SUBJECT_MIN, SUBJECT_MAX = 5, 200
DESCRIPTION_MIN, DESCRIPTION_MAX = 10, 2000


def _text(value) -> str:
    return str(value or "").strip()


def validate_complaint_fields(data: dict) -> list[str]:
    """Collect every field problem instead of stopping at the first one."""
    errors: list[str] = []

    if not _text(data.get("orderId")):
        errors.append("Order ID is required")

    subject = _text(data.get("subject"))
    if not subject:
        errors.append("Subject is required")
    elif len(subject) < SUBJECT_MIN:
        errors.append(f"Subject must be at least {SUBJECT_MIN} characters long")
    elif len(subject) > SUBJECT_MAX:
        errors.append(f"Subject must be less than {SUBJECT_MAX} characters")

    category = _text(data.get("category"))
    if not category:
        errors.append("Category is required")
    elif category not in Complaint.Category.values:
        errors.append(f"Invalid category: {category}")

    priority = _text(data.get("priority")).lower()
    if priority and priority not in Complaint.Priority.values:
        errors.append(f"Invalid priority: {priority}")

    description = _text(data.get("description"))
    if not description:
        errors.append("Description is required")
    elif len(description) < DESCRIPTION_MIN:
        errors.append(f"Description must be at least {DESCRIPTION_MIN} characters long")
    elif len(description) > DESCRIPTION_MAX:
        errors.append(f"Description must be less than {DESCRIPTION_MAX} characters")

    return errors


def validate_attachments(files) -> list:
    files = [f for f in (files or []) if f]
    max_count = get_complaint_max_attachments()
    if len(files) > max_count:
        raise BadRequest(f"Too many files. Maximum {max_count} files allowed.")
    max_mb = get_complaint_attachment_max_mb()
    for f in files:
        validate_upload(f, allowed_exts=COMPLAINT_ATTACHMENT_EXTS, max_mb=max_mb, label="attachments")
    return files


def _get_order(order_id) -> Order:
    try:
        return Order.objects.get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Order not found")


def submit_complaint(*, user, data: dict, files=None) -> Complaint:
    errors = validate_complaint_fields(data)
    if errors:
        raise BadRequest("Validation failed", errors=errors)

    files = validate_attachments(files)

    order = _get_order(_text(data.get("orderId")))
    if order.buyer_id != user.pk:
        raise Forbidden("You can only submit complaints for your own orders")
    if order.status != Order.Status.DELIVERED:
        raise BadRequest("Complaints can only be submitted for delivered orders")
    if Complaint.objects.filter(order=order, user=user).exists():
        raise BadRequest("A complaint already exists for this order")

    try:
        with transaction.atomic():
            complaint = Complaint.objects.create(
                user=user,
                order=order,
                subject=_text(data.get("subject")),
                category=_text(data.get("category")),
                priority=_text(data.get("priority")).lower() or Complaint.Priority.MEDIUM,
                description=_text(data.get("description")),
            )
    except IntegrityError:
        raise BadRequest("A complaint already exists for this order")

    stored = 0
    for f in files:
        attachment = ComplaintAttachment.objects.create(
            complaint=complaint,
            original_name=getattr(f, "name", "")[:255],
            content_type=(getattr(f, "content_type", "") or "")[:120],
            size=getattr(f, "size", 0) or 0,
        )
        if attach_file(attachment, "file", f):
            stored += 1
        else:
            attachment.delete()

    logger.info(
        "Complaint %s submitted by user %s for order %s (%s attachment(s))",
        complaint.pk,
        user.pk,
        order.order_number,
        stored,
    )
    return complaint


def complaint_queryset():
    return Complaint.objects.select_related(
        "user",
        "user__profile",
        "order",
        "order__seller",
        "order__seller__profile",
        "resolved_by",
        "resolved_by__profile",
    ).prefetch_related("attachments")


def user_complaints(user, *, order_id: str = ""):
    qs = complaint_queryset().filter(user=user)
    if order_id:
        try:
            qs = qs.filter(order_id=order_id)
        except (ValidationError, ValueError):
            return qs.none()
    return qs


def get_complaint(complaint_id, *, user) -> Complaint:
    try:
        complaint = complaint_queryset().get(pk=complaint_id)
    except (Complaint.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Complaint not found")
    if complaint.user_id != user.pk and not is_admin_user(user):
        raise Forbidden("Access denied")
    return complaint


@transaction.atomic
def update_complaint_status(*, complaint_id, admin, status: str, resolution: str = "", admin_notes: str = "") -> Complaint:
    try:
        complaint = Complaint.objects.select_for_update().get(pk=complaint_id)
    except (Complaint.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Complaint not found")

    status = (status or "").strip().lower()
    if status not in Complaint.Status.values:
        raise BadRequest(f"Invalid complaint status: {status}")

    previous = complaint.status
    complaint.status = status
    fields = ["status", "updated_at"]
    if resolution.strip():
        complaint.resolution = resolution.strip()
        fields.append("resolution")
    if admin_notes.strip():
        complaint.admin_notes = admin_notes.strip()
        fields.append("admin_notes")
    if status == Complaint.Status.RESOLVED:
        complaint.resolved_by = admin
        complaint.resolved_at = timezone.now()
        fields += ["resolved_by", "resolved_at"]
    complaint.save(update_fields=fields)

    logger.info("Complaint %s: %s -> %s by %s", complaint.pk, previous, status, admin.pk)
    return complaint


def all_complaints(*, status: str = "all", category: str = "all", priority: str = "all", search: str = ""):
    qs = complaint_queryset()
    if status and status != "all":
        qs = qs.filter(status=status)
    if category and category != "all":
        qs = qs.filter(category=category)
    if priority and priority != "all":
        qs = qs.filter(priority=priority)
    if search:
        qs = qs.filter(Q(subject__icontains=search) | Q(description__icontains=search))
    return qs


def complaint_stats(*, total: int) -> dict[str, int]:
    stats = {value: 0 for value in Complaint.Status.values}
    for row in Complaint.objects.values("status").annotate(n=Count("id")):
        stats[row["status"]] = row["n"]
    stats["total"] = total
    return stats
