# complaints/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Complaint(models.Model):
    """Buyer complaint about a delivered order, triaged by admins."""

    class Category(models.TextChoices):
        PRODUCT_QUALITY = "Product Quality", "Product Quality"
        WRONG_ITEM = "Wrong Item Received", "Wrong Item Received"
        DAMAGED = "Damaged Product", "Damaged Product"
        SIZE_FIT = "Size/Fit Issues", "Size/Fit Issues"
        MISSING_ITEMS = "Missing Items", "Missing Items"
        DELIVERY = "Delivery Issues", "Delivery Issues"
        SELLER_COMMUNICATION = "Seller Communication", "Seller Communication"
        OTHER = "Other", "Other"

    class Priority(models.TextChoices):
        LOW = "low", "Low"
        MEDIUM = "medium", "Medium"
        HIGH = "high", "High"
        URGENT = "urgent", "Urgent"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        IN_REVIEW = "in_review", "In review"
        RESOLVED = "resolved", "Resolved"
        REJECTED = "rejected", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="complaints",
    )
    order = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="complaints",
    )

    subject = models.CharField(max_length=200)
    category = models.CharField(max_length=32, choices=Category.choices)
    priority = models.CharField(max_length=10, choices=Priority.choices, default=Priority.MEDIUM)
    description = models.TextField()

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    resolution = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")
    resolved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    resolved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="complaints_user_created_idx"),
            models.Index(fields=["status", "-created_at"], name="complaints_status_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(fields=["order", "user"], name="uniq_complaint_order_user"),
        ]

    def __str__(self) -> str:
        return f"Complaint<{self.pk}> {self.subject[:40]}"


class ComplaintAttachment(models.Model):
    complaint = models.ForeignKey(Complaint, on_delete=models.CASCADE, related_name="attachments")
    file = models.FileField(upload_to="complaints/%Y/%m/", blank=True, null=True)
    original_name = models.CharField(max_length=255, blank=True, default="")
    content_type = models.CharField(max_length=120, blank=True, default="")
    size = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self) -> str:
        return self.original_name or f"Attachment {self.pk}"
