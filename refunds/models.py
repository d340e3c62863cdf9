# refunds/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


class Refund(models.Model):
    """
    Admin-recorded refund for a cancelled order.

    Refunds are paid out manually (bank transfer, wallet or cash); this row is
    the record of it. At most one refund per order.
    """

    class Method(models.TextChoices):
        BANK_TRANSFER = "bank_transfer", "Bank transfer"
        WALLET_TRANSFER = "wallet_transfer", "Wallet transfer"
        CASH_REFUND = "cash_refund", "Cash refund"

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSED = "processed", "Processed"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.OneToOneField(
        "orders.Order",
        on_delete=models.PROTECT,
        related_name="refund",
    )

    # Snapshots of the order parties
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="refunds_received",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="refunds_issued",
    )

    amount_cents = models.PositiveIntegerField()
    method = models.CharField(max_length=24, choices=Method.choices)
    reason = models.TextField()
    notes = models.TextField(blank=True, default="")
    screenshot = models.FileField(upload_to="refund_screenshots/%Y/%m/", blank=True, null=True)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    processed_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    processed_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "-created_at"], name="refunds_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Refund<{self.pk}> {self.status}"

    @property
    def is_final(self) -> bool:
        return self.status == self.Status.COMPLETED
