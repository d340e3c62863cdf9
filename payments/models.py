# payments/models.py
from __future__ import annotations

import uuid

from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone


class RevenueEntry(models.Model):
    """
    Append-only ledger for marketplace (admin) revenue.

    amount_cents:
      > 0  => order confirmed, revenue booked
      < 0  => confirmed order cancelled, or a negative adjustment

    Current revenue is the sum of all entries. Rows are never updated.
    """

    class Reason(models.TextChoices):
        ORDER_CONFIRMED = "order_confirmed", "Order confirmed"
        ORDER_CANCELLED = "order_cancelled", "Confirmed order cancelled"
        ADJUSTMENT = "adjustment", "Reconciliation adjustment"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    amount_cents = models.IntegerField(help_text="Signed cents.")
    reason = models.CharField(max_length=32, choices=Reason.choices)

    order = models.ForeignKey(
        "orders.Order",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="revenue_entries",
    )

    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    note = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        ordering = ("-created_at",)
        indexes = [
            models.Index(fields=["order", "reason"], name="payments_rev_order_reason_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "reason"],
                condition=~Q(reason="adjustment"),
                name="uniq_revenue_order_reason",
            )
        ]

    def __str__(self) -> str:
        return f"{self.order_id or '-'}: {self.amount_cents} ({self.reason})"


class AdminBankAccount(models.Model):
    """Where buyers send manual payments (bank transfer or mobile wallet)."""

    class Kind(models.TextChoices):
        BANK = "bank", "Bank account"
        WALLET = "wallet", "Mobile wallet"

    kind = models.CharField(max_length=10, choices=Kind.choices, default=Kind.BANK)
    provider = models.CharField(max_length=120, help_text="Bank or wallet provider name.")
    account_title = models.CharField(max_length=120)
    account_number = models.CharField(max_length=64)
    iban = models.CharField(max_length=64, blank=True)
    branch_code = models.CharField(max_length=32, blank=True)

    is_active = models.BooleanField(default=True)
    sort_order = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "id"]

    def __str__(self) -> str:
        return f"{self.provider} ({self.account_title})"
