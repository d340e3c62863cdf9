# orders/models.py
from __future__ import annotations

import random
import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone


def generate_order_number(*, now=None) -> str:
    """ORD-YYMMDD-NNNN, unique among existing orders."""
    stamp = (now or timezone.now()).strftime("%y%m%d")
    for _ in range(20):
        candidate = f"ORD-{stamp}-{random.randint(0, 9999):04d}"
        if not Order.objects.filter(order_number=candidate).exists():
            return candidate
    # Busy day: widen the suffix rather than loop forever.
    return f"ORD-{stamp}-{uuid.uuid4().hex[:8].upper()}"


class Order(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        PLACED = "placed", "Placed"
        CONFIRMED = "confirmed", "Confirmed"
        PROCESSING = "processing", "Processing"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"
        RETURNED = "returned", "Returned"
        REFUNDED = "refunded", "Refunded"

    class PaymentMethod(models.TextChoices):
        BANK_TRANSFER = "bank_transfer", "Bank transfer"
        WALLET_TRANSFER = "wallet_transfer", "Wallet transfer"
        CREDIT_CARD = "credit_card", "Credit card"
        DEBIT_CARD = "debit_card", "Debit card"
        PAYPAL = "paypal", "PayPal"
        STRIPE = "stripe", "Stripe"
        CASH_ON_DELIVERY = "cash_on_delivery", "Cash on delivery"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"
        REFUNDED = "refunded", "Refunded"
        PARTIALLY_REFUNDED = "partially_refunded", "Partially refunded"

    class ShippingMethod(models.TextChoices):
        STANDARD = "standard", "Standard"
        EXPRESS = "express", "Express"
        OVERNIGHT = "overnight", "Overnight"

    class ShippingStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        PROCESSING = "processing", "Processing"
        SHIPPED = "shipped", "Shipped"
        DELIVERED = "delivered", "Delivered"
        CANCELLED = "cancelled", "Cancelled"
        RETURNED = "returned", "Returned"

    class RefundStatus(models.TextChoices):
        NONE = "none", "None"
        PENDING = "pending", "Pending"
        PROCESSED = "processed", "Processed"
        COMPLETED = "completed", "Completed"
        FAILED = "failed", "Failed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order_number = models.CharField(max_length=32, unique=True, editable=False)

    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="sales",
    )

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)

    subtotal_cents = models.PositiveIntegerField(default=0)
    shipping_cents = models.PositiveIntegerField(default=0)
    total_cents = models.PositiveIntegerField(default=0)

    shipping_street = models.CharField(max_length=255, blank=True, default="")
    shipping_city = models.CharField(max_length=120, blank=True, default="")
    shipping_state = models.CharField(max_length=120, blank=True, default="")
    shipping_country = models.CharField(max_length=120, blank=True, default="")
    shipping_zip_code = models.CharField(max_length=32, blank=True, default="")
    shipping_phone = models.CharField(max_length=64, blank=True, default="")
    shipping_additional_info = models.TextField(blank=True, default="")

    billing_street = models.CharField(max_length=255, blank=True, default="")
    billing_city = models.CharField(max_length=120, blank=True, default="")
    billing_state = models.CharField(max_length=120, blank=True, default="")
    billing_country = models.CharField(max_length=120, blank=True, default="")
    billing_zip_code = models.CharField(max_length=32, blank=True, default="")
    billing_phone = models.CharField(max_length=64, blank=True, default="")
    billing_additional_info = models.TextField(blank=True, default="")

    # Manual payment: buyer uploads a transfer screenshot, admin approves it.
    payment_screenshot = models.FileField(upload_to="payment_screenshots/%Y/%m/", blank=True, null=True)
    paid_to_bank_account = models.CharField(max_length=120, blank=True, default="")
    paid_to_wallet = models.CharField(max_length=120, blank=True, default="")
    payment_confirmed = models.BooleanField(default=False)
    payment_method = models.CharField(max_length=24, choices=PaymentMethod.choices, default=PaymentMethod.BANK_TRANSFER)
    payment_status = models.CharField(max_length=24, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    payment_date = models.DateTimeField(null=True, blank=True)

    shipping_method = models.CharField(max_length=16, choices=ShippingMethod.choices, default=ShippingMethod.STANDARD)
    shipping_status = models.CharField(max_length=16, choices=ShippingStatus.choices, default=ShippingStatus.PENDING)
    tracking_number = models.CharField(max_length=120, blank=True, default="")
    carrier = models.CharField(max_length=120, blank=True, default="")
    estimated_delivery = models.DateTimeField(null=True, blank=True)
    actual_delivery = models.DateTimeField(null=True, blank=True)
    delivery_notes = models.TextField(blank=True, default="")

    refund_status = models.CharField(max_length=16, choices=RefundStatus.choices, default=RefundStatus.NONE)

    notes = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["buyer", "-created_at"], name="orders_buyer_created_idx"),
            models.Index(fields=["seller", "-created_at"], name="orders_seller_created_idx"),
            models.Index(fields=["status", "-created_at"], name="orders_status_created_idx"),
            models.Index(fields=["payment_confirmed", "status"], name="orders_payment_status_idx"),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.order_number:
            self.order_number = generate_order_number()
        super().save(*args, **kwargs)

    def stock_lines(self):
        from products.inventory import StockLine

        return [
            StockLine(product_id=item.product_id, quantity=item.quantity, color=item.color, size=item.size)
            for item in self.items.all()
        ]

    def add_timeline(self, status: str, note: str = "", *, actor=None) -> "OrderTimelineEntry":
        return OrderTimelineEntry.objects.create(
            order=self,
            status=status,
            note=note or "",
            updated_by=actor if getattr(actor, "is_authenticated", False) else None,
        )


class OrderItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")

    product = models.ForeignKey(
        "products.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )

    quantity = models.PositiveIntegerField(default=1)
    unit_price_cents = models.PositiveIntegerField(default=0, help_text="Includes customization price.")

    color = models.CharField(max_length=40, blank=True, default="")
    size = models.CharField(max_length=20, blank=True, default="")

    customization = models.JSONField(null=True, blank=True)

    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["product", "created_at"], name="orders_item_product_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.quantity} × {self.product_id}"

    @property
    def line_total_cents(self) -> int:
        return int(self.quantity) * int(self.unit_price_cents)


class OrderTimelineEntry(models.Model):
    """Append-only status history for an order."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="timeline")
    status = models.CharField(max_length=16)
    note = models.TextField(blank=True, default="")
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [models.Index(fields=["order", "created_at"], name="orders_timeline_order_idx")]

    def __str__(self) -> str:
        return f"{self.status} ({self.created_at:%Y-%m-%d %H:%M})"
