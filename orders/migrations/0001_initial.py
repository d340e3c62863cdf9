import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("products", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("order_number", models.CharField(editable=False, max_length=32, unique=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("placed", "Placed"),
                            ("confirmed", "Confirmed"),
                            ("processing", "Processing"),
                            ("shipped", "Shipped"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                            ("returned", "Returned"),
                            ("refunded", "Refunded"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("subtotal_cents", models.PositiveIntegerField(default=0)),
                ("shipping_cents", models.PositiveIntegerField(default=0)),
                ("total_cents", models.PositiveIntegerField(default=0)),
                ("shipping_street", models.CharField(blank=True, default="", max_length=255)),
                ("shipping_city", models.CharField(blank=True, default="", max_length=120)),
                ("shipping_state", models.CharField(blank=True, default="", max_length=120)),
                ("shipping_country", models.CharField(blank=True, default="", max_length=120)),
                ("shipping_zip_code", models.CharField(blank=True, default="", max_length=32)),
                ("shipping_phone", models.CharField(blank=True, default="", max_length=64)),
                ("shipping_additional_info", models.TextField(blank=True, default="")),
                ("billing_street", models.CharField(blank=True, default="", max_length=255)),
                ("billing_city", models.CharField(blank=True, default="", max_length=120)),
                ("billing_state", models.CharField(blank=True, default="", max_length=120)),
                ("billing_country", models.CharField(blank=True, default="", max_length=120)),
                ("billing_zip_code", models.CharField(blank=True, default="", max_length=32)),
                ("billing_phone", models.CharField(blank=True, default="", max_length=64)),
                ("billing_additional_info", models.TextField(blank=True, default="")),
                (
                    "payment_screenshot",
                    models.FileField(blank=True, null=True, upload_to="payment_screenshots/%Y/%m/"),
                ),
                ("paid_to_bank_account", models.CharField(blank=True, default="", max_length=120)),
                ("paid_to_wallet", models.CharField(blank=True, default="", max_length=120)),
                ("payment_confirmed", models.BooleanField(default=False)),
                (
                    "payment_method",
                    models.CharField(
                        choices=[
                            ("bank_transfer", "Bank transfer"),
                            ("wallet_transfer", "Wallet transfer"),
                            ("credit_card", "Credit card"),
                            ("debit_card", "Debit card"),
                            ("paypal", "PayPal"),
                            ("stripe", "Stripe"),
                            ("cash_on_delivery", "Cash on delivery"),
                        ],
                        default="bank_transfer",
                        max_length=24,
                    ),
                ),
                (
                    "payment_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                            ("refunded", "Refunded"),
                            ("partially_refunded", "Partially refunded"),
                        ],
                        default="pending",
                        max_length=24,
                    ),
                ),
                ("payment_date", models.DateTimeField(blank=True, null=True)),
                (
                    "shipping_method",
                    models.CharField(
                        choices=[("standard", "Standard"), ("express", "Express"), ("overnight", "Overnight")],
                        default="standard",
                        max_length=16,
                    ),
                ),
                (
                    "shipping_status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("shipped", "Shipped"),
                            ("delivered", "Delivered"),
                            ("cancelled", "Cancelled"),
                            ("returned", "Returned"),
                        ],
                        default="pending",
                        max_length=16,
                    ),
                ),
                ("tracking_number", models.CharField(blank=True, default="", max_length=120)),
                ("carrier", models.CharField(blank=True, default="", max_length=120)),
                ("estimated_delivery", models.DateTimeField(blank=True, null=True)),
                ("actual_delivery", models.DateTimeField(blank=True, null=True)),
                ("delivery_notes", models.TextField(blank=True, default="")),
                (
                    "refund_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("pending", "Pending"),
                            ("processed", "Processed"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="none",
                        max_length=16,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="sales",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["buyer", "-created_at"], name="orders_buyer_created_idx"),
                    models.Index(fields=["seller", "-created_at"], name="orders_seller_created_idx"),
                    models.Index(fields=["status", "-created_at"], name="orders_status_created_idx"),
                    models.Index(fields=["payment_confirmed", "status"], name="orders_payment_status_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("quantity", models.PositiveIntegerField(default=1)),
                (
                    "unit_price_cents",
                    models.PositiveIntegerField(default=0, help_text="Includes customization price."),
                ),
                ("color", models.CharField(blank=True, default="", max_length=40)),
                ("size", models.CharField(blank=True, default="", max_length=20)),
                ("customization", models.JSONField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="items",
                        to="orders.order",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order_items",
                        to="products.product",
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["product", "created_at"], name="orders_item_product_idx")],
            },
        ),
        migrations.CreateModel(
            name="OrderTimelineEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(max_length=16)),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="timeline",
                        to="orders.order",
                    ),
                ),
                (
                    "updated_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["created_at", "id"],
                "indexes": [models.Index(fields=["order", "created_at"], name="orders_timeline_order_idx")],
            },
        ),
    ]
