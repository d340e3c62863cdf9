import uuid

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AdminBankAccount",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "kind",
                    models.CharField(
                        choices=[("bank", "Bank account"), ("wallet", "Mobile wallet")],
                        default="bank",
                        max_length=10,
                    ),
                ),
                ("provider", models.CharField(help_text="Bank or wallet provider name.", max_length=120)),
                ("account_title", models.CharField(max_length=120)),
                ("account_number", models.CharField(max_length=64)),
                ("iban", models.CharField(blank=True, max_length=64)),
                ("branch_code", models.CharField(blank=True, max_length=32)),
                ("is_active", models.BooleanField(default=True)),
                ("sort_order", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "ordering": ["sort_order", "id"],
            },
        ),
        migrations.CreateModel(
            name="RevenueEntry",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount_cents", models.IntegerField(help_text="Signed cents.")),
                (
                    "reason",
                    models.CharField(
                        choices=[
                            ("order_confirmed", "Order confirmed"),
                            ("order_cancelled", "Confirmed order cancelled"),
                            ("adjustment", "Reconciliation adjustment"),
                        ],
                        max_length=32,
                    ),
                ),
                ("note", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                (
                    "actor",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "order",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="revenue_entries",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "ordering": ("-created_at",),
                "indexes": [models.Index(fields=["order", "reason"], name="payments_rev_order_reason_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("reason", "adjustment"), _negated=True),
                        fields=("order", "reason"),
                        name="uniq_revenue_order_reason",
                    )
                ],
            },
        ),
    ]
