import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Profile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("full_name", models.CharField(blank=True, max_length=150)),
                (
                    "phone",
                    models.CharField(
                        blank=True,
                        max_length=20,
                        validators=[
                            django.core.validators.RegexValidator(
                                message="Enter a valid phone number (digits and - + ( ) allowed).",
                                regex="^[0-9\\-\\+\\(\\) ]{7,20}$",
                            )
                        ],
                    ),
                ),
                ("business_name", models.CharField(blank=True, max_length=120)),
                ("is_buyer", models.BooleanField(default=True)),
                ("is_seller", models.BooleanField(default=False)),
                ("is_admin", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.OneToOneField(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="profile",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "indexes": [
                    models.Index(fields=["is_seller"], name="accounts_pr_is_sell_8b1f2a_idx"),
                    models.Index(fields=["is_admin"], name="accounts_pr_is_admi_3c9d41_idx"),
                ],
            },
        ),
    ]
