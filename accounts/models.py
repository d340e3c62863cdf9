from __future__ import annotations

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models


class Profile(models.Model):
    """Marketplace Profile.

    Extends the configured AUTH_USER_MODEL with contact data and role flags.

    Roles:
      - Buyer: default for any registered user
      - Seller: can list products and fulfil the orders placed with them
      - Admin: approves payments/products, records refunds, resolves complaints
        (superuser/staff are treated as admin too)

    Profile is created automatically via signal.
    """

    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="profile")

    full_name = models.CharField(max_length=150, blank=True)

    phone_regex = RegexValidator(
        regex=r"^[0-9\-\+\(\) ]{7,20}$",
        message="Enter a valid phone number (digits and - + ( ) allowed).",
    )
    phone = models.CharField(max_length=20, blank=True, validators=[phone_regex])

    # Seller-facing public label; falls back to username
    business_name = models.CharField(max_length=120, blank=True)

    # Role flags
    is_buyer = models.BooleanField(default=True)
    is_seller = models.BooleanField(default=False)
    is_admin = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["is_seller"], name="accounts_pr_is_sell_8b1f2a_idx"),
            models.Index(fields=["is_admin"], name="accounts_pr_is_admi_3c9d41_idx"),
        ]

    def __str__(self) -> str:
        return f"Profile<{self.user.username}>"

    @property
    def display_name(self) -> str:
        return (self.full_name or "").strip() or self.user.username

    @property
    def public_seller_name(self) -> str:
        return (self.business_name or "").strip() or self.display_name
