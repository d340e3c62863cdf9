# products/models.py
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Product(models.Model):
    """
    A seller listing.

    `stock` is a stored aggregate. When a product has variants it is always
    derived from them (see products.inventory); never write it directly.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending review"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="products",
    )

    name = models.CharField(max_length=160)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=80, blank=True, db_index=True)

    price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.00"))],
    )

    stock = models.PositiveIntegerField(default=0)
    sold_count = models.PositiveIntegerField(default=0)

    status = models.CharField(max_length=16, choices=Status.choices, default=Status.PENDING)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "is_active", "created_at"], name="products_status_active_idx"),
            models.Index(fields=["seller", "created_at"], name="products_seller_created_idx"),
        ]

    def __str__(self) -> str:
        return self.name

    @property
    def is_purchasable(self) -> bool:
        return self.is_active and self.status == self.Status.APPROVED

    def variant_list(self) -> list["ProductVariant"]:
        # Uses the prefetch cache when present.
        return list(self.variants.all())

    @property
    def has_variants(self) -> bool:
        return bool(self.variant_list())

    def find_variant(self, color: str, size: str) -> "ProductVariant | None":
        for v in self.variant_list():
            if v.color == color and v.size == size:
                return v
        return None


class ProductVariant(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name="variants")
    color = models.CharField(max_length=40)
    size = models.CharField(max_length=20)
    stock = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["product", "color", "size"], name="uniq_product_variant"),
        ]

    def __str__(self) -> str:
        return f"{self.product_id} {self.color}/{self.size} ({self.stock})"
