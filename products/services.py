# products/services.py
from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import Any

from django.db import transaction

from core.api import BadRequest

from .inventory import replace_variants
from .models import Product

logger = logging.getLogger(__name__)


def _clean_price(raw: Any) -> Decimal:
    try:
        price = Decimal(str(raw)).quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError, TypeError):
        raise BadRequest("Price must be a number")
    if price.is_nan() or price < 0:
        raise BadRequest("Price must be a non-negative number")
    return price


def _clean_stock(raw: Any, *, label: str = "Stock") -> int:
    try:
        stock = int(raw)
    except (TypeError, ValueError):
        raise BadRequest(f"{label} must be a whole number")
    if stock < 0:
        raise BadRequest(f"{label} cannot be negative")
    return stock


def parse_variants(raw: Any) -> list[dict] | None:
    """
    Accepts either a list of {color, size, stock} or the wire shape
    {"stockByVariant": [...]}. Returns None when nothing was sent.
    """
    if raw is None:
        return None
    if isinstance(raw, dict):
        raw = raw.get("stockByVariant")
        if raw is None:
            return None
    if not isinstance(raw, list):
        raise BadRequest("Variants must be a list")

    seen: set[tuple[str, str]] = set()
    out: list[dict] = []
    for entry in raw:
        if not isinstance(entry, dict):
            raise BadRequest("Each variant must have color, size and stock")
        color = str(entry.get("color") or "").strip()
        size = str(entry.get("size") or "").strip()
        if not color or not size:
            raise BadRequest("Each variant must have color, size and stock")
        key = (color, size)
        if key in seen:
            raise BadRequest(f"Duplicate variant {color}/{size}")
        seen.add(key)
        out.append({"color": color, "size": size, "stock": _clean_stock(entry.get("stock", 0), label="Variant stock")})
    return out


@transaction.atomic
def create_product(*, seller, data: dict) -> Product:
    name = str(data.get("name") or "").strip()
    if not name:
        raise BadRequest("Product name is required")
    if data.get("price") in (None, ""):
        raise BadRequest("Price is required")

    variants = parse_variants(data.get("variants"))
    product = Product.objects.create(
        seller=seller,
        name=name,
        description=str(data.get("description") or ""),
        category=str(data.get("category") or "").strip(),
        price=_clean_price(data.get("price")),
        status=Product.Status.PENDING,
    )
    replace_variants(product, variants or None, stock=_clean_stock(data.get("stock", 0)))
    logger.info("Product %s created by seller %s", product.pk, seller.pk)
    return product


@transaction.atomic
def update_product(*, product: Product, data: dict) -> Product:
    fields: list[str] = []
    if "name" in data:
        name = str(data.get("name") or "").strip()
        if not name:
            raise BadRequest("Product name is required")
        product.name = name
        fields.append("name")
    if "description" in data:
        product.description = str(data.get("description") or "")
        fields.append("description")
    if "category" in data:
        product.category = str(data.get("category") or "").strip()
        fields.append("category")
    if "price" in data:
        product.price = _clean_price(data.get("price"))
        fields.append("price")
    if "isActive" in data:
        raw = data.get("isActive")
        product.is_active = raw.strip().lower() in ("1", "true", "yes", "on") if isinstance(raw, str) else bool(raw)
        fields.append("is_active")

    if fields:
        product.save(update_fields=fields + ["updated_at"])

    stock = _clean_stock(data["stock"]) if "stock" in data else None
    replace_variants(product, parse_variants(data.get("variants")), stock=stock)
    product.refresh_from_db()
    return product


def deactivate_product(*, product: Product) -> Product:
    # Orders keep a PROTECT reference to products, so listings are retired, not deleted.
    product.is_active = False
    product.save(update_fields=["is_active", "updated_at"])
    logger.info("Product %s deactivated", product.pk)
    return product


def set_product_status(*, product: Product, status: str) -> Product:
    if status not in Product.Status.values:
        raise BadRequest(f"Invalid status. Must be one of: {', '.join(Product.Status.values)}")
    product.status = status
    product.save(update_fields=["status", "updated_at"])
    logger.info("Product %s status set to %s", product.pk, status)
    return product
