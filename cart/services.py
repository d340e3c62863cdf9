# cart/services.py
"""
Checkout-side cart checks. These take the client's item list, so they work
for the session cart and for clients that keep their own cart state.
"""
from __future__ import annotations

from decimal import Decimal
from typing import Any

from core.api import BadRequest, NotFound
from core.config import get_shipping_fee
from payments.utils import to_decimal
from products.inventory import available_stock
from products.models import Product

from .pricing import customization_price

PRICE_TOLERANCE = Decimal("0.01")


def _int(raw: Any) -> int | None:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def validate_cart_for_checkout(items: Any, seller_id: Any) -> dict:
    if not isinstance(items, list) or not items:
        raise BadRequest("Cart items are required")
    if seller_id in (None, ""):
        raise BadRequest("Seller ID is required")

    validated: list[dict] = []
    subtotal = Decimal("0.00")

    for item in items:
        if not isinstance(item, dict) or not item.get("product") or not item.get("quantity") or item.get("price") in (None, ""):
            raise BadRequest("Each item must have product, quantity, and price")

        product = (
            Product.objects.filter(
                pk=_int(item["product"]) or 0,
                seller_id=_int(seller_id) or 0,
                is_active=True,
                status=Product.Status.APPROVED,
            )
            .prefetch_related("variants")
            .first()
        )
        if product is None:
            raise BadRequest(f"Product {item.get('name') or item['product']} is not available")

        quantity = _int(item["quantity"])
        if quantity is None or quantity < 1:
            raise BadRequest("Item quantity must be at least 1")

        variant = item.get("variant") if isinstance(item.get("variant"), dict) else {}
        color = str(variant.get("color") or "").strip()
        size = str(variant.get("size") or "").strip()
        if product.has_variants and not (color and size):
            raise BadRequest(f"Please select a color and size for {product.name}")

        available = available_stock(product, color=color, size=size) or 0
        if available < quantity:
            raise BadRequest(f"Insufficient stock for {product.name}")

        unit_price = (product.price + customization_price(item.get("customization"))).quantize(Decimal("0.01"))
        price = to_decimal(item.get("price"))
        if price is None or abs(price - unit_price) > PRICE_TOLERANCE:
            raise BadRequest(f"Price mismatch for {product.name}")

        validated.append(
            {
                "product": product.pk,
                "quantity": quantity,
                "price": float(unit_price),
                "name": product.name,
                "variant": {"color": color, "size": size} if product.has_variants else {},
            }
        )
        subtotal += unit_price * quantity

    shipping = get_shipping_fee()
    return {
        "validatedItems": validated,
        "subtotal": float(subtotal),
        "shippingCost": float(shipping),
        "totalAmount": float(subtotal + shipping),
        "itemCount": len(items),
    }


def cart_summary(items: Any) -> dict:
    if not isinstance(items, list):
        raise BadRequest("Items array is required")

    subtotal = Decimal("0.00")
    count = 0
    for item in items:
        if not isinstance(item, dict):
            continue
        price = to_decimal(item.get("price"))
        quantity = _int(item.get("quantity"))
        if price and quantity:
            subtotal += price * quantity
            count += quantity

    shipping = get_shipping_fee()
    return {
        "subtotal": float(subtotal),
        "shippingCost": float(shipping),
        "totalAmount": float(subtotal + shipping),
        "itemCount": count,
    }


def check_product_availability(product_id: int, quantity: int, *, color: str = "", size: str = "") -> dict:
    product = Product.objects.filter(pk=product_id).prefetch_related("variants").first()
    if product is None:
        raise NotFound("Product not found")
    if not product.is_purchasable:
        raise BadRequest("Product is not available")

    if color or size:
        stock = available_stock(product, color=color, size=size) or 0
    else:
        stock = product.stock

    return {
        "isAvailable": stock >= quantity,
        "availableStock": stock,
        "requestedQuantity": quantity,
        "price": float(product.price),
    }
