# cart/cart.py
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from core.api import BadRequest, NotFound
from products.models import Product

from .pricing import customization_breakdown

CART_SESSION_KEY = "marketplace_cart_v1"


def product_unit_price(product: Product) -> Decimal:
    return Decimal(str(product.price or "0")).quantize(Decimal("0.01"))


def plain_line_id(product_id: int, color: str, size: str) -> str:
    return f"{product_id}:{color}:{size}"


def _clean_variant(product: Product, color: Any, size: Any) -> tuple[str, str]:
    """Variant products need an existing (color, size); others carry none."""
    color = str(color or "").strip()
    size = str(size or "").strip()
    if not product.has_variants:
        return "", ""
    if not (color and size):
        raise BadRequest(f"Please select a color and size for {product.name}")
    if product.find_variant(color, size) is None:
        raise BadRequest(f"Variant {color}/{size} is not available for {product.name}")
    return color, size


def get_purchasable_product(product_id: Any) -> Product:
    try:
        pid = int(str(product_id).strip())
    except (TypeError, ValueError):
        raise NotFound("Product not found or not available")
    product = (
        Product.objects.filter(pk=pid, is_active=True, status=Product.Status.APPROVED)
        .select_related("seller", "seller__profile")
        .prefetch_related("variants")
        .first()
    )
    if product is None:
        raise NotFound("Product not found or not available")
    return product


@dataclass(frozen=True)
class CartLine:
    id: str
    product: Product
    quantity: int
    color: str = ""
    size: str = ""
    customization: Optional[dict] = field(default=None)

    @property
    def is_customized(self) -> bool:
        return bool(self.customization)

    @property
    def customization_price(self) -> Decimal:
        if not self.customization:
            return Decimal("0.00")
        return Decimal(str(self.customization.get("customizationPrice") or "0")).quantize(Decimal("0.01"))

    @property
    def unit_price(self) -> Decimal:
        return product_unit_price(self.product) + self.customization_price

    @property
    def line_total(self) -> Decimal:
        return (self.unit_price * Decimal(int(self.quantity or 0))).quantize(Decimal("0.01"))


class Cart:
    """
    Session-backed cart.

    Session format:
      {
        "<line_id>": {
            "product": 12,
            "qty": 2,
            "color": "red",
            "size": "M",
            "customization": {...}   # customized lines only
        }
      }

    Plain lines are keyed by (product, color, size) so adding again merges
    quantities. Every customized line gets its own id.
    """

    def __init__(self, request):
        self.request = request
        self.session = request.session
        raw = self.session.get(CART_SESSION_KEY, {})
        self.data: Dict[str, Dict[str, Any]] = raw if isinstance(raw, dict) else {}

    def _save(self) -> None:
        self.session[CART_SESSION_KEY] = self.data
        self.session.modified = True

    def clear(self) -> None:
        self.data = {}
        self._save()

    def add(self, product: Product, quantity: int = 1, color: Any = "", size: Any = "") -> str:
        quantity = int(quantity or 1)
        if quantity < 1:
            raise BadRequest("Item quantity must be at least 1")
        color, size = _clean_variant(product, color, size)

        line_id = plain_line_id(product.pk, color, size)
        if line_id in self.data:
            self.data[line_id]["qty"] = int(self.data[line_id].get("qty", 0)) + quantity
        else:
            self.data[line_id] = {"product": product.pk, "qty": quantity, "color": color, "size": size}
        self._save()
        return line_id

    def add_customized(
        self,
        product: Product,
        customization: Any,
        quantity: int = 1,
        color: Any = "",
        size: Any = "",
    ) -> str:
        if not isinstance(customization, dict) or not isinstance(customization.get("elements"), list):
            raise BadRequest("Valid customization data is required")
        quantity = int(quantity or 1)
        if quantity < 1:
            raise BadRequest("Item quantity must be at least 1")
        color, size = _clean_variant(product, color, size)

        price, breakdown = customization_breakdown(customization["elements"])
        line_id = uuid.uuid4().hex
        self.data[line_id] = {
            "product": product.pk,
            "qty": quantity,
            "color": color,
            "size": size,
            "customization": {
                "elements": customization["elements"],
                "customizationPrice": str(price),
                "totalPrice": str(product_unit_price(product) + price),
                "printQualityBreakdown": breakdown,
                "imageData": customization.get("imageData"),
                "libraries": customization.get("libraries") or {},
            },
        }
        self._save()
        return line_id

    def set_quantity(self, line_id: str, quantity: int) -> None:
        if line_id not in self.data:
            raise NotFound("Item not found in cart")
        q = int(quantity)
        if q <= 0:
            self.remove(line_id)
            return
        self.data[line_id]["qty"] = q
        self._save()

    def remove(self, line_id: str) -> None:
        if line_id not in self.data:
            raise NotFound("Item not found in cart")
        del self.data[line_id]
        self._save()

    def product_ids(self) -> List[int]:
        ids: List[int] = []
        for payload in self.data.values():
            try:
                ids.append(int(payload.get("product")))
            except (TypeError, ValueError):
                continue
        return ids

    def lines(self) -> List[CartLine]:
        products = (
            Product.objects.filter(pk__in=self.product_ids(), is_active=True, status=Product.Status.APPROVED)
            .select_related("seller", "seller__profile")
            .prefetch_related("variants")
        )
        by_id = {p.pk: p for p in products}

        result: List[CartLine] = []
        dirty = False

        for line_id, payload in list(self.data.items()):
            try:
                product = by_id.get(int(payload.get("product")))
            except (TypeError, ValueError):
                product = None
            if product is None:
                # deleted, deactivated or unapproved -> drop
                del self.data[line_id]
                dirty = True
                continue

            result.append(
                CartLine(
                    id=line_id,
                    product=product,
                    quantity=max(1, int(payload.get("qty", 1) or 1)),
                    color=str(payload.get("color") or ""),
                    size=str(payload.get("size") or ""),
                    customization=payload.get("customization") or None,
                )
            )

        if dirty:
            self._save()

        return result

    def subtotal(self) -> Decimal:
        total = Decimal("0.00")
        for line in self.lines():
            total += line.line_total
        return total.quantize(Decimal("0.01"))

    def count_items(self) -> int:
        return sum(int(p.get("qty", 0) or 0) for p in self.data.values())
