# cart/views.py
from __future__ import annotations

import logging
from typing import Any

from accounts.decorators import login_required_json
from core.api import BadRequest, api_view, json_ok, parse_json_field, read_payload
from core.throttle import CART_MUTATE_RULE, throttle
from payments.utils import cents_to_float, money_to_cents
from products.serializers import seller_summary

from . import services
from .cart import Cart, CartLine, get_purchasable_product

logger = logging.getLogger(__name__)


# ============================================================
# Helpers
# ============================================================
def _parse_quantity(raw: Any, *, default: int | None = None) -> int:
    if raw in (None, "") and default is not None:
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise BadRequest("Quantity must be a whole number")


def _line_to_dict(line: CartLine) -> dict:
    product = line.product
    return {
        "id": line.id,
        "product": {
            "id": product.pk,
            "name": product.name,
            "price": float(product.price),
            "seller": seller_summary(product.seller),
        },
        "quantity": line.quantity,
        "color": line.color,
        "size": line.size,
        "price": float(line.unit_price),
        "lineTotal": float(line.line_total),
        "isCustomized": line.is_customized,
        "customization": line.customization,
    }


def _cart_response(cart: Cart, *, message: str = "", status: int = 200):
    lines = cart.lines()
    total_cents = sum(money_to_cents(line.line_total) for line in lines)
    return json_ok(
        {
            "items": [_line_to_dict(line) for line in lines],
            "totalAmount": cents_to_float(total_cents),
            "itemCount": sum(line.quantity for line in lines),
        },
        message=message,
        status=status,
    )


# ============================================================
# Session cart
# ============================================================
@api_view(["GET"])
@login_required_json
def cart_detail(request):
    return _cart_response(Cart(request))


@api_view(["POST"])
@login_required_json
@throttle(CART_MUTATE_RULE)
def cart_add(request):
    payload = read_payload(request)
    product = get_purchasable_product(payload.get("productId"))
    cart = Cart(request)
    cart.add(
        product,
        quantity=_parse_quantity(payload.get("quantity"), default=1),
        color=payload.get("color"),
        size=payload.get("size"),
    )
    logger.info("Cart add: user=%s product=%s", request.user.pk, product.pk)
    return _cart_response(cart, message="Product added to cart successfully")


@api_view(["POST"])
@login_required_json
@throttle(CART_MUTATE_RULE)
def cart_add_customized(request):
    payload = read_payload(request)
    product = get_purchasable_product(payload.get("productId"))
    cart = Cart(request)
    cart.add_customized(
        product,
        parse_json_field(payload.get("customization"), field="customization"),
        quantity=_parse_quantity(payload.get("quantity"), default=1),
        color=payload.get("color"),
        size=payload.get("size"),
    )
    logger.info("Cart add customized: user=%s product=%s", request.user.pk, product.pk)
    return _cart_response(cart, message="Customized product added to cart successfully")


@api_view(["PATCH", "PUT", "POST"])
@login_required_json
@throttle(CART_MUTATE_RULE)
def cart_update(request):
    payload = read_payload(request)
    item_id = str(payload.get("itemId") or "").strip()
    if not item_id:
        raise BadRequest("Item ID is required")
    cart = Cart(request)
    cart.set_quantity(item_id, _parse_quantity(payload.get("quantity")))
    return _cart_response(cart, message="Cart updated successfully")


@api_view(["DELETE", "POST"])
@login_required_json
@throttle(CART_MUTATE_RULE)
def cart_remove(request, item_id: str):
    cart = Cart(request)
    cart.remove(item_id)
    return _cart_response(cart, message="Item removed from cart")


@api_view(["DELETE", "POST"])
@login_required_json
@throttle(CART_MUTATE_RULE)
def cart_clear(request):
    Cart(request).clear()
    return json_ok(message="Cart cleared successfully")


# ============================================================
# Checkout helpers
# ============================================================
@api_view(["POST"])
@login_required_json
def cart_validate(request):
    payload = read_payload(request)
    data = services.validate_cart_for_checkout(
        parse_json_field(payload.get("items"), field="items data"),
        payload.get("sellerId"),
    )
    return json_ok(data, message="Cart validated successfully")


@api_view(["POST"])
@login_required_json
def cart_summary(request):
    payload = read_payload(request)
    data = services.cart_summary(parse_json_field(payload.get("items"), field="items data"))
    return json_ok(data, message="Cart summary calculated successfully")


@api_view(["GET"])
def product_availability(request, product_id: int, quantity: int):
    data = services.check_product_availability(
        product_id,
        quantity,
        color=(request.GET.get("color") or "").strip(),
        size=(request.GET.get("size") or "").strip(),
    )
    return json_ok(data, message="Product availability checked successfully")
