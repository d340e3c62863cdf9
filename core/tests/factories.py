# core/tests/factories.py
"""Small builders shared by the app test suites."""
from __future__ import annotations

import json
from decimal import Decimal

from django.contrib.auth import get_user_model

from products.inventory import replace_variants
from products.models import Product

PASSWORD = "testpass123"

User = get_user_model()


def make_user(username: str, *, buyer: bool = True, seller: bool = False, admin: bool = False, **extra):
    user = User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=PASSWORD,
        first_name=username.title(),
        **extra,
    )
    profile = user.profile
    profile.is_buyer = buyer
    profile.is_seller = seller
    profile.is_admin = admin
    if seller:
        profile.business_name = f"{username.title()} Prints"
    profile.save()
    return user


def make_product(
    seller,
    *,
    name: str = "Tee",
    price: str = "20.00",
    stock: int = 10,
    variants: list[dict] | None = None,
    status: str = Product.Status.APPROVED,
    **extra,
) -> Product:
    product = Product.objects.create(
        seller=seller,
        name=name,
        price=Decimal(price),
        stock=0 if variants else stock,
        status=status,
        **extra,
    )
    if variants:
        replace_variants(product, variants)
    return Product.objects.prefetch_related("variants").get(pk=product.pk)


def address(**overrides) -> dict:
    data = {
        "street": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "country": "US",
        "zipCode": "62701",
        "phone": "+1 555 0100",
        "additionalInfo": "",
    }
    data.update(overrides)
    return data


def order_payload(seller, lines: list[dict], *, shipping: str = "10.00", **overrides) -> dict:
    """
    lines: [{"product": Product, "quantity": 2, "color": "red", "size": "M", "price": Decimal}]

    Totals are computed from the line prices so the payload is consistent
    unless the caller overrides them.
    """
    items = []
    subtotal = Decimal("0.00")
    for line in lines:
        product = line["product"]
        price = Decimal(str(line.get("price", product.price)))
        qty = int(line.get("quantity", 1))
        item = {"product": product.pk, "quantity": qty, "price": str(price)}
        if line.get("color") or line.get("size"):
            item["variant"] = {"color": line.get("color", ""), "size": line.get("size", "")}
        if line.get("customization"):
            item["customization"] = line["customization"]
        items.append(item)
        subtotal += price * qty

    data = {
        "sellerId": seller.pk,
        "items": items,
        "shippingAddress": address(),
        "billingAddress": address(),
        "subtotal": str(subtotal),
        "totalAmount": str(subtotal + Decimal(shipping)),
        "paidToBankAccount": "Meezan Bank - 0123",
        "paymentMethod": "bank_transfer",
    }
    data.update(overrides)
    return data


def as_json(data: dict) -> str:
    return json.dumps(data)


def place_order(buyer, seller, lines: list[dict], **overrides):
    from orders.services import create_order

    return create_order(buyer=buyer, data=order_payload(seller, lines, **overrides))
