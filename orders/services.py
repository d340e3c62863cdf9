# orders/services.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, time
from decimal import Decimal
from typing import Any, Optional

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.db import transaction
from django.db.models import Count
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from accounts.permissions import is_admin_user
from cart.pricing import customization_price
from core.api import BadRequest, Forbidden, NotFound, parse_json_field
from core.config import get_allowed_image_exts, get_shipping_fee, get_upload_max_mb
from core.uploads import attach_file, validate_upload
from payments.services import record_order_cancelled, record_order_confirmed
from payments.utils import money_to_cents, to_decimal
from products.inventory import StockLine, available_stock, reserve_stock, restore_product_stock
from products.models import Product

from .models import Order, OrderItem
from .status import (
    BUYER_CANCELLABLE_STATUSES,
    DELIVERY_EDITABLE_STATUSES,
    DELIVERY_TRANSITIONS,
    assert_transition,
    delivery_note,
)

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = ("street", "city", "state", "country", "zipCode", "phone")
PRICE_TOLERANCE = Decimal("0.01")

S = Order.Status


@dataclass
class ValidatedItem:
    product: Product
    quantity: int
    client_price: Decimal
    unit_price: Decimal
    color: str = ""
    size: str = ""
    customization: Optional[dict] = None

    def stock_line(self) -> StockLine:
        return StockLine(product_id=self.product.pk, quantity=self.quantity, color=self.color, size=self.size)


def _blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_required(data: dict) -> None:
    required = ("sellerId", "items", "shippingAddress", "billingAddress", "totalAmount", "subtotal")
    if any(_blank(data.get(k)) for k in required):
        raise BadRequest(
            "Missing required fields",
            extra={
                "received": {
                    "sellerId": data.get("sellerId"),
                    "hasItems": not _blank(data.get("items")),
                    "hasShippingAddress": not _blank(data.get("shippingAddress")),
                    "hasBillingAddress": not _blank(data.get("billingAddress")),
                    "totalAmount": data.get("totalAmount"),
                    "subtotal": data.get("subtotal"),
                }
            },
        )


def _parse_id(raw: Any) -> int | None:
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        return None


def _parse_items(raw: Any) -> list[dict]:
    items = parse_json_field(raw, field="items data")
    if not isinstance(items, list) or not items:
        raise BadRequest("Items array is required and cannot be empty")
    for item in items:
        if not isinstance(item, dict) or any(_blank(item.get(k)) for k in ("product", "quantity", "price")):
            raise BadRequest("Each item must have product, quantity, and price")
    return items


def _validate_item(item: dict, *, seller_id: int | None) -> ValidatedItem:
    try:
        quantity = int(item["quantity"])
    except (TypeError, ValueError):
        raise BadRequest("Item quantity must be at least 1")
    if quantity < 1:
        raise BadRequest("Item quantity must be at least 1")

    price = to_decimal(item["price"])
    if price is None:
        raise BadRequest("Each item must have product, quantity, and price")
    if price < 0:
        raise BadRequest("Item price cannot be negative")

    product_id = _parse_id(item["product"])
    product = None
    if product_id is not None:
        product = (
            Product.objects.filter(pk=product_id, is_active=True, status=Product.Status.APPROVED)
            .prefetch_related("variants")
            .first()
        )
    if product is None:
        raise NotFound(f"Product with ID {item['product']} not found")

    if seller_id is None or product.seller_id != seller_id:
        raise BadRequest(f"Product {product.name} is not sold by this seller")

    variant = item.get("variant") or {}
    if not isinstance(variant, dict):
        raise BadRequest(f"Invalid variant for {product.name}")
    color = str(variant.get("color") or "").strip()
    size = str(variant.get("size") or "").strip()

    if product.has_variants:
        if not (color and size):
            raise BadRequest(f"Please select a color and size for {product.name}")
        if product.find_variant(color, size) is None:
            raise BadRequest(f"Variant {color}/{size} is not available for {product.name}")
    else:
        color = size = ""

    customization = item.get("customization") or None
    if customization is not None and not isinstance(customization, dict):
        raise BadRequest(f"Invalid customization for {product.name}")

    unit_price = (product.price + customization_price(customization)).quantize(Decimal("0.01"))
    if abs(price - unit_price) > PRICE_TOLERANCE:
        raise BadRequest(f"Price mismatch for {product.name}")

    return ValidatedItem(
        product=product,
        quantity=quantity,
        client_price=price,
        unit_price=unit_price,
        color=color,
        size=size,
        customization=customization,
    )


def _check_stock(items: list[ValidatedItem]) -> None:
    requested: dict[tuple[int, str, str], int] = {}
    for it in items:
        key = (it.product.pk, it.color, it.size)
        requested[key] = requested.get(key, 0) + it.quantity

    seen: set[tuple[int, str, str]] = set()
    for it in items:
        key = (it.product.pk, it.color, it.size)
        if key in seen:
            continue
        seen.add(key)
        available = available_stock(it.product, color=it.color, size=it.size) or 0
        if available < requested[key]:
            raise BadRequest(
                f"Insufficient stock for {it.product.name}. Available: {available}, Requested: {requested[key]}"
            )


def _parse_address(raw: Any) -> dict:
    address = parse_json_field(raw, field="address data")
    if not isinstance(address, dict):
        raise BadRequest("Invalid address data format")
    return address


def _check_addresses(shipping: dict, billing: dict) -> None:
    for field in ADDRESS_FIELDS:
        if _blank(shipping.get(field)):
            raise BadRequest(f"Missing required shipping address field: {field}")
        if _blank(billing.get(field)):
            raise BadRequest(f"Missing required billing address field: {field}")


def _address_fields(prefix: str, address: dict) -> dict:
    return {
        f"{prefix}_street": str(address.get("street") or "").strip(),
        f"{prefix}_city": str(address.get("city") or "").strip(),
        f"{prefix}_state": str(address.get("state") or "").strip(),
        f"{prefix}_country": str(address.get("country") or "").strip(),
        f"{prefix}_zip_code": str(address.get("zipCode") or "").strip(),
        f"{prefix}_phone": str(address.get("phone") or "").strip(),
        f"{prefix}_additional_info": str(address.get("additionalInfo") or "").strip(),
    }


def create_order(*, buyer, data: dict, screenshot=None) -> Order:
    """
    Validate a checkout submission, then create the order and reserve stock
    in one transaction. The payment screenshot is attached afterwards and a
    storage failure there does not fail the order.
    """
    _check_required(data)

    bank = str(data.get("paidToBankAccount") or "").strip()
    wallet = str(data.get("paidToWallet") or "").strip()
    if not bank and not wallet:
        raise BadRequest("Must specify either bank account or wallet payment")

    payment_method = str(data.get("paymentMethod") or "").strip() or (
        Order.PaymentMethod.BANK_TRANSFER if bank else Order.PaymentMethod.WALLET_TRANSFER
    )
    if payment_method not in Order.PaymentMethod.values:
        raise BadRequest(f"Invalid payment method: {payment_method}")

    validate_upload(
        screenshot,
        allowed_exts=get_allowed_image_exts(),
        max_mb=get_upload_max_mb(),
        label="paymentScreenshot",
    )

    seller_id = _parse_id(data.get("sellerId"))
    raw_items = _parse_items(data.get("items"))
    items = [_validate_item(item, seller_id=seller_id) for item in raw_items]

    seller = get_user_model().objects.filter(pk=seller_id, profile__is_seller=True).first()
    if seller is None:
        raise NotFound("Seller not found")

    _check_stock(items)

    shipping = _parse_address(data.get("shippingAddress"))
    billing = _parse_address(data.get("billingAddress"))
    _check_addresses(shipping, billing)

    fee = get_shipping_fee()
    # Compared against the amounts that get stored, not the client's line prices.
    calculated_subtotal = sum((it.unit_price * it.quantity for it in items), Decimal("0"))
    subtotal = to_decimal(data.get("subtotal"))
    if subtotal is None or abs(calculated_subtotal - subtotal) > PRICE_TOLERANCE:
        raise BadRequest("Subtotal calculation mismatch")

    total = to_decimal(data.get("totalAmount"))
    if total is None or abs(calculated_subtotal + fee - total) > PRICE_TOLERANCE:
        raise BadRequest("Total amount calculation mismatch")

    with transaction.atomic():
        # Re-checked under row locks: a concurrent buyer may have taken the stock.
        reserve_stock([it.stock_line() for it in items])

        subtotal_cents = sum(money_to_cents(it.unit_price) * it.quantity for it in items)
        shipping_cents = money_to_cents(fee)
        now = timezone.now()

        order = Order.objects.create(
            buyer=buyer,
            seller=seller,
            status=S.PENDING,
            subtotal_cents=subtotal_cents,
            shipping_cents=shipping_cents,
            total_cents=subtotal_cents + shipping_cents,
            paid_to_bank_account=bank,
            paid_to_wallet=wallet,
            payment_method=payment_method,
            payment_status=Order.PaymentStatus.PENDING,
            payment_date=None,
            shipping_method=Order.ShippingMethod.STANDARD,
            shipping_status=Order.ShippingStatus.PENDING,
            notes=str(data.get("notes") or "").strip(),
            created_at=now,
            **_address_fields("shipping", shipping),
            **_address_fields("billing", billing),
        )

        OrderItem.objects.bulk_create(
            [
                OrderItem(
                    order=order,
                    product=it.product,
                    quantity=it.quantity,
                    unit_price_cents=money_to_cents(it.unit_price),
                    color=it.color,
                    size=it.size,
                    customization=it.customization,
                )
                for it in items
            ]
        )
        order.add_timeline(S.PENDING, "Order placed successfully", actor=buyer)

    logger.info(
        "Order %s created: buyer=%s seller=%s total_cents=%s items=%s",
        order.order_number,
        buyer.pk,
        seller.pk,
        order.total_cents,
        len(items),
    )

    if screenshot:
        attach_file(order, "payment_screenshot", screenshot, update_fields=["updated_at"])

    return order


# ============================================================
# Status transitions
# ============================================================
def _lock_order(order_id) -> Order:
    try:
        return Order.objects.select_for_update().get(pk=order_id)
    except (Order.DoesNotExist, ValidationError, ValueError):
        raise NotFound("Order not found")


_SHIPPING_STATUS_FOR = {
    S.PROCESSING: Order.ShippingStatus.PROCESSING,
    S.SHIPPED: Order.ShippingStatus.SHIPPED,
    S.DELIVERED: Order.ShippingStatus.DELIVERED,
    S.CANCELLED: Order.ShippingStatus.CANCELLED,
    S.RETURNED: Order.ShippingStatus.RETURNED,
}


def _apply_transition(order: Order, new_status: str, *, actor, note: str = "", extra_fields: list[str] | None = None) -> Order:
    """
    Write a status change together with its side effects.

    Caller holds the row lock and has already validated the transition.
    """
    previous = order.status
    order.status = new_status
    fields = ["status", "updated_at"] + list(extra_fields or [])

    if new_status == S.CONFIRMED and previous != S.CONFIRMED:
        record_order_confirmed(order, actor=actor)

    if new_status == S.CANCELLED:
        if previous == S.CONFIRMED:
            record_order_cancelled(order, actor=actor)
        if previous in (S.PENDING, S.CONFIRMED):
            restore_product_stock(order.stock_lines())

    shipping_status = _SHIPPING_STATUS_FOR.get(new_status)
    if shipping_status and order.shipping_status != shipping_status:
        order.shipping_status = shipping_status
        fields.append("shipping_status")

    if new_status == S.DELIVERED and not order.actual_delivery:
        order.actual_delivery = timezone.now()
        fields.append("actual_delivery")

    order.save(update_fields=list(dict.fromkeys(fields)))
    order.add_timeline(new_status, note, actor=actor)

    logger.info("Order %s: %s -> %s by %s", order.order_number, previous, new_status, getattr(actor, "pk", None))
    return order


@transaction.atomic
def update_order_status(*, order_id, actor, status: str, note: str = "") -> Order:
    order = _lock_order(order_id)

    if order.seller_id != actor.pk and not is_admin_user(actor):
        raise Forbidden("Access denied")

    status = (status or "").strip()
    assert_transition(order.status, status)

    if status == S.PLACED and not order.payment_confirmed:
        raise BadRequest("Payment must be approved before the order can be placed")

    if status == S.REFUNDED:
        from refunds.models import Refund

        if not Refund.objects.filter(order=order).exists():
            raise BadRequest("Cannot mark order as refunded without a refund record")

    return _apply_transition(order, status, actor=actor, note=note or f"Order status updated to {status}")


def _parse_when(raw: Any, *, field: str):
    if _blank(raw):
        return None
    value = str(raw).strip()
    dt = parse_datetime(value)
    if dt is None:
        d = parse_date(value)
        if d is None:
            raise BadRequest(f"Invalid {field} date")
        dt = datetime.combine(d, time.min)
    if timezone.is_naive(dt):
        dt = timezone.make_aware(dt)
    return dt


def _apply_shipping_info(order: Order, info: dict) -> list[str]:
    fields: list[str] = []
    if "trackingNumber" in info:
        order.tracking_number = str(info.get("trackingNumber") or "").strip()
        fields.append("tracking_number")
    if "carrier" in info:
        order.carrier = str(info.get("carrier") or "").strip()
        fields.append("carrier")
    if "deliveryNotes" in info:
        order.delivery_notes = str(info.get("deliveryNotes") or "").strip()
        fields.append("delivery_notes")
    if "estimatedDelivery" in info:
        order.estimated_delivery = _parse_when(info.get("estimatedDelivery"), field="estimatedDelivery")
        fields.append("estimated_delivery")
    if "method" in info:
        method = str(info.get("method") or "").strip()
        if method not in Order.ShippingMethod.values:
            raise BadRequest(f"Invalid shipping method: {method}")
        order.shipping_method = method
        fields.append("shipping_method")
    return fields


@transaction.atomic
def update_order_delivery(*, order_id, actor, status: str = "", shipping_info: Optional[dict] = None) -> tuple[Order, bool]:
    """
    Seller delivery flow. Returns (order, status_changed).

    Same status as the current one only updates the shipping details.
    """
    order = _lock_order(order_id)

    if order.seller_id != actor.pk:
        raise Forbidden("Access denied")

    if order.status not in DELIVERY_EDITABLE_STATUSES:
        raise BadRequest("Only confirmed, processing, and shipped orders can be updated for delivery")

    info = shipping_info if isinstance(shipping_info, dict) else {}
    status = (status or "").strip() or order.status
    fields = _apply_shipping_info(order, info)

    if status == order.status:
        if fields:
            order.save(update_fields=fields + ["updated_at"])
        return order, False

    assert_transition(order.status, status, table=DELIVERY_TRANSITIONS)
    note = delivery_note(status, carrier=order.carrier, tracking_number=order.tracking_number)
    return _apply_transition(order, status, actor=actor, note=note, extra_fields=fields), True


@transaction.atomic
def cancel_order(*, order_id, actor) -> Order:
    order = _lock_order(order_id)

    if order.buyer_id != actor.pk:
        raise Forbidden("You can only cancel your own orders")

    if order.status not in BUYER_CANCELLABLE_STATUSES:
        raise BadRequest("Order cannot be cancelled at this stage")

    return _apply_transition(order, S.CANCELLED, actor=actor, note="Order cancelled by buyer")


def mark_refunded(order: Order, *, actor, note: str = "") -> Order:
    """Completed refund: cancelled -> refunded. Caller holds the row lock."""
    order.payment_status = Order.PaymentStatus.REFUNDED
    if order.status != S.CANCELLED:
        order.save(update_fields=["payment_status", "refund_status", "updated_at"])
        return order
    return _apply_transition(
        order,
        S.REFUNDED,
        actor=actor,
        note=note or "Refund completed",
        extra_fields=["payment_status", "refund_status"],
    )


@transaction.atomic
def approve_payment(*, order_id, actor) -> Order:
    order = _lock_order(order_id)

    if order.payment_confirmed:
        raise BadRequest("Payment already confirmed")

    assert_transition(order.status, S.PLACED)

    order.payment_confirmed = True
    order.payment_status = Order.PaymentStatus.COMPLETED
    order.payment_date = timezone.now()
    return _apply_transition(
        order,
        S.PLACED,
        actor=actor,
        note="Payment approved by admin",
        extra_fields=["payment_confirmed", "payment_status", "payment_date"],
    )


# ============================================================
# Stats
# ============================================================
def status_counts(qs) -> dict[str, int]:
    counts = {value: 0 for value in S.values}
    for row in qs.values("status").annotate(n=Count("id")):
        counts[row["status"]] = row["n"]
    return counts


def order_stats_for(user, *, role: str) -> dict:
    if role == "seller":
        qs = Order.objects.filter(seller=user)
    else:
        qs = Order.objects.filter(buyer=user)

    counts = status_counts(qs)
    return {
        "totalOrders": sum(counts.values()),
        "pendingOrders": counts[S.PENDING],
        "completedOrders": counts[S.DELIVERED],
        "statusCounts": counts,
    }
