# orders/serializers.py
from __future__ import annotations

from payments.utils import cents_to_float
from products.serializers import seller_summary

from .models import Order, OrderItem


def user_summary(user) -> dict | None:
    if user is None:
        return None
    profile = getattr(user, "profile", None)
    return {
        "id": user.pk,
        "fullName": profile.display_name if profile else user.get_username(),
        "email": user.email,
    }


def _address(order: Order, prefix: str) -> dict:
    return {
        "street": getattr(order, f"{prefix}_street"),
        "city": getattr(order, f"{prefix}_city"),
        "state": getattr(order, f"{prefix}_state"),
        "country": getattr(order, f"{prefix}_country"),
        "zipCode": getattr(order, f"{prefix}_zip_code"),
        "phone": getattr(order, f"{prefix}_phone"),
        "additionalInfo": getattr(order, f"{prefix}_additional_info"),
    }


def _file_url(field) -> str | None:
    if not field:
        return None
    try:
        return field.url
    except ValueError:
        return None


def item_to_dict(item: OrderItem) -> dict:
    product = item.product
    return {
        "id": str(item.id),
        "product": {"id": product.pk, "name": product.name, "price": float(product.price)},
        "quantity": item.quantity,
        "price": cents_to_float(item.unit_price_cents),
        "variant": {"color": item.color, "size": item.size} if (item.color or item.size) else {},
        "customization": item.customization,
    }


def order_to_dict(order: Order, *, include_timeline: bool = True) -> dict:
    data = {
        "id": str(order.id),
        "orderNumber": order.order_number,
        "buyer": user_summary(order.buyer),
        "seller": seller_summary(order.seller),
        "items": [item_to_dict(i) for i in order.items.all()],
        "subtotal": cents_to_float(order.subtotal_cents),
        "totalAmount": cents_to_float(order.total_cents),
        "shippingAddress": _address(order, "shipping"),
        "billingAddress": _address(order, "billing"),
        "paymentScreenshot": _file_url(order.payment_screenshot),
        "paidToBankAccount": order.paid_to_bank_account,
        "paidToWallet": order.paid_to_wallet,
        "paymentConfirmed": order.payment_confirmed,
        "paymentInfo": {
            "method": order.payment_method,
            "status": order.payment_status,
            "paymentDate": order.payment_date,
        },
        "shippingInfo": {
            "method": order.shipping_method,
            "cost": cents_to_float(order.shipping_cents),
            "status": order.shipping_status,
            "trackingNumber": order.tracking_number,
            "carrier": order.carrier,
            "estimatedDelivery": order.estimated_delivery,
            "actualDelivery": order.actual_delivery,
            "deliveryNotes": order.delivery_notes,
        },
        "status": order.status,
        "refundStatus": order.refund_status,
        "notes": order.notes,
        "createdAt": order.created_at,
        "updatedAt": order.updated_at,
    }
    if include_timeline:
        data["timeline"] = [
            {
                "status": t.status,
                "date": t.created_at,
                "note": t.note,
                "updatedBy": t.updated_by_id,
            }
            for t in order.timeline.all()
        ]
    return data


def order_queryset():
    return (
        Order.objects.select_related("buyer", "buyer__profile", "seller", "seller__profile")
        .prefetch_related("items__product", "timeline")
    )
