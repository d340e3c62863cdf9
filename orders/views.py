# orders/views.py
from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404

from accounts.decorators import admin_required, buyer_required, login_required_json, seller_required
from accounts.permissions import is_admin_user, is_seller_user
from core.api import Forbidden, api_view, json_ok, parse_json_field, read_payload
from core.throttle import ORDER_CREATE_RULE, throttle

from . import services
from .models import Order
from .serializers import order_queryset, order_to_dict

logger = logging.getLogger(__name__)


def _reload(order: Order) -> Order:
    return order_queryset().get(pk=order.pk)


@api_view(["POST"])
@buyer_required
@throttle(ORDER_CREATE_RULE)
def create_order(request):
    data = read_payload(request)
    order = services.create_order(
        buyer=request.user,
        data=data,
        screenshot=request.FILES.get("paymentScreenshot"),
    )
    return json_ok({"order": order_to_dict(_reload(order))}, message="Order created successfully", status=201)


@api_view(["GET"])
@buyer_required
def buyer_orders(request):
    qs = order_queryset().filter(buyer=request.user)
    status = (request.GET.get("status") or "").strip()
    if status:
        qs = qs.filter(status=status)
    return json_ok(
        {"orders": [order_to_dict(o) for o in qs]},
        message="Buyer orders retrieved successfully",
    )


@api_view(["GET"])
@seller_required
def seller_orders(request):
    # Unpaid and cancelled orders are not actionable for sellers.
    qs = (
        order_queryset()
        .filter(seller=request.user)
        .exclude(status__in=[Order.Status.PENDING, Order.Status.CANCELLED])
    )
    status = (request.GET.get("status") or "").strip()
    if status:
        qs = qs.filter(status=status)
    return json_ok(
        {"orders": [order_to_dict(o) for o in qs]},
        message="Seller orders retrieved successfully",
    )


@api_view(["GET"])
@admin_required
def pending_payments(request):
    qs = order_queryset().filter(payment_confirmed=False, status=Order.Status.PENDING)
    return json_ok(
        {"orders": [order_to_dict(o) for o in qs]},
        message="Pending payments retrieved successfully",
    )


@api_view(["PATCH", "PUT", "POST"])
@admin_required
def approve_payment(request, order_id):
    order = services.approve_payment(order_id=order_id, actor=request.user)
    return json_ok({"order": order_to_dict(_reload(order))}, message="Payment approved successfully")


@api_view(["GET"])
@login_required_json
def order_detail(request, order_id):
    order = get_object_or_404(order_queryset(), pk=order_id)
    user = request.user
    if user.pk not in (order.buyer_id, order.seller_id) and not is_admin_user(user):
        raise Forbidden("Access denied")
    return json_ok({"order": order_to_dict(order)}, message="Order retrieved successfully")


@api_view(["PATCH", "PUT", "POST"])
@buyer_required
def cancel_order(request, order_id):
    order = services.cancel_order(order_id=order_id, actor=request.user)
    return json_ok({"order": order_to_dict(_reload(order))}, message="Order cancelled successfully")


@api_view(["PATCH", "PUT"])
@seller_required
def update_status(request, order_id):
    payload = read_payload(request)
    order = services.update_order_status(
        order_id=order_id,
        actor=request.user,
        status=str(payload.get("status") or ""),
        note=str(payload.get("note") or ""),
    )
    return json_ok({"order": order_to_dict(_reload(order))}, message="Order status updated successfully")


@api_view(["PATCH", "PUT"])
@seller_required
def update_delivery(request, order_id):
    payload = read_payload(request)
    order, changed = services.update_order_delivery(
        order_id=order_id,
        actor=request.user,
        status=str(payload.get("status") or ""),
        shipping_info=parse_json_field(payload.get("shippingInfo"), field="shipping info"),
    )
    message = (
        "Order delivery information updated successfully"
        if changed
        else "Shipping information updated successfully"
    )
    return json_ok({"order": order_to_dict(_reload(order))}, message=message)


@api_view(["GET"])
@login_required_json
def order_stats(request):
    role = "seller" if is_seller_user(request.user) else "buyer"
    stats = services.order_stats_for(request.user, role=role)
    return json_ok({"stats": stats}, message="Order statistics retrieved successfully")
