# dashboards/views.py

from __future__ import annotations

import logging

from django.shortcuts import get_object_or_404

from accounts.decorators import admin_required, login_required_json
from core.api import api_view, json_ok, paginate, read_payload
from orders import services as order_services
from orders.serializers import order_queryset, order_to_dict

from . import services

logger = logging.getLogger(__name__)


@api_view(["GET"])
@admin_required
def orders_list(request):
    qs = services.admin_orders(
        status=(request.GET.get("status") or "all").strip(),
        search=(request.GET.get("search") or "").strip(),
    )
    orders, pagination = paginate(qs, request)
    return json_ok(
        {
            "orders": [order_to_dict(o, include_timeline=False) for o in orders],
            "pagination": pagination,
        }
    )


@api_view(["GET"])
@admin_required
def order_detail(request, order_id):
    order = get_object_or_404(order_queryset(), pk=order_id)
    return json_ok({"order": order_to_dict(order)})


@api_view(["PATCH", "PUT"])
@admin_required
def order_status(request, order_id):
    payload = read_payload(request)
    order = order_services.update_order_status(
        order_id=order_id,
        actor=request.user,
        status=str(payload.get("status") or ""),
        note=str(payload.get("notes") or payload.get("note") or ""),
    )
    order = order_queryset().get(pk=order.pk)
    return json_ok({"order": order_to_dict(order)}, message="Order status updated successfully")


@api_view(["GET"])
@admin_required
def order_stats(request):
    return json_ok({"stats": services.admin_order_stats()})


@api_view(["GET"])
@admin_required
def activities(request):
    return json_ok({"activities": services.recent_activities()})


@api_view(["GET"])
@login_required_json
def bank_info(request):
    # Buyers need this at checkout, so any signed-in user may read it.
    return json_ok(services.bank_info(), message="Bank information retrieved successfully")
