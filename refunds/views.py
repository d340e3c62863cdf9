# refunds/views.py
from __future__ import annotations

import logging

from accounts.decorators import admin_required
from core.api import api_view, json_ok, paginate, read_payload
from core.throttle import REFUND_CREATE_RULE, throttle

from . import services
from .serializers import refund_to_dict

logger = logging.getLogger(__name__)


@api_view(["POST"])
@admin_required
@throttle(REFUND_CREATE_RULE)
def process_refund(request):
    refund = services.process_refund(
        admin=request.user,
        data=read_payload(request),
        screenshot=request.FILES.get("refundScreenshot"),
    )
    refund = services.get_refund(refund.pk)
    return json_ok({"refund": refund_to_dict(refund)}, message="Refund processed successfully", status=201)


@api_view(["GET"])
@admin_required
def refund_history(request):
    refunds, pagination = paginate(services.refund_history(), request)
    return json_ok(
        {
            "refunds": [refund_to_dict(r) for r in refunds],
            "pagination": pagination,
        }
    )


@api_view(["GET"])
@admin_required
def refund_detail(request, refund_id):
    refund = services.get_refund(refund_id)
    return json_ok({"refund": refund_to_dict(refund)})


@api_view(["PATCH", "PUT"])
@admin_required
def update_refund_status(request, refund_id):
    payload = read_payload(request)
    services.update_refund_status(
        refund_id=refund_id,
        admin=request.user,
        status=str(payload.get("status") or ""),
        notes=str(payload.get("notes") or ""),
    )
    refund = services.get_refund(refund_id)
    return json_ok({"refund": refund_to_dict(refund)}, message="Refund status updated successfully")
