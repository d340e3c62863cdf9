# complaints/views.py
from __future__ import annotations

import logging

from accounts.decorators import admin_required, buyer_required, login_required_json
from core.api import api_view, json_ok, paginate, read_payload
from core.throttle import COMPLAINT_CREATE_RULE, throttle

from . import services
from .serializers import complaint_to_dict

logger = logging.getLogger(__name__)


@api_view(["POST"])
@buyer_required
@throttle(COMPLAINT_CREATE_RULE)
def submit_complaint(request):
    complaint = services.submit_complaint(
        user=request.user,
        data=read_payload(request),
        files=request.FILES.getlist("attachments"),
    )
    return json_ok(
        {
            "complaint": {
                "id": str(complaint.id),
                "subject": complaint.subject,
                "category": complaint.category,
                "priority": complaint.priority,
                "status": complaint.status,
                "createdAt": complaint.created_at,
                "attachmentsCount": complaint.attachments.count(),
            }
        },
        message="Complaint submitted successfully",
        status=201,
    )


@api_view(["GET"])
@login_required_json
def user_complaints(request):
    qs = services.user_complaints(request.user, order_id=(request.GET.get("orderId") or "").strip())
    complaints, pagination = paginate(qs, request)
    return json_ok(
        {
            "complaints": [complaint_to_dict(c) for c in complaints],
            "pagination": pagination,
        }
    )


@api_view(["GET"])
@login_required_json
def complaint_detail(request, complaint_id):
    complaint = services.get_complaint(complaint_id, user=request.user)
    return json_ok({"complaint": complaint_to_dict(complaint)})


@api_view(["PATCH", "PUT"])
@admin_required
def update_complaint_status(request, complaint_id):
    payload = read_payload(request)
    services.update_complaint_status(
        complaint_id=complaint_id,
        admin=request.user,
        status=str(payload.get("status") or ""),
        resolution=str(payload.get("resolution") or ""),
        admin_notes=str(payload.get("adminNotes") or ""),
    )
    complaint = services.get_complaint(complaint_id, user=request.user)
    return json_ok({"complaint": complaint_to_dict(complaint)}, message="Complaint status updated successfully")


@api_view(["GET"])
@admin_required
def all_complaints(request):
    qs = services.all_complaints(
        status=(request.GET.get("status") or "all").strip(),
        category=(request.GET.get("category") or "all").strip(),
        priority=(request.GET.get("priority") or "all").strip(),
        search=(request.GET.get("search") or "").strip(),
    )
    complaints, pagination = paginate(qs, request)
    return json_ok(
        {
            "complaints": [complaint_to_dict(c) for c in complaints],
            "pagination": pagination,
            "stats": services.complaint_stats(total=pagination["totalItems"]),
        }
    )
