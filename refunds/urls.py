# refunds/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "refunds"

urlpatterns = [
    path("", views.process_refund, name="process"),
    # Keep above "<uuid:refund_id>" so it is not read as an id.
    path("history", views.refund_history, name="history"),
    path("<uuid:refund_id>/status", views.update_refund_status, name="status"),
    path("<uuid:refund_id>", views.refund_detail, name="detail"),
]
