# complaints/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "complaints"

urlpatterns = [
    path("", views.submit_complaint, name="submit"),
    path("user", views.user_complaints, name="user"),
    path("admin/all", views.all_complaints, name="admin_all"),
    path("<uuid:complaint_id>/status", views.update_complaint_status, name="status"),
    path("<uuid:complaint_id>", views.complaint_detail, name="detail"),
]
