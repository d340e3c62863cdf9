# dashboards/urls.py

from __future__ import annotations

from django.urls import path

from . import views

app_name = "dashboards"

urlpatterns = [
    path("orders", views.orders_list, name="orders"),
    path("orders/stats", views.order_stats, name="order_stats"),
    path("orders/<uuid:order_id>/status", views.order_status, name="order_status"),
    path("orders/<uuid:order_id>", views.order_detail, name="order_detail"),
    path("activities", views.activities, name="activities"),
    path("bank-info", views.bank_info, name="bank_info"),
]
