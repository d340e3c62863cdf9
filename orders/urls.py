# orders/urls.py

from __future__ import annotations

from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("create", views.create_order, name="create"),
    path("buyer", views.buyer_orders, name="buyer"),
    path("seller", views.seller_orders, name="seller"),
    path("pending-payments", views.pending_payments, name="pending_payments"),
    path("stats/dashboard", views.order_stats, name="stats"),
    path("<uuid:order_id>/approve-payment", views.approve_payment, name="approve_payment"),
    path("<uuid:order_id>/cancel", views.cancel_order, name="cancel"),
    path("<uuid:order_id>/status", views.update_status, name="status"),
    path("<uuid:order_id>/delivery", views.update_delivery, name="delivery"),
    path("<uuid:order_id>", views.order_detail, name="detail"),
]
