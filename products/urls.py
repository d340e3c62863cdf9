# products/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "products"

urlpatterns = [
    path("products/", views.product_list, name="list"),
    path("products/<int:product_id>", views.product_detail, name="detail"),
    path("seller/products", views.seller_products, name="seller_list"),
    path("seller/products/<int:product_id>", views.seller_product_detail, name="seller_detail"),
    path("admin/products/<int:product_id>/status", views.admin_product_status, name="admin_status"),
]
