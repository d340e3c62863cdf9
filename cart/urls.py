# cart/urls.py
from __future__ import annotations

from django.urls import path

from . import views

app_name = "cart"

urlpatterns = [
    path("", views.cart_detail, name="detail"),
    path("add", views.cart_add, name="add"),
    path("add-customized", views.cart_add_customized, name="add_customized"),
    path("update", views.cart_update, name="update"),
    path("remove/<str:item_id>", views.cart_remove, name="remove"),
    path("clear", views.cart_clear, name="clear"),
    path("validate", views.cart_validate, name="validate"),
    path("summary", views.cart_summary, name="summary"),
    path("availability/<int:product_id>/<int:quantity>", views.product_availability, name="availability"),
]
