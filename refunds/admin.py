# refunds/admin.py

from __future__ import annotations

from django.contrib import admin
from django.urls import reverse
from django.utils.html import format_html

from payments.utils import cents_to_money

from .models import Refund


@admin.register(Refund)
class RefundAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "status",
        "method",
        "order_link",
        "buyer",
        "seller",
        "amount_display",
        "processed_at",
        "completed_at",
    )
    list_filter = ("status", "method", "created_at")
    search_fields = (
        "id",
        "order__order_number",
        "buyer__username",
        "buyer__email",
        "seller__username",
        "reason",
    )
    ordering = ("-created_at",)

    # Status changes go through the API so the order follows along.
    readonly_fields = (
        "id",
        "order",
        "buyer",
        "seller",
        "amount_cents",
        "method",
        "reason",
        "status",
        "processed_by",
        "processed_at",
        "completed_at",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Refund", {"fields": ("id", "status", "method", "amount_cents", "reason", "notes", "screenshot")}),
        ("Order", {"fields": ("order", "buyer", "seller")}),
        ("Processing", {"fields": ("processed_by", "processed_at", "completed_at", "created_at", "updated_at")}),
    )

    @admin.display(description="Order")
    def order_link(self, obj: Refund):
        url = reverse("admin:orders_order_change", args=[obj.order_id])
        return format_html('<a href="{}">{}</a>', url, obj.order.order_number)

    @admin.display(description="Amount")
    def amount_display(self, obj: Refund) -> str:
        return f"${cents_to_money(obj.amount_cents):,.2f}"

    def has_add_permission(self, request):
        return False
