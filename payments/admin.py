# payments/admin.py

from __future__ import annotations

from django.contrib import admin

from .models import AdminBankAccount, RevenueEntry
from .services import get_revenue_cents
from .utils import cents_to_money


@admin.register(RevenueEntry)
class RevenueEntryAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "order",
        "amount",
        "reason",
        "actor",
        "note",
    )
    list_filter = ("reason", "created_at")
    search_fields = (
        "order__order_number",
        "actor__username",
        "note",
    )
    readonly_fields = (
        "order",
        "amount_cents",
        "reason",
        "actor",
        "note",
        "created_at",
    )
    ordering = ("-created_at",)

    @admin.display(description="Amount")
    def amount(self, obj: RevenueEntry) -> str:
        return f"${cents_to_money(obj.amount_cents):,.2f}"

    def changelist_view(self, request, extra_context=None):
        extra_context = extra_context or {}
        extra_context["title"] = f"Revenue ledger (total ${cents_to_money(get_revenue_cents()):,.2f})"
        return super().changelist_view(request, extra_context=extra_context)

    # Ledger rows are append-only.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(AdminBankAccount)
class AdminBankAccountAdmin(admin.ModelAdmin):
    list_display = ("provider", "kind", "account_title", "account_number", "is_active", "sort_order")
    list_filter = ("kind", "is_active")
    list_editable = ("is_active", "sort_order")
    search_fields = ("provider", "account_title", "account_number", "iban")
