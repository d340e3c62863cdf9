# orders/admin.py

from __future__ import annotations

from django.contrib import admin, messages
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.html import format_html

from payments.models import RevenueEntry

from .models import Order, OrderItem, OrderTimelineEntry
from .status import REVENUE_BEARING_STATUSES


# =========================
# Helpers
# =========================
def cents_to_money(cents: int | None) -> str:
    if cents is None:
        cents = 0
    try:
        amount = int(cents) / 100.0
    except (TypeError, ValueError):
        amount = 0.0
    return f"${amount:,.2f}"


# =========================
# Admin Filters
# =========================
class PaymentStateFilter(admin.SimpleListFilter):
    title = "payment state"
    parameter_name = "payment_state"

    def lookups(self, request, model_admin):
        return (
            ("awaiting", "Awaiting approval"),
            ("confirmed", "Payment confirmed"),
            ("no_screenshot", "No screenshot uploaded"),
        )

    def queryset(self, request, queryset):
        val = self.value()
        if val == "awaiting":
            return queryset.filter(payment_confirmed=False, status=Order.Status.PENDING)
        if val == "confirmed":
            return queryset.filter(payment_confirmed=True)
        if val == "no_screenshot":
            return queryset.filter(payment_screenshot__in=["", None])
        return queryset


class RevenueDriftFilter(admin.SimpleListFilter):
    """Orders whose ledger sum disagrees with their status."""

    title = "revenue ledger"
    parameter_name = "revenue"

    def lookups(self, request, model_admin):
        return (("ok", "In sync"), ("drift", "Drift"))

    def queryset(self, request, queryset):
        val = self.value()
        if val not in ("ok", "drift"):
            return queryset
        drift_ids = [o.pk for o in queryset if o.ledger_cents_agg != _expected_cents(o)]
        if val == "drift":
            return queryset.filter(pk__in=drift_ids)
        return queryset.exclude(pk__in=drift_ids)


def _expected_cents(order: Order) -> int:
    return int(order.total_cents) if order.status in REVENUE_BEARING_STATUSES else 0


# =========================
# Inlines
# =========================
class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    fields = ("product", "quantity", "unit_price_cents", "color", "size", "customization", "created_at")
    readonly_fields = fields
    show_change_link = True


class OrderTimelineInline(admin.TabularInline):
    model = OrderTimelineEntry
    extra = 0
    can_delete = False
    fields = ("created_at", "status", "note", "updated_by")
    readonly_fields = fields
    ordering = ("created_at",)


class RevenueEntryInline(admin.TabularInline):
    model = RevenueEntry
    extra = 0
    can_delete = False
    fields = ("created_at", "reason", "amount_cents", "actor", "note")
    readonly_fields = fields
    ordering = ("created_at",)


# =========================
# Order Admin
# =========================
@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    date_hierarchy = "created_at"
    inlines = [OrderItemInline, OrderTimelineInline, RevenueEntryInline]
    list_select_related = ("buyer", "seller")

    list_display = (
        "order_number",
        "status",
        "buyer",
        "seller",
        "total_money",
        "ledger_money",
        "payment_badge",
        "refund_status",
        "created_at",
    )
    list_filter = ("status", "payment_method", "refund_status", PaymentStateFilter, RevenueDriftFilter, "created_at")
    search_fields = ("id", "order_number", "buyer__username", "buyer__email", "seller__username", "tracking_number")
    raw_id_fields = ("buyer", "seller")

    # Status, totals and payment flags only change through orders.services.
    readonly_fields = (
        "id",
        "order_number",
        "status",
        "subtotal_cents",
        "shipping_cents",
        "total_cents",
        "payment_confirmed",
        "payment_status",
        "payment_date",
        "refund_status",
        "created_at",
        "updated_at",
    )

    fieldsets = (
        ("Identity", {"fields": ("id", "order_number", "status", "buyer", "seller", "notes")}),
        ("Totals (cents)", {"fields": ("subtotal_cents", "shipping_cents", "total_cents")}),
        (
            "Payment",
            {
                "fields": (
                    "payment_method",
                    "payment_status",
                    "payment_confirmed",
                    "payment_date",
                    "paid_to_bank_account",
                    "paid_to_wallet",
                    "payment_screenshot",
                )
            },
        ),
        (
            "Shipping",
            {
                "fields": (
                    "shipping_method",
                    "shipping_status",
                    "tracking_number",
                    "carrier",
                    "estimated_delivery",
                    "actual_delivery",
                    "delivery_notes",
                )
            },
        ),
        (
            "Shipping address",
            {
                "fields": (
                    "shipping_street",
                    "shipping_city",
                    "shipping_state",
                    "shipping_country",
                    "shipping_zip_code",
                    "shipping_phone",
                    "shipping_additional_info",
                )
            },
        ),
        (
            "Billing address",
            {
                "fields": (
                    "billing_street",
                    "billing_city",
                    "billing_state",
                    "billing_country",
                    "billing_zip_code",
                    "billing_phone",
                    "billing_additional_info",
                )
            },
        ),
        ("Refund", {"fields": ("refund_status",)}),
        ("Timestamps", {"fields": ("created_at", "updated_at")}),
    )

    actions = ["approve_payments"]

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.annotate(
            ledger_cents_agg=Coalesce(Sum("revenue_entries__amount_cents"), 0),
        )

    @admin.display(description="Total", ordering="total_cents")
    def total_money(self, obj: Order) -> str:
        return cents_to_money(obj.total_cents)

    @admin.display(description="Ledger", ordering="ledger_cents_agg")
    def ledger_money(self, obj: Order) -> str:
        ledger = int(getattr(obj, "ledger_cents_agg", 0) or 0)
        if ledger != _expected_cents(obj):
            return format_html('<span style="color:#b00;font-weight:600">{}</span>', cents_to_money(ledger))
        return cents_to_money(ledger)

    @admin.display(description="Payment")
    def payment_badge(self, obj: Order) -> str:
        if obj.payment_confirmed:
            return format_html('<span style="color:#080">{}</span>', "confirmed")
        if obj.payment_screenshot:
            return format_html('<span style="color:#b60">{}</span>', "awaiting approval")
        return "no screenshot"

    @admin.action(description="Approve payment for selected pending orders")
    def approve_payments(self, request, queryset):
        from core.api import ApiError

        from .services import approve_payment

        ok = 0
        for order in queryset:
            try:
                approve_payment(order_id=order.pk, actor=request.user)
                ok += 1
            except ApiError as exc:
                self.message_user(request, f"{order.order_number}: {exc.message}", level=messages.WARNING)
        if ok:
            self.message_user(request, f"Approved {ok} payment(s).", level=messages.SUCCESS)
