# products/admin.py
from __future__ import annotations

from django.contrib import admin, messages

from .inventory import check_stock_integrity, sync_aggregate_stock
from .models import Product, ProductVariant


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "seller", "category", "price", "stock", "sold_count", "status", "is_active", "created_at")
    list_filter = ("status", "is_active", "category")
    search_fields = ("name", "description", "seller__username")
    # Stock is owned by products.inventory.
    readonly_fields = ("stock", "sold_count", "created_at", "updated_at")
    inlines = [ProductVariantInline]
    actions = ["approve_products", "reject_products", "repair_aggregate_stock"]

    @admin.action(description="Approve selected products")
    def approve_products(self, request, queryset):
        updated = queryset.update(status=Product.Status.APPROVED)
        self.message_user(request, f"Approved {updated} product(s).", level=messages.SUCCESS)

    @admin.action(description="Reject selected products")
    def reject_products(self, request, queryset):
        updated = queryset.update(status=Product.Status.REJECTED)
        self.message_user(request, f"Rejected {updated} product(s).", level=messages.WARNING)

    @admin.action(description="Repair aggregate stock from variants (all products)")
    def repair_aggregate_stock(self, request, queryset):
        drifts = check_stock_integrity(fix=True)
        self.message_user(request, f"Repaired {len(drifts)} product(s).", level=messages.SUCCESS)

    def save_related(self, request, form, formsets, change):
        super().save_related(request, form, formsets, change)
        sync_aggregate_stock(form.instance)
