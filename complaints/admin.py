# complaints/admin.py

from __future__ import annotations

from django.contrib import admin
from django.utils import timezone

from .models import Complaint, ComplaintAttachment


class ComplaintAttachmentInline(admin.TabularInline):
    model = ComplaintAttachment
    extra = 0
    can_delete = False
    readonly_fields = ("file", "original_name", "content_type", "size", "created_at")


@admin.register(Complaint)
class ComplaintAdmin(admin.ModelAdmin):
    list_display = ("subject", "category", "priority", "status", "user", "order", "created_at")
    list_filter = ("status", "category", "priority", "created_at")
    search_fields = ("subject", "description", "user__username", "user__email", "order__order_number")
    readonly_fields = ("id", "user", "order", "resolved_by", "resolved_at", "created_at", "updated_at")
    ordering = ("-created_at",)
    inlines = [ComplaintAttachmentInline]
    actions = ("mark_in_review", "mark_resolved")

    @admin.action(description="Mark selected complaints as in review")
    def mark_in_review(self, request, queryset):
        updated = queryset.filter(status=Complaint.Status.PENDING).update(status=Complaint.Status.IN_REVIEW)
        self.message_user(request, f"{updated} complaint(s) moved to review.")

    @admin.action(description="Mark selected complaints as resolved")
    def mark_resolved(self, request, queryset):
        updated = queryset.exclude(status=Complaint.Status.RESOLVED).update(
            status=Complaint.Status.RESOLVED,
            resolved_by=request.user,
            resolved_at=timezone.now(),
        )
        self.message_user(request, f"{updated} complaint(s) resolved.")
