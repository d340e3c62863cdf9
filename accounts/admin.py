from __future__ import annotations

from django.contrib import admin

from .models import Profile


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "full_name", "business_name", "is_buyer", "is_seller", "is_admin", "created_at")
    list_filter = ("is_buyer", "is_seller", "is_admin")
    search_fields = ("user__username", "user__email", "full_name", "business_name")
    raw_id_fields = ("user",)
