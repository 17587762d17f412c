"""
Django admin configuration for catalog app.
"""
from django.contrib import admin
from django.utils.html import format_html

from catalog.infrastructure.models import LicenseService


@admin.register(LicenseService)
class LicenseServiceAdmin(admin.ModelAdmin):
    """Admin interface for LicenseService model."""

    list_display = [
        "name",
        "license_type",
        "base_price",
        "support_level",
        "state_display",
        "created_at",
    ]
    list_filter = ["license_type", "support_level", "is_deleted", "created_at"]
    search_fields = ["name", "description"]
    readonly_fields = ["id", "created_at", "updated_at"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "name", "description", "image_url"),
            },
        ),
        (
            "Pricing",
            {
                "fields": ("license_type", "base_price", "support_level"),
            },
        ),
        (
            "Terms",
            {
                "fields": ("max_users", "validity_years", "is_deleted"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def state_display(self, obj):
        """Display whether the entry is still offered."""
        if obj.is_deleted:
            return format_html('<span style="color: gray;">Deleted</span>')
        return format_html('<span style="color: green;">Active</span>')

    state_display.short_description = "State"
