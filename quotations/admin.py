"""
Django admin configuration for quotations app.
"""
from django.contrib import admin
from django.utils.html import format_html

from quotations.infrastructure.models import LicenseCalculationRequest, RequestLine


class RequestLineInline(admin.TabularInline):
    """Lines shown on the request page."""

    model = RequestLine
    extra = 0
    fields = ["service", "support_coefficient", "sub_total", "pricing_status", "priced_at"]
    readonly_fields = ["sub_total", "pricing_status", "priced_at"]


@admin.register(LicenseCalculationRequest)
class LicenseCalculationRequestAdmin(admin.ModelAdmin):
    """Admin interface for LicenseCalculationRequest model."""

    list_display = [
        "id",
        "creator",
        "status_display",
        "total_cost",
        "line_count",
        "formatted_at",
        "created_at",
    ]
    list_filter = ["status", "formatted_at", "created_at"]
    search_fields = ["id", "creator__username", "moderator__username"]
    readonly_fields = ["id", "total_cost", "created_at", "formatted_at", "completed_at", "updated_at"]
    inlines = [RequestLineInline]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "status", "creator", "moderator"),
            },
        ),
        (
            "Usage Parameters",
            {
                "fields": ("users", "cores", "period", "total_cost"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "formatted_at", "completed_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "draft": "gray",
            "formed": "blue",
            "completed": "green",
            "rejected": "red",
            "deleted": "black",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def line_count(self, obj):
        """Display number of services on the request."""
        return obj.lines.count()

    line_count.short_description = "Services"

    def get_queryset(self, request):
        """Optimize queryset."""
        return (
            super()
            .get_queryset(request)
            .select_related("creator", "moderator")
            .prefetch_related("lines")
        )
