from django.contrib import admin
from django.utils.html import format_html

from .models import NotificationRecord


@admin.register(NotificationRecord)
class NotificationRecordAdmin(admin.ModelAdmin):
    """
    Read-only view over the invitation notification audit trail.
    """

    # =====================================================
    # LIST VIEW
    # =====================================================
    list_display = (
        "id",
        "invitation",
        "channel",
        "colored_status",
        "failure_reason",
        "sent_at",
        "created_at",
    )

    list_filter = (
        "channel",
        "delivery_status",
        "created_at",
    )

    search_fields = (
        "id",
        "invitation__id",
        "invitation__reviewer__id",
        "invitation__paper__title",
        "failure_reason",
    )

    ordering = ("-created_at",)
    list_per_page = 25

    # =====================================================
    # FIELDSETS (DETAIL VIEW)
    # =====================================================
    fieldsets = (
        ("Invitation", {
            "fields": ("invitation", "channel"),
        }),
        ("Outcome", {
            "fields": ("delivery_status", "failure_reason", "sent_at"),
        }),
        ("Content", {
            "fields": ("payload", "created_at"),
        }),
    )

    # Append-only: the trail is never edited by hand.
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False

    # =====================================================
    # CUSTOM DISPLAY HELPERS
    # =====================================================
    def colored_status(self, obj):
        color_map = {
            NotificationRecord.DeliveryStatus.PENDING: "#f59e0b",  # orange
            NotificationRecord.DeliveryStatus.SENT: "#16a34a",     # green
            NotificationRecord.DeliveryStatus.FAILED: "#dc2626",   # red
        }

        color = color_map.get(obj.delivery_status, "#000000")

        return format_html(
            '<span style="color:{}; font-weight:600;">{}</span>',
            color,
            obj.get_delivery_status_display(),
        )

    colored_status.short_description = "Delivery"
