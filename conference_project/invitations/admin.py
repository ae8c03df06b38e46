from django.contrib import admin

from .models import ReviewInvitation


@admin.register(ReviewInvitation)
class ReviewInvitationAdmin(admin.ModelAdmin):
    """
    Invitations move only through expiry or the reviewer's own
    response, so the admin is read-only.
    """

    list_display = (
        "id",
        "reviewer",
        "paper",
        "status",
        "created_at",
        "response_due_at",
        "responded_at",
    )
    list_filter = ("status", "created_at")
    list_select_related = ("reviewer", "paper")
    search_fields = ("id", "reviewer__id", "reviewer__name", "paper__title")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
