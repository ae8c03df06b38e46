from django.contrib import admin

from .models import Assignment, Paper, Reviewer


@admin.register(Paper)
class PaperAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("id", "title")
    ordering = ("id",)


@admin.register(Reviewer)
class ReviewerAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "name",
        "email",
        "is_eligible",
        "current_assignment_count",
    )
    list_filter = ("is_eligible",)
    search_fields = ("id", "name", "email")
    filter_horizontal = ("conflicted_papers",)

    # Workload only moves with committed assignments.
    readonly_fields = ("current_assignment_count",)


@admin.register(Assignment)
class AssignmentAdmin(admin.ModelAdmin):
    list_display = ("id", "paper", "reviewer", "assigned_at")
    list_select_related = ("paper", "reviewer")
    search_fields = ("paper__id", "paper__title", "reviewer__id", "reviewer__name")
    ordering = ("-assigned_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
