from django.urls import path

from .views import (
    assigned_paper_detail,
    assigned_papers,
    eligible_reviewers,
    paper_assignments,
)

app_name = "papers"

urlpatterns = [
    # EDITOR
    path(
        "editor/papers/<str:paper_id>/eligible-reviewers/",
        eligible_reviewers,
        name="eligible-reviewers",
    ),
    path(
        "editor/papers/<str:paper_id>/assignments/",
        paper_assignments,
        name="assignments",
    ),

    # REVIEWER
    path("reviewer/assignments/", assigned_papers, name="assigned-papers"),
    path(
        "reviewer/assignments/<str:paper_id>/",
        assigned_paper_detail,
        name="assigned-paper-detail",
    ),
]
