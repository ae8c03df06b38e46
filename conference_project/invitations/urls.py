from django.urls import path

from .views import (
    invitation_action,
    invitation_detail,
    invitation_list,
)

app_name = "invitations"

urlpatterns = [
    path("reviewer/invitations/", invitation_list, name="list"),
    path("reviewer/invitations/<str:invitation_id>/", invitation_detail, name="detail"),
    path(
        "reviewer/invitations/<str:invitation_id>/<str:action>/",
        invitation_action,
        name="action",
    ),
]
