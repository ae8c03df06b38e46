from django.contrib import admin
from django.urls import path, include


urlpatterns = [
    # DJANGO ADMIN (STAFF ONLY)
    path("conference/django/admin/", admin.site.urls),

    # JSON API (EDITOR + REVIEWER)
    path("api/", include("papers.urls")),
    path("api/", include("invitations.urls")),
]
