"""
Root URL configuration — all API routes are versioned under /api/v1/.

  /api/v1/auth/       registration, JWT login / refresh / logout, profile
  /api/v1/projects/   projects, with nested categories and tasks
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/auth/", include("apps.accounts.urls")),
    path("api/v1/", include("apps.tasks.urls")),
]
