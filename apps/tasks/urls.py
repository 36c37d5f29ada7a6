"""
Tasks app URL configuration.

Uses DRF Routers for automatic URL generation from ViewSets. Categories
and tasks are nested under their project through a regex prefix.
All endpoints are mounted under /api/v1/ by the root URL config.
"""

from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views import CategoryViewSet, ProjectViewSet, TaskViewSet

PROJECT_PREFIX = r"projects/(?P<project_pk>[^/.]+)"

router = DefaultRouter()
router.register(r"projects", ProjectViewSet, basename="project")
router.register(rf"{PROJECT_PREFIX}/categories", CategoryViewSet, basename="category")
router.register(rf"{PROJECT_PREFIX}/tasks", TaskViewSet, basename="task")

urlpatterns = [
    path("", include(router.urls)),
]
