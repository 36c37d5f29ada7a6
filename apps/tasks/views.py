"""
ViewSets for Project, Category and Task CRUD.

Key patterns:
  - Every queryset is scoped to projects owned by request.user
    (no cross-user access; foreign objects are reported as 404)
  - Object-level IsProjectOwner permission enforced on retrieve/update/delete
  - State changes go through ``apps.tasks.services``; lifecycle errors
    become 400 responses carrying a stable ``code``
  - The task list is returned in display order (priority, deadline,
    time estimate, title)
"""

from django.db.models import Count

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.generics import get_object_or_404
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from django_filters.rest_framework import DjangoFilterBackend

from . import services
from .exceptions import LifecycleError
from .filters import TaskFilter
from .models import Category, Project, Task
from .ordering import group_by_category, sort_tasks
from .permissions import IsProjectOwner
from .serializers import (
    CategoryDeleteSerializer,
    CategorySerializer,
    ProjectSerializer,
    TaskSectionSerializer,
    TaskSerializer,
    TaskStatusSerializer,
)


# ---------------------------------------------------------------------------
# Shared behaviour
# ---------------------------------------------------------------------------
class LifecycleErrorMixin:
    """Translate rejected lifecycle operations into 400 responses."""

    def handle_exception(self, exc):
        if isinstance(exc, LifecycleError):
            return Response(
                {"detail": str(exc), "code": exc.code},
                status=status.HTTP_400_BAD_REQUEST,
            )
        return super().handle_exception(exc)


class ProjectScopedMixin:
    """Resolve the ``project_pk`` URL kwarg to a project owned by the user."""

    def get_project(self):
        if not hasattr(self, "_project"):
            self._project = get_object_or_404(
                Project, pk=self.kwargs["project_pk"], user=self.request.user
            )
        return self._project

    def get_serializer_context(self):
        context = super().get_serializer_context()
        context["project"] = self.get_project()
        return context


# ---------------------------------------------------------------------------
# Project ViewSet
# ---------------------------------------------------------------------------
class ProjectViewSet(viewsets.ModelViewSet):
    """
    CRUD for user-owned projects.

    list   → GET    /api/v1/projects/
    create → POST   /api/v1/projects/        (with default categories)
    read   → GET    /api/v1/projects/{id}/
    update → PATCH  /api/v1/projects/{id}/
    delete → DELETE /api/v1/projects/{id}/   (removes categories and tasks)
    """

    serializer_class = ProjectSerializer
    permission_classes = [IsAuthenticated, IsProjectOwner]
    # Disable PUT — only PATCH for partial updates
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filter_backends = []

    def get_queryset(self):
        """Return only the authenticated user's projects."""
        return Project.objects.filter(user=self.request.user).order_by("created_at")

    def perform_create(self, serializer):
        """Automatically assign the authenticated user as the owner."""
        serializer.save(user=self.request.user)

    def perform_destroy(self, instance):
        services.delete_project(instance)


# ---------------------------------------------------------------------------
# Category ViewSet
# ---------------------------------------------------------------------------
class CategoryViewSet(LifecycleErrorMixin, ProjectScopedMixin, viewsets.ModelViewSet):
    """
    CRUD for the categories of a project.

    list   → GET    /api/v1/projects/{project_pk}/categories/
    create → POST   /api/v1/projects/{project_pk}/categories/
    read   → GET    /api/v1/projects/{project_pk}/categories/{id}/
    update → PATCH  /api/v1/projects/{project_pk}/categories/{id}/
    delete → DELETE /api/v1/projects/{project_pk}/categories/{id}/

    Deleting a category that still holds tasks requires ``reassign_to``
    (JSON body or query parameter) naming another category of the
    same project. The last category of a project cannot be deleted.
    """

    serializer_class = CategorySerializer
    permission_classes = [IsAuthenticated, IsProjectOwner]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]
    filter_backends = []

    def get_queryset(self):
        """Return the project's categories, with task count."""
        return (
            Category.objects.filter(project=self.get_project())
            .select_related("project")
            .annotate(task_count=Count("tasks"))
            .order_by("created_at", "name")
        )

    def perform_create(self, serializer):
        serializer.save(project=self.get_project())

    def destroy(self, request, *args, **kwargs):
        category = self.get_object()
        params = CategoryDeleteSerializer(data=request.data or request.query_params)
        params.is_valid(raise_exception=True)

        services.delete_category(category, params.validated_data.get("reassign_to"))
        return Response(status=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Task ViewSet
# ---------------------------------------------------------------------------
class TaskViewSet(LifecycleErrorMixin, ProjectScopedMixin, viewsets.ModelViewSet):
    """
    CRUD for the tasks of a project, plus status / section transitions.

    list    → GET    /api/v1/projects/{project_pk}/tasks/           (sorted, filterable)
    grouped → GET    /api/v1/projects/{project_pk}/tasks/grouped/   (sorted, by category)
    create  → POST   /api/v1/projects/{project_pk}/tasks/
    read    → GET    /api/v1/projects/{project_pk}/tasks/{id}/
    update  → PATCH  /api/v1/projects/{project_pk}/tasks/{id}/
    delete  → DELETE /api/v1/projects/{project_pk}/tasks/{id}/
    status  → PATCH  /api/v1/projects/{project_pk}/tasks/{id}/status/
    section → PATCH  /api/v1/projects/{project_pk}/tasks/{id}/section/

    Query parameters (list / grouped):
      ?section=current            — filter by section (CSV)
      ?status=todo,in_progress    — filter by status (CSV)
      ?priority=high,medium       — filter by priority (CSV)
      ?category=<uuid>            — filter by category
      ?page=1                     — pagination (list only)
    """

    serializer_class = TaskSerializer
    permission_classes = [IsAuthenticated, IsProjectOwner]
    http_method_names = ["get", "post", "patch", "delete", "head", "options"]

    filter_backends = [DjangoFilterBackend]
    filterset_class = TaskFilter

    def get_queryset(self):
        """Return the project's tasks."""
        return (
            Task.objects.filter(project=self.get_project())
            .select_related("project", "category")
        )

    def perform_create(self, serializer):
        serializer.save(project=self.get_project())

    def _sorted_tasks(self):
        return sort_tasks(self.filter_queryset(self.get_queryset()))

    def list(self, request, *args, **kwargs):
        tasks = self._sorted_tasks()

        page = self.paginate_queryset(tasks)
        if page is not None:
            serializer = self.get_serializer(page, many=True)
            return self.get_paginated_response(serializer.data)

        serializer = self.get_serializer(tasks, many=True)
        return Response(serializer.data)

    # ----- Custom actions -----
    @action(detail=False, methods=["get"], url_path="grouped")
    def grouped(self, request, project_pk=None):
        """
        GET .../tasks/grouped/

        Sorted tasks grouped by category id. Each group keeps the
        display order; categories without matching tasks are omitted.
        """
        groups = group_by_category(self._sorted_tasks())
        data = {
            str(category_id): self.get_serializer(tasks, many=True).data
            for category_id, tasks in groups.items()
        }
        return Response(data)

    @action(detail=True, methods=["patch"], url_path="status")
    def change_status(self, request, project_pk=None, pk=None):
        """
        PATCH .../tasks/{id}/status/  {"status": "completed"}

        Completing sets ``completion_date``; completing or cancelling
        moves the task to past; reopening moves it back to current.
        """
        task = self.get_object()
        serializer = TaskStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        task = services.change_task_status(task, serializer.validated_data["status"])
        return Response(self.get_serializer(task).data)

    @action(detail=True, methods=["patch"], url_path="section")
    def change_section(self, request, project_pk=None, pk=None):
        """
        PATCH .../tasks/{id}/section/  {"section": "future"}

        Only completed or cancelled tasks may be moved to past.
        """
        task = self.get_object()
        serializer = TaskSectionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        task = services.change_task_section(task, serializer.validated_data["section"])
        return Response(self.get_serializer(task).data)
