"""
Serializers for Project, Category and Task.

Serializers are the input-validation step that runs before the
lifecycle core: ``is_valid()`` either yields ``validated_data`` or a
field → errors mapping. They cover:
  - Case-insensitive name uniqueness (projects per user, categories per project)
  - Category membership (a task's category must belong to its project)
  - Enumerated fields (status, section, priority, time estimate unit)

Derived fields (``completion_date``, and ``section`` on status changes)
are never taken from the client; ``apps.tasks.services`` computes them.
"""

from rest_framework import serializers

from . import services
from .choices import TaskPriority, TaskSection, TaskStatus
from .models import Category, Project, Task


# ---------------------------------------------------------------------------
# Project
# ---------------------------------------------------------------------------
class ProjectSerializer(serializers.ModelSerializer):
    """
    CRUD serializer for Project.

    The owner is taken from the request, never from the payload.
    Creation goes through ``services.create_project`` so the default
    categories are created with the project.
    """

    class Meta:
        model = Project
        fields = ["id", "name", "description", "created_at", "updated_at"]
        read_only_fields = ["id", "created_at", "updated_at"]
        extra_kwargs = {"description": {"allow_null": True}}

    def validate_name(self, value):
        """Check uniqueness within the current user's projects."""
        request = self.context.get("request")
        if not request:
            return value

        qs = Project.objects.filter(name__iexact=value, user=request.user)

        # On update, exclude the current instance
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)

        if qs.exists():
            raise serializers.ValidationError(
                "A project with this name already exists."
            )
        return value

    def validate_description(self, value):
        return value or ""

    def create(self, validated_data):
        return services.create_project(
            validated_data["user"],
            validated_data["name"],
            validated_data.get("description", ""),
        )


# ---------------------------------------------------------------------------
# Category
# ---------------------------------------------------------------------------
class CategorySerializer(serializers.ModelSerializer):
    """
    CRUD serializer for Category.

    The project comes from the URL (``context["project"]``).
    `task_count` is a read-only annotation showing how many tasks
    belong to this category.
    """

    task_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = Category
        fields = ["id", "name", "project", "task_count", "created_at"]
        read_only_fields = ["id", "project", "created_at"]

    def validate_name(self, value):
        """Check uniqueness within the project's categories."""
        project = self.context.get("project")
        if project is None:
            return value

        qs = Category.objects.filter(name__iexact=value, project=project)
        if self.instance:
            qs = qs.exclude(pk=self.instance.pk)

        if qs.exists():
            raise serializers.ValidationError(
                "A category with this name already exists."
            )
        return value


class CategoryDeleteSerializer(serializers.Serializer):
    """Optional reassignment target for tasks of a deleted category."""

    reassign_to = serializers.UUIDField(required=False, allow_null=True)


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------
class TaskSerializer(serializers.ModelSerializer):
    """
    Full serializer for Task CRUD.

    Read-only fields:
      - `completion_date`: set while status is completed
      - `category_name`: shortcut string from the related Category
      - `estimate_minutes`: time estimate normalised to minutes

    On create the status is always todo. On update a status change
    updates `completion_date` and `section` the same way the dedicated
    status endpoint does.
    """

    category = serializers.PrimaryKeyRelatedField(queryset=Category.objects.all())
    category_name = serializers.CharField(source="category.name", read_only=True)
    estimate_minutes = serializers.IntegerField(read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "deadline",
            "time_estimate_value",
            "time_estimate_unit",
            "status",
            "section",
            "priority",
            "notes",
            "completion_date",
            "project",
            "category",
            "category_name",
            "estimate_minutes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "completion_date",
            "project",
            "created_at",
            "updated_at",
        ]
        extra_kwargs = {
            "time_estimate_value": {"min_value": 1},
            "priority": {"allow_null": True},
            "description": {"allow_null": True},
            "notes": {"allow_null": True},
        }

    # ------------------------------------------------------------------
    # Field-level validation
    # ------------------------------------------------------------------
    def validate_category(self, value):
        """Category must belong to the task's project."""
        project = self.context.get("project")
        if project is not None and value.project_id != project.pk:
            raise serializers.ValidationError("Category not found.")
        return value

    def validate_priority(self, value):
        return value or TaskPriority.NONE

    def validate_description(self, value):
        return value or ""

    def validate_notes(self, value):
        return value or ""

    # ------------------------------------------------------------------
    # Persistence goes through the lifecycle services
    # ------------------------------------------------------------------
    def create(self, validated_data):
        project = validated_data.pop("project")
        return services.create_task(project, validated_data)

    def update(self, instance, validated_data):
        return services.update_task(instance, validated_data)


class TaskStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=TaskStatus.choices)


class TaskSectionSerializer(serializers.Serializer):
    section = serializers.ChoiceField(choices=TaskSection.choices)
