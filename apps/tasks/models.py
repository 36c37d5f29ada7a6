"""Project, Category and Task models for the task management domain."""

import uuid

from django.conf import settings
from django.db import models
from django.db.models.functions import Lower
from django.utils import timezone

from .choices import TaskPriority, TaskSection, TaskStatus, TimeEstimateUnit
from .ordering import estimate_in_minutes


class Project(models.Model):
    """
    Top-level container owned by a single user.

    Created together with a default set of categories. Deleting a project
    removes its categories and tasks.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    description = models.TextField(blank=True, default="")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="projects",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]
        # Project names are unique per user, ignoring case
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "user",
                name="unique_project_name_per_user",
            )
        ]

    def __str__(self):
        return self.name


class Category(models.Model):
    """
    Grouping of tasks inside a project.

    A project always keeps at least one category; deletion of a category
    that still holds tasks requires reassigning them first.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=100)
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="categories",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name_plural = "categories"
        ordering = ["created_at", "name"]
        constraints = [
            models.UniqueConstraint(
                Lower("name"),
                "project",
                name="unique_category_name_per_project",
            )
        ]

    def __str__(self):
        return self.name


class Task(models.Model):
    """
    A unit of work inside a project, filed under one category.

    ``completion_date`` is set exactly while status is completed and
    ``section`` follows the status (see ``apps.tasks.lifecycle``).
    """

    Status = TaskStatus
    Section = TaskSection
    Priority = TaskPriority
    EstimateUnit = TimeEstimateUnit

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True, default="")
    deadline = models.DateField(null=True, blank=True)
    time_estimate_value = models.PositiveIntegerField(null=True, blank=True)
    time_estimate_unit = models.CharField(
        max_length=10,
        choices=TimeEstimateUnit.choices,
        null=True,
        blank=True,
    )
    status = models.CharField(
        max_length=20,
        choices=TaskStatus.choices,
        default=TaskStatus.TODO,
    )
    section = models.CharField(
        max_length=10,
        choices=TaskSection.choices,
        default=TaskSection.CURRENT,
    )
    priority = models.CharField(
        max_length=10,
        choices=TaskPriority.choices,
        default=TaskPriority.NONE,
    )
    notes = models.TextField(blank=True, default="")
    completion_date = models.DateTimeField(null=True, blank=True)
    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name="tasks",
    )
    # RESTRICT: removable only as part of a project cascade
    category = models.ForeignKey(
        Category,
        on_delete=models.RESTRICT,
        related_name="tasks",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    # Written by apps.tasks.services with the same instant as the change itself
    updated_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return self.title

    @property
    def estimate_minutes(self):
        """Time estimate in minutes, or ``None`` when there is none."""
        if self.time_estimate_value is None:
            return None
        return estimate_in_minutes(self.time_estimate_value, self.time_estimate_unit)
