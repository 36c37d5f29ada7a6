"""Enumerated field values shared by the models and the lifecycle core."""

from django.db import models


class TaskStatus(models.TextChoices):
    TODO = "todo", "To Do"
    IN_PROGRESS = "in_progress", "In Progress"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"


class TaskSection(models.TextChoices):
    CURRENT = "current", "Current"
    FUTURE = "future", "Future"
    PAST = "past", "Past"


class TaskPriority(models.TextChoices):
    HIGH = "high", "High"
    MEDIUM = "medium", "Medium"
    LOW = "low", "Low"
    NONE = "none", "None"


class TimeEstimateUnit(models.TextChoices):
    MINUTES = "minutes", "Minutes"
    HOURS = "hours", "Hours"
    DAYS = "days", "Days"


# Statuses after which a task is archived into the past section.
TERMINAL_STATUSES = (TaskStatus.COMPLETED, TaskStatus.CANCELLED)
