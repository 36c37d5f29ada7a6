"""
Persistence side of the task lifecycle.

Each function reads the current rows, asks ``apps.tasks.lifecycle`` for
the fields to write, and writes them inside one transaction. Task and
category rows are locked with ``select_for_update()`` so concurrent
edits of the same record serialise.

Category deletions also lock the owning project row, so deletions within
one project run one at a time and always see the current category count.
A row that disappeared before it could be locked raises ``Http404``.

``LifecycleError`` subclasses propagate unchanged to the caller.
"""

import logging

from django.conf import settings
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone

from . import lifecycle
from .choices import TaskSection, TaskStatus
from .models import Category, Project, Task

logger = logging.getLogger(__name__)


def _save_fields(task, fields):
    for name, value in fields.items():
        setattr(task, name, value)
    task.save(update_fields=list(fields))
    return task


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@transaction.atomic
def create_project(user, name, description=""):
    """Create a project together with its default categories."""
    project = Project.objects.create(user=user, name=name, description=description)
    for category_name in settings.DEFAULT_PROJECT_CATEGORIES:
        Category.objects.create(project=project, name=category_name)
    logger.info("Created project %s for user %s", project.pk, user.pk)
    return project


def bootstrap_user(user):
    """
    Give a user without projects a default project.

    Returns the new project, or ``None`` if the user already had one.
    """
    if Project.objects.filter(user=user).exists():
        return None
    project = create_project(
        user,
        settings.DEFAULT_PROJECT_NAME,
        settings.DEFAULT_PROJECT_DESCRIPTION,
    )
    logger.info("Bootstrapped default project for user %s", user.pk)
    return project


@transaction.atomic
def delete_project(project):
    """Delete a project, its tasks and its categories."""
    task_count, _ = Task.objects.filter(project=project).delete()
    category_count, _ = Category.objects.filter(project=project).delete()
    project_id = project.pk
    project.delete()
    logger.info(
        "Deleted project %s (%d categories, %d tasks)",
        project_id,
        category_count,
        task_count,
    )


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------

def create_task(project, data):
    """
    Insert a new task in ``project``.

    New tasks always start as todo without a completion date; the
    section defaults to current and may not be past.
    """
    data = dict(data)
    section = data.pop("section", None) or TaskSection.CURRENT
    data.pop("status", None)
    data.pop("completion_date", None)
    data.pop("updated_at", None)
    lifecycle.ensure_section_allowed(TaskStatus.TODO, section)
    return Task.objects.create(
        project=project,
        status=TaskStatus.TODO,
        section=section,
        completion_date=None,
        updated_at=timezone.now(),
        **data,
    )


def _lock(task):
    return get_object_or_404(Task.objects.select_for_update(), pk=task.pk)


def change_task_status(task, status):
    with transaction.atomic():
        current = _lock(task)
        fields = lifecycle.apply_status_change(current, status, now=timezone.now())
        return _save_fields(current, fields)


def change_task_section(task, section):
    with transaction.atomic():
        current = _lock(task)
        fields = lifecycle.apply_section_change(current, section, now=timezone.now())
        return _save_fields(current, fields)


def update_task(task, patch):
    """
    Apply a generic edit.

    A new ``category`` must already be known to belong to the task's
    project.
    """
    with transaction.atomic():
        current = _lock(task)
        fields = lifecycle.apply_field_update(current, patch, now=timezone.now())
        return _save_fields(current, fields)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

def delete_category(category, reassign_to=None):
    """
    Delete ``category``, moving its tasks to ``reassign_to`` first.

    Raises ``LastCategory``, ``ReassignmentRequired`` or
    ``InvalidReassignmentTarget`` and leaves everything untouched when
    the deletion is refused.
    """
    with transaction.atomic():
        get_object_or_404(Project.objects.select_for_update(), pk=category.project_id)
        category = get_object_or_404(Category.objects.select_for_update(), pk=category.pk)
        steps = lifecycle.resolve_category_deletion(
            category.pk,
            project_category_count=Category.objects.filter(
                project_id=category.project_id
            ).count(),
            tasks_in_category_count=Task.objects.filter(category=category).count(),
            reassign_to=reassign_to,
        )

        for step in steps:
            if isinstance(step, lifecycle.ReassignTasks):
                target_project_id = (
                    Category.objects.filter(pk=step.target)
                    .values_list("project_id", flat=True)
                    .first()
                )
                lifecycle.check_reassignment_target(category.project_id, target_project_id)
                moved = Task.objects.filter(category_id=step.source).update(
                    category_id=step.target, updated_at=timezone.now()
                )
                logger.info(
                    "Reassigned %d tasks from category %s to %s",
                    moved,
                    step.source,
                    step.target,
                )
            elif isinstance(step, lifecycle.DeleteCategory):
                Category.objects.filter(pk=step.category_id).delete()
                logger.info("Deleted category %s", step.category_id)
