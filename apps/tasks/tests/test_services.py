"""Tests for the transactional task services."""

import uuid
from datetime import date, datetime, timezone
from unittest.mock import patch

import pytest
from django.conf import settings
from django.http import Http404
from django.shortcuts import get_object_or_404

from apps.tasks import services
from apps.tasks.exceptions import (
    InvalidReassignmentTarget,
    InvalidTransition,
    LastCategory,
    ReassignmentRequired,
)
from apps.tasks.models import Category, Project, Task
from conftest import CategoryFactory, ProjectFactory, TaskFactory

FIXED_NOW = datetime(2030, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


# ===================================================================
# Projects
# ===================================================================
@pytest.mark.django_db
class TestProjects:

    def test_create_project_adds_default_categories(self, user):
        project = services.create_project(user, "Side project", "Weekend hacking")
        names = project.categories.values_list("name", flat=True)
        assert sorted(names) == sorted(settings.DEFAULT_PROJECT_CATEGORIES)
        assert project.description == "Weekend hacking"

    def test_bootstrap_creates_default_project_once(self, user):
        first = services.bootstrap_user(user)
        second = services.bootstrap_user(user)
        assert first.name == settings.DEFAULT_PROJECT_NAME
        assert second is None
        assert Project.objects.filter(user=user).count() == 1

    def test_bootstrap_skips_user_with_projects(self, project):
        assert services.bootstrap_user(project.user) is None

    def test_delete_project_removes_children(self, user):
        project = services.create_project(user, "Doomed")
        category = project.categories.first()
        TaskFactory.create_batch(2, project=project, category=category)
        pid = project.pk

        services.delete_project(project)

        assert not Project.objects.filter(pk=pid).exists()
        assert Category.objects.filter(project_id=pid).count() == 0
        assert Task.objects.filter(project_id=pid).count() == 0

    def test_delete_project_leaves_other_projects(self, user, task):
        doomed = services.create_project(user, "Doomed")
        services.delete_project(doomed)
        assert Task.objects.filter(pk=task.pk).exists()


# ===================================================================
# Tasks
# ===================================================================
@pytest.mark.django_db
class TestTasks:

    def test_create_task_starts_as_todo(self, project, category):
        t = services.create_task(
            project,
            {"title": "New", "category": category, "status": "completed"},
        )
        assert t.status == Task.Status.TODO
        assert t.section == Task.Section.CURRENT
        assert t.completion_date is None

    def test_create_task_in_future(self, project, category):
        t = services.create_task(
            project, {"title": "Later", "category": category, "section": "future"}
        )
        assert t.section == "future"

    def test_create_task_in_past_refused(self, project, category):
        with pytest.raises(InvalidTransition):
            services.create_task(
                project, {"title": "Nope", "category": category, "section": "past"}
            )
        assert not Task.objects.filter(title="Nope").exists()

    def test_complete_and_reopen_persisted(self, task):
        services.change_task_status(task, "completed")
        task.refresh_from_db()
        assert task.status == "completed"
        assert task.section == "past"
        assert task.completion_date is not None

        services.change_task_status(task, "todo")
        task.refresh_from_db()
        assert task.completion_date is None
        assert task.section == "current"

    def test_change_section(self, task):
        services.change_task_section(task, "future")
        task.refresh_from_db()
        assert task.section == "future"

    def test_change_section_to_past_refused(self, task):
        with pytest.raises(InvalidTransition):
            services.change_task_section(task, "past")
        task.refresh_from_db()
        assert task.section == "current"

    def test_update_task_with_status(self, task):
        updated = services.update_task(
            task, {"title": "Renamed", "status": "cancelled", "deadline": date(2030, 1, 1)}
        )
        task.refresh_from_db()
        assert task.title == "Renamed"
        assert task.section == "past"
        assert task.deadline == date(2030, 1, 1)
        assert updated.pk == task.pk

    def test_update_task_moves_category(self, project, task):
        other = CategoryFactory(project=project)
        services.update_task(task, {"category": other})
        task.refresh_from_db()
        assert task.category_id == other.pk

    def test_update_uses_stored_state(self, task):
        """A stale instance does not leak its status into the derivation."""
        stale = Task.objects.get(pk=task.pk)
        services.change_task_status(task, "completed")
        services.update_task(stale, {"status": "todo"})
        task.refresh_from_db()
        assert task.completion_date is None
        assert task.section == "current"

    def test_completion_and_update_share_one_instant(self, task):
        services.change_task_status(task, "completed")
        task.refresh_from_db()
        assert task.completion_date == task.updated_at

    @patch("apps.tasks.services.timezone.now")
    def test_updated_at_comes_from_the_service_clock(self, mock_now, task):
        mock_now.return_value = FIXED_NOW
        services.change_task_section(task, "future")
        task.refresh_from_db()
        assert task.updated_at == FIXED_NOW

        services.update_task(task, {"title": "Later"})
        task.refresh_from_db()
        assert task.updated_at == FIXED_NOW

    @patch("apps.tasks.services.timezone.now")
    def test_create_task_stamps_updated_at(self, mock_now, project, category):
        mock_now.return_value = FIXED_NOW
        t = services.create_task(project, {"title": "New", "category": category})
        t.refresh_from_db()
        assert t.updated_at == FIXED_NOW

    def test_vanished_task_is_404(self, task):
        Task.objects.filter(pk=task.pk).delete()
        with pytest.raises(Http404):
            services.change_task_status(task, "completed")


# ===================================================================
# Categories
# ===================================================================
@pytest.mark.django_db
class TestDeleteCategory:

    def test_last_category_refused(self, category):
        with pytest.raises(LastCategory):
            services.delete_category(category)
        assert Category.objects.filter(pk=category.pk).exists()

    def test_empty_category_deleted(self, project, category):
        spare = CategoryFactory(project=project)
        services.delete_category(spare)
        assert not Category.objects.filter(pk=spare.pk).exists()

    def test_tasks_require_target(self, project, category):
        CategoryFactory(project=project)
        TaskFactory.create_batch(3, project=project, category=category)
        with pytest.raises(ReassignmentRequired):
            services.delete_category(category)
        assert Task.objects.filter(category=category).count() == 3

    def test_tasks_reassigned_then_deleted(self, project, category):
        target = CategoryFactory(project=project)
        tasks = TaskFactory.create_batch(3, project=project, category=category)

        services.delete_category(category, reassign_to=target.pk)

        assert not Category.objects.filter(pk=category.pk).exists()
        for t in tasks:
            t.refresh_from_db()
            assert t.category_id == target.pk

    def test_target_in_other_project_refused(self, user, project, category):
        CategoryFactory(project=project)
        TaskFactory(project=project, category=category)
        foreign = CategoryFactory(project=ProjectFactory(user=user))

        with pytest.raises(InvalidReassignmentTarget):
            services.delete_category(category, reassign_to=foreign.pk)

        assert Category.objects.filter(pk=category.pk).exists()
        assert Task.objects.filter(category=category).count() == 1

    def test_unknown_target_refused(self, project, category):
        CategoryFactory(project=project)
        TaskFactory(project=project, category=category)
        with pytest.raises(InvalidReassignmentTarget):
            services.delete_category(category, reassign_to=uuid.uuid4())

    @patch("apps.tasks.services.get_object_or_404", wraps=get_object_or_404)
    def test_project_row_locked_before_counting(self, mock_get, project, category):
        spare = CategoryFactory(project=project)
        services.delete_category(spare)

        first = mock_get.call_args_list[0]
        queryset = first.args[0]
        assert queryset.model is Project
        assert queryset.query.select_for_update
        assert first.kwargs["pk"] == project.pk

    def test_second_delete_sees_reduced_count(self, project, category):
        spare = CategoryFactory(project=project)
        stale_view_of_category = Category.objects.get(pk=category.pk)

        services.delete_category(spare)

        with pytest.raises(LastCategory):
            services.delete_category(stale_view_of_category)
        assert Category.objects.filter(project=project).count() == 1

    def test_vanished_category_is_404(self, project, category):
        spare = CategoryFactory(project=project)
        Category.objects.filter(pk=spare.pk).delete()
        with pytest.raises(Http404):
            services.delete_category(spare)
        assert Category.objects.filter(pk=category.pk).exists()
