"""Tests for Project, Category and Task serializers."""

import pytest
from django.db.models import Count
from rest_framework.test import APIRequestFactory

from apps.tasks.models import Category
from apps.tasks.serializers import (
    CategoryDeleteSerializer,
    CategorySerializer,
    ProjectSerializer,
    TaskSectionSerializer,
    TaskSerializer,
    TaskStatusSerializer,
)
from conftest import CategoryFactory, ProjectFactory, TaskFactory

factory = APIRequestFactory()


def _fake_request(user):
    """Return a minimal DRF request with ``user`` set."""
    req = factory.get("/fake/")
    req.user = user
    return req


# ===================================================================
# Project serializer
# ===================================================================
@pytest.mark.django_db
class TestProjectSerializer:

    def test_valid_create(self, user):
        s = ProjectSerializer(
            data={"name": "Work", "description": "Day job"},
            context={"request": _fake_request(user)},
        )
        assert s.is_valid(), s.errors

    def test_duplicate_name_rejected_ignoring_case(self, user):
        ProjectFactory(user=user, name="Work")
        s = ProjectSerializer(
            data={"name": "wOrK"},
            context={"request": _fake_request(user)},
        )
        assert not s.is_valid()
        assert "name" in s.errors

    def test_same_name_different_user_ok(self, user, other_user):
        ProjectFactory(user=user, name="Shared")
        s = ProjectSerializer(
            data={"name": "Shared"},
            context={"request": _fake_request(other_user)},
        )
        assert s.is_valid(), s.errors

    def test_rename_to_own_name_ok(self, project):
        s = ProjectSerializer(
            project,
            data={"name": project.name.upper()},
            partial=True,
            context={"request": _fake_request(project.user)},
        )
        assert s.is_valid(), s.errors

    def test_empty_name_rejected(self, user):
        s = ProjectSerializer(data={"name": ""}, context={"request": _fake_request(user)})
        assert not s.is_valid()

    def test_null_description_becomes_blank(self, user):
        s = ProjectSerializer(
            data={"name": "X", "description": None},
            context={"request": _fake_request(user)},
        )
        assert s.is_valid(), s.errors
        assert s.validated_data["description"] == ""


# ===================================================================
# Category serializer
# ===================================================================
@pytest.mark.django_db
class TestCategorySerializer:

    def test_valid_create(self, project):
        s = CategorySerializer(data={"name": "Research"}, context={"project": project})
        assert s.is_valid(), s.errors

    def test_duplicate_name_rejected_ignoring_case(self, project):
        CategoryFactory(project=project, name="Fix")
        s = CategorySerializer(data={"name": "FIX"}, context={"project": project})
        assert not s.is_valid()
        assert "name" in s.errors

    def test_same_name_other_project_ok(self, user, project):
        CategoryFactory(project=ProjectFactory(user=user), name="Fix")
        s = CategorySerializer(data={"name": "Fix"}, context={"project": project})
        assert s.is_valid(), s.errors

    def test_task_count_present(self, project, category):
        TaskFactory.create_batch(2, project=project, category=category)
        cat = Category.objects.filter(pk=category.pk).annotate(task_count=Count("tasks")).first()
        assert CategorySerializer(cat).data["task_count"] == 2

    def test_delete_params(self):
        assert CategoryDeleteSerializer(data={}).is_valid()
        assert not CategoryDeleteSerializer(data={"reassign_to": "not-a-uuid"}).is_valid()


# ===================================================================
# Task serializer
# ===================================================================
@pytest.mark.django_db
class TestTaskSerializer:

    def test_valid_create(self, project, category):
        s = TaskSerializer(
            data={"title": "New task", "category": str(category.pk)},
            context={"project": project},
        )
        assert s.is_valid(), s.errors

    def test_category_required_on_create(self, project):
        s = TaskSerializer(data={"title": "Homeless"}, context={"project": project})
        assert not s.is_valid()
        assert "category" in s.errors

    def test_category_from_other_project_rejected(self, user, project):
        foreign = CategoryFactory(project=ProjectFactory(user=user))
        s = TaskSerializer(
            data={"title": "Wrong home", "category": str(foreign.pk)},
            context={"project": project},
        )
        assert not s.is_valid()
        assert "category" in s.errors

    def test_null_priority_means_none(self, project, category):
        s = TaskSerializer(
            data={"title": "t", "category": str(category.pk), "priority": None},
            context={"project": project},
        )
        assert s.is_valid(), s.errors
        assert s.validated_data["priority"] == "none"

    def test_invalid_unit_rejected(self, project, category):
        s = TaskSerializer(
            data={
                "title": "t",
                "category": str(category.pk),
                "time_estimate_value": 2,
                "time_estimate_unit": "weeks",
            },
            context={"project": project},
        )
        assert not s.is_valid()
        assert "time_estimate_unit" in s.errors

    def test_zero_estimate_rejected(self, project, category):
        s = TaskSerializer(
            data={"title": "t", "category": str(category.pk), "time_estimate_value": 0},
            context={"project": project},
        )
        assert not s.is_valid()
        assert "time_estimate_value" in s.errors

    def test_completion_date_read_only(self, task):
        s = TaskSerializer(
            task,
            data={"completion_date": "2024-01-01T00:00:00Z"},
            partial=True,
            context={"project": task.project},
        )
        assert s.is_valid(), s.errors
        assert "completion_date" not in s.validated_data

    def test_output_fields(self, project, category):
        task = TaskFactory(
            project=project,
            category=category,
            time_estimate_value=2,
            time_estimate_unit="hours",
        )
        data = TaskSerializer(task).data
        assert data["category_name"] == category.name
        assert data["estimate_minutes"] == 120
        assert data["completion_date"] is None


class TestTransitionSerializers:

    def test_status_choices(self):
        assert TaskStatusSerializer(data={"status": "cancelled"}).is_valid()
        assert not TaskStatusSerializer(data={"status": "done"}).is_valid()

    def test_section_choices(self):
        assert TaskSectionSerializer(data={"section": "future"}).is_valid()
        assert not TaskSectionSerializer(data={"section": "someday"}).is_valid()
