"""
Root conftest — shared pytest fixtures and factory-boy factories.

All fixtures use the ``db`` marker implicitly via ``@pytest.mark.django_db``
on individual tests, or via the ``db`` fixture where noted.

Factories create rows directly; ``ProjectFactory`` does not add the
default categories (use ``apps.tasks.services.create_project`` for that).
"""

import pytest
from rest_framework.test import APIClient

import factory
from django.contrib.auth import get_user_model
from apps.tasks.models import Category, Project, Task

User = get_user_model()


# ===================================================================
# Factories
# ===================================================================

class UserFactory(factory.django.DjangoModelFactory):
    """Create a User with a hashed password and unique username/email."""

    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f"testuser{n}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.com")
    password = factory.PostGeneration(
        lambda obj, create, extracted, **kw: obj.set_password(extracted or "TestPass123!")
        or obj.save()
    )


class ProjectFactory(factory.django.DjangoModelFactory):
    """Create a bare Project owned by a given user."""

    class Meta:
        model = Project

    name = factory.Sequence(lambda n: f"Project {n}")
    user = factory.SubFactory(UserFactory)


class CategoryFactory(factory.django.DjangoModelFactory):
    """Create a Category inside a given project."""

    class Meta:
        model = Category

    name = factory.Sequence(lambda n: f"Category {n}")
    project = factory.SubFactory(ProjectFactory)


class TaskFactory(factory.django.DjangoModelFactory):
    """Create a todo Task; its category is created in the same project."""

    class Meta:
        model = Task

    title = factory.Sequence(lambda n: f"Task {n}")
    description = "A test task"
    status = Task.Status.TODO
    section = Task.Section.CURRENT
    priority = Task.Priority.NONE
    project = factory.SubFactory(ProjectFactory)
    category = factory.SubFactory(
        CategoryFactory, project=factory.SelfAttribute("..project")
    )


# ===================================================================
# Fixtures
# ===================================================================

@pytest.fixture
def api_client():
    """Unauthenticated DRF test client."""
    return APIClient()


@pytest.fixture
def user(db):
    """A persisted User instance (password: TestPass123!)."""
    return UserFactory()


@pytest.fixture
def other_user(db):
    """A second user for cross-user isolation tests."""
    return UserFactory()


@pytest.fixture
def auth_client(user):
    """Authenticated DRF client for ``user``."""
    client = APIClient()
    client.force_authenticate(user=user)
    return client


@pytest.fixture
def project(user):
    """A Project owned by ``user``."""
    return ProjectFactory(user=user)


@pytest.fixture
def category(project):
    """A Category inside ``project``."""
    return CategoryFactory(project=project, name="Feature")


@pytest.fixture
def task(project, category):
    """A todo Task in ``project`` / ``category``."""
    return TaskFactory(project=project, category=category)
