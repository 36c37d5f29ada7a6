"""Custom User model with UUID primary key and unique email."""

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom User model extending Django's AbstractUser.

    Uses UUID as primary key (avoids sequential ID enumeration).
    Email is required and unique — used alongside username for
    authentication. Each user owns one or more projects.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, blank=False)

    class Meta:
        ordering = ["-date_joined"]

    def __str__(self):
        return f"{self.username} ({self.email})"
