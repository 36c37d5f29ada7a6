"""Custom permissions for enforcing object-level ownership."""

from rest_framework.permissions import BasePermission


class IsProjectOwner(BasePermission):
    """
    Object-level permission: only the owner of a project may access it
    or anything inside it.

    Accepts a Project (``user`` attribute) or a Category / Task
    (``project`` attribute).
    """

    def has_object_permission(self, request, view, obj):
        project = getattr(obj, "project", obj)
        return project.user_id == request.user.pk
