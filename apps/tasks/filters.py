"""
django-filter FilterSet for the project task list.

Supports filtering by:
  - section (exact match or comma-separated list)
  - status (exact match or comma-separated list)
  - priority (exact match or comma-separated list)
  - category UUID
"""

from django_filters import rest_framework as filters

from .models import Task


class TaskFilter(filters.FilterSet):
    """
    Filterable fields exposed as query parameters on GET .../tasks/.

    Examples:
        ?section=current
        ?status=todo,in_progress
        ?priority=high,medium
        ?category=<uuid>
    """

    section = filters.CharFilter(method="filter_csv_field")
    status = filters.CharFilter(method="filter_csv_field")
    priority = filters.CharFilter(method="filter_csv_field")
    category = filters.UUIDFilter(field_name="category__id")

    class Meta:
        model = Task
        fields = ["section", "status", "priority", "category"]

    # ----- helpers -----

    def filter_csv_field(self, queryset, name, value):
        """Allow comma-separated values, e.g. ?status=todo,in_progress."""
        values = [v.strip() for v in value.split(",") if v.strip()]
        if values:
            return queryset.filter(**{f"{name}__in": values})
        return queryset
