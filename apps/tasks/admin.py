"""Admin configuration for the tasks app."""

from django.contrib import admin
from django.utils import timezone

from .models import Category, Project, Task


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ("name", "user", "created_at")
    list_filter = ("user",)
    search_fields = ("name",)


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "project", "created_at")
    list_filter = ("project",)
    search_fields = ("name",)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ("title", "status", "section", "priority", "deadline", "project", "category")
    list_filter = ("status", "section", "priority", "project")
    search_fields = ("title", "description", "notes")
    readonly_fields = ("completion_date", "created_at", "updated_at")

    def save_model(self, request, obj, form, change):
        obj.updated_at = timezone.now()
        super().save_model(request, obj, form, change)
