from django.contrib import admin

from .models import Category, Report


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "office")
    list_filter = ("office",)
    search_fields = ("name",)
    filter_horizontal = ("companies",)


@admin.register(Report)
class ReportAdmin(admin.ModelAdmin):
    list_display = ("id", "title", "category", "status", "created_by",
                    "assigned_to", "co_assigned_to", "created_at")
    list_filter = ("status", "category", "anonymous")
    search_fields = ("title", "description")
    raw_id_fields = ("created_by", "assigned_to", "co_assigned_to")
    # Lifecycle fields change only through the workflow services.
    readonly_fields = ("status", "rejection_reason", "assigned_to",
                       "co_assigned_to", "created_at", "updated_at")
