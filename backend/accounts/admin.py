from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import Company, Office, User


@admin.register(Office)
class OfficeAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("id", "name")
    search_fields = ("name",)


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "email", "first_name", "last_name",
                    "user_type", "company", "is_active")
    search_fields = ("username", "email")
    list_filter = ("is_active", "user_type", "offices")
    filter_horizontal = ("groups", "user_permissions", "offices")
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Municipality", {"fields": ("user_type", "offices", "company")}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Municipality", {"fields": ("email", "first_name", "last_name",
                                     "user_type", "company")}),
    )
