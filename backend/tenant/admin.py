"""
Django Admin registration for Tenant models.
"""
from django.contrib import admin

from tenant.models import Domain, Tenant


class DomainInline(admin.TabularInline):
    model = Domain
    extra = 0


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    """Admin interface for Tenant."""

    list_display = ["name", "slug", "mode", "db_alias", "status", "updated_at"]
    list_filter = ["mode", "status"]
    search_fields = ["name", "slug", "db_alias"]
    readonly_fields = ["public_id", "created_at", "updated_at"]
    inlines = [DomainInline]

    fieldsets = (
        (None, {
            "fields": ("name", "slug", "public_id", "contact_email"),
        }),
        ("Database Configuration", {
            "fields": ("mode", "db_alias", "status"),
        }),
        ("Settings", {
            "fields": ("data",),
            "classes": ("collapse",),
        }),
        ("Timestamps", {
            "fields": ("created_at", "updated_at"),
            "classes": ("collapse",),
        }),
    )

    def has_delete_permission(self, request, obj=None):
        """Only suspended tenants can be deleted."""
        if obj and obj.status != Tenant.Status.SUSPENDED:
            return False
        return super().has_delete_permission(request, obj)
