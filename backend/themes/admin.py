from django.contrib import admin

from themes.models import ComponentTheme


@admin.register(ComponentTheme)
class ComponentThemeAdmin(admin.ModelAdmin):
    list_display = ("name", "slug", "tenant", "is_default", "updated_at")
    list_filter = ("is_default",)
    search_fields = ("name", "slug", "tenant__slug")
    prepopulated_fields = {"slug": ("name",)}
