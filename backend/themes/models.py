"""
Component themes.

A theme is a JSON design-token config (colors, typography, spacing,
borders, animations) owned by a tenant. Themes live in the system
database next to the tenant directory.
"""
from django.db import models


class ComponentTheme(models.Model):
    tenant = models.ForeignKey(
        "tenant.Tenant",
        on_delete=models.CASCADE,
        related_name="themes",
    )
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=100)
    config = models.JSONField(default=dict)
    is_default = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-is_default", "name"]
        constraints = [
            models.UniqueConstraint(fields=["tenant", "slug"], name="uniq_theme_slug_per_tenant"),
        ]

    def __str__(self):
        return f"{self.name} ({self.tenant_id})"

    def parent(self):
        """The tenant default a non-default theme inherits from."""
        if self.is_default:
            return None
        return (
            ComponentTheme.objects.filter(tenant_id=self.tenant_id, is_default=True)
            .exclude(pk=self.pk)
            .first()
        )
