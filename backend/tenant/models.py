"""
Tenant directory - institutions and where their data lives.

Tenant and Domain live in the SYSTEM database ("default"). Each tenant
either shares the default database (rows are separated by tenant_id) or
has a dedicated database referenced by alias.

db_alias maps to environment variables:
- "default" -> shared database
- "tenant_unilag" -> DATABASE_URL_TENANT_UNILAG env var

No DSNs or passwords are stored here, only alias names.
"""
import uuid
from contextlib import contextmanager

from django.db import models

from tenant.context import get_current_tenant_id, tenant_context


class TenantQuerySet(models.QuerySet):
    def active(self):
        return self.exclude(status=Tenant.Status.SUSPENDED)

    def writable(self):
        return self.filter(status=Tenant.Status.ACTIVE)


class Tenant(models.Model):
    """
    An institution using the platform.

    Graduates, courses, applications and analytics belong to a tenant and
    are routed to the tenant's database.
    """

    class IsolationMode(models.TextChoices):
        SHARED = "SHARED", "Shared Database"
        DEDICATED_DB = "DEDICATED_DB", "Dedicated Database"

    class Status(models.TextChoices):
        ACTIVE = "ACTIVE", "Active"
        READ_ONLY = "READ_ONLY", "Read Only"
        SUSPENDED = "SUSPENDED", "Suspended"

    public_id = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    name = models.CharField(max_length=255)
    slug = models.SlugField(max_length=100, unique=True)

    mode = models.CharField(
        max_length=20,
        choices=IsolationMode.choices,
        default=IsolationMode.SHARED,
    )
    db_alias = models.CharField(
        max_length=100,
        default="default",
        help_text="Database alias. Maps to DATABASE_URL_TENANT_{alias} env var for dedicated DBs.",
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.ACTIVE,
    )

    contact_email = models.EmailField(blank=True, default="")
    data = models.JSONField(default=dict, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = TenantQuerySet.as_manager()

    class Meta:
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="tenant_status_idx"),
            models.Index(fields=["db_alias"], name="tenant_db_alias_idx"),
        ]

    def __str__(self):
        return f"{self.slug} -> {self.db_alias} ({self.mode})"

    @property
    def is_shared(self) -> bool:
        return self.mode == self.IsolationMode.SHARED

    @property
    def is_dedicated(self) -> bool:
        return self.mode == self.IsolationMode.DEDICATED_DB

    @property
    def is_writable(self) -> bool:
        return self.status == self.Status.ACTIVE

    @property
    def is_suspended(self) -> bool:
        return self.status == self.Status.SUSPENDED

    def get_tenant_info(self) -> dict:
        """
        Routing info consumed by the resolver middleware.

        Returns dict with tenant_id, slug, db_alias, is_shared, status, is_writable.
        """
        return {
            "tenant_id": self.id,
            "slug": self.slug,
            "db_alias": self.db_alias,
            "is_shared": self.is_shared,
            "status": self.status,
            "is_writable": self.is_writable,
        }

    @contextmanager
    def run(self):
        """
        Run a block of code inside this tenant's context.

        Usage:
            for tenant in Tenant.objects.active():
                with tenant.run():
                    total += Graduate.objects.count()
        """
        with tenant_context(
            tenant_id=self.id,
            db_alias=self.db_alias,
            is_shared=self.is_shared,
        ):
            yield self

    @classmethod
    def resolve_identifier(cls, identifier) -> "Tenant | None":
        """Look up a tenant by numeric id or slug."""
        value = str(identifier).strip()
        if not value:
            return None
        lookup = {"id": int(value)} if value.isdigit() else {"slug": value.lower()}
        return cls.objects.filter(**lookup).first()


class Domain(models.Model):
    """A hostname that resolves to a tenant (e.g. careers.unilag.edu.ng)."""

    domain = models.CharField(max_length=255, unique=True)
    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.CASCADE,
        related_name="domains",
    )
    is_primary = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["domain"]

    def __str__(self):
        return self.domain

    def save(self, *args, **kwargs):
        self.domain = self.domain.lower().strip()
        super().save(*args, **kwargs)

    @classmethod
    def resolve_host(cls, host: str) -> "Tenant | None":
        """Map a request host (port stripped) to its tenant."""
        hostname = host.split(":")[0].lower()
        entry = cls.objects.select_related("tenant").filter(domain=hostname).first()
        return entry.tenant if entry else None


# =============================================================================
# Tenant-scoped models
# =============================================================================

class TenantScopedManager(models.Manager):
    """
    Manager that narrows every queryset to the current tenant.

    With no tenant context (system operations, management commands) the
    queryset is unfiltered.
    """

    def get_queryset(self):
        qs = super().get_queryset()
        tenant_id = get_current_tenant_id()
        if tenant_id is not None:
            qs = qs.filter(tenant_id=tenant_id)
        return qs


class TenantScopedModel(models.Model):
    """
    Abstract base for rows owned by a tenant.

    The tenant FK skips the database constraint because dedicated tenant
    databases do not hold the Tenant table.
    """

    tenant = models.ForeignKey(
        Tenant,
        on_delete=models.DO_NOTHING,
        db_constraint=False,
        related_name="+",
    )

    objects = TenantScopedManager()
    all_tenants = models.Manager()

    class Meta:
        abstract = True

    def save(self, *args, **kwargs):
        if self.tenant_id is None:
            tenant_id = get_current_tenant_id()
            if tenant_id is None:
                raise ValueError(
                    f"{type(self).__name__} requires a tenant (set one or run inside tenant context)."
                )
            self.tenant_id = tenant_id
        super().save(*args, **kwargs)
