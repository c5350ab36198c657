from rest_framework import serializers

from tenant.models import Domain, Tenant


class DomainSerializer(serializers.ModelSerializer):
    class Meta:
        model = Domain
        fields = ("id", "domain", "is_primary", "created_at")
        read_only_fields = ("id", "created_at")


class TenantSerializer(serializers.ModelSerializer):
    domains = DomainSerializer(many=True, read_only=True)

    class Meta:
        model = Tenant
        fields = (
            "id",
            "public_id",
            "name",
            "slug",
            "mode",
            "db_alias",
            "status",
            "contact_email",
            "data",
            "domains",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "public_id", "domains", "created_at", "updated_at")


class TenantCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    slug = serializers.SlugField(max_length=100, required=False, allow_blank=True, default="")
    mode = serializers.ChoiceField(choices=Tenant.IsolationMode.choices, default=Tenant.IsolationMode.SHARED)
    db_alias = serializers.CharField(max_length=100, default="default")
    domain = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    contact_email = serializers.EmailField(required=False, allow_blank=True, default="")


class TenantUpdateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255, required=False)
    mode = serializers.ChoiceField(choices=Tenant.IsolationMode.choices, required=False)
    db_alias = serializers.CharField(max_length=100, required=False)
    status = serializers.ChoiceField(choices=Tenant.Status.choices, required=False)
    contact_email = serializers.EmailField(required=False, allow_blank=True)
    data = serializers.JSONField(required=False)


class DomainCreateSerializer(serializers.Serializer):
    domain = serializers.CharField(max_length=255)
    is_primary = serializers.BooleanField(default=False)
