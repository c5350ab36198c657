from django.contrib.auth import authenticate
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from tenant.models import Tenant

from .models import Role, User


def tokens_for_user(user: User) -> dict:
    """
    Issue a token pair carrying the tenant and role claims.

    Claims survive refresh because SimpleJWT copies them onto new access tokens.
    """
    refresh = RefreshToken.for_user(user)
    refresh["tenant_id"] = user.institution_id
    refresh["roles"] = sorted(user.role_names)
    refresh["user_type"] = user.user_type
    return {"access": str(refresh.access_token), "refresh": str(refresh)}


class UserSerializer(serializers.ModelSerializer):
    roles = serializers.SerializerMethodField()
    institution = serializers.SlugRelatedField(slug_field="slug", read_only=True)

    class Meta:
        model = User
        fields = (
            "id",
            "email",
            "name",
            "phone",
            "user_type",
            "institution",
            "roles",
            "is_suspended",
            "date_joined",
        )

    def get_roles(self, obj):
        return sorted(obj.role_names)


class RegistrationSerializer(serializers.Serializer):
    email = serializers.EmailField()
    name = serializers.CharField(max_length=150)
    password = serializers.CharField(min_length=8, write_only=True)
    role = serializers.ChoiceField(choices=(Role.GRADUATE, Role.EMPLOYER))

    # Graduates
    institution = serializers.SlugField(required=False)
    graduation_year = serializers.IntegerField(required=False, min_value=1900)
    student_id = serializers.CharField(max_length=50, required=False, allow_blank=True)

    # Employers
    company_name = serializers.CharField(max_length=255, required=False)
    industry = serializers.CharField(max_length=100, required=False, allow_blank=True)
    company_size = serializers.ChoiceField(
        choices=("startup", "small", "medium", "large", "enterprise"),
        required=False,
    )

    def validate_email(self, value: str):
        return value.lower()

    def validate(self, attrs):
        if attrs["role"] == Role.GRADUATE:
            slug = attrs.get("institution")
            if not slug:
                raise serializers.ValidationError({"institution": "Graduates must choose an institution."})
            tenant = Tenant.objects.active().filter(slug=slug.lower()).first()
            if tenant is None:
                raise serializers.ValidationError({"institution": "Unknown institution."})
            attrs["institution"] = tenant
        elif not attrs.get("company_name"):
            raise serializers.ValidationError({"company_name": "Employers must provide a company name."})
        return attrs


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    username_field = User.EMAIL_FIELD

    def validate(self, attrs):
        authenticate_kwargs = {
            self.username_field: attrs.get("email"),
            "password": attrs.get("password"),
        }
        user = authenticate(request=self.context.get("request"), **authenticate_kwargs)
        if not user:
            raise AuthenticationFailed("Invalid credentials")
        if user.is_suspended:
            raise AuthenticationFailed("Your account has been suspended.")
        return {**tokens_for_user(user), "user": UserSerializer(user).data}


class RoleAssignmentSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.NAMES)
    institution = serializers.SlugField(required=False)

    def validate_institution(self, value):
        tenant = Tenant.objects.filter(slug=value.lower()).first()
        if tenant is None:
            raise serializers.ValidationError("Unknown institution.")
        return tenant


class SuspendUserSerializer(serializers.Serializer):
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
