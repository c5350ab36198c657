"""
Thin views that delegate to the commands layer.

Views handle: HTTP parsing, authentication, response formatting.
Commands handle: business rules and logging.
"""
from django.shortcuts import get_object_or_404
from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from accounts.authz import resolve_actor, require
from accounts.commands import assign_role, reactivate_user, register_user, revoke_role, suspend_user
from accounts.throttles import LoginRateThrottle, RegistrationRateThrottle

from .models import User
from .serializers import (
    EmailTokenObtainPairSerializer,
    RegistrationSerializer,
    RoleAssignmentSerializer,
    SuspendUserSerializer,
    UserSerializer,
    tokens_for_user,
)


def _fail(result):
    code = status.HTTP_404_NOT_FOUND if result.not_found else status.HTTP_400_BAD_REQUEST
    return Response({"detail": result.error}, status=code)


# =============================================================================
# Authentication
# =============================================================================

class RegisterView(APIView):
    """
    POST /api/auth/register/

    Self-registration for graduates (with institution slug) and employers.
    """
    permission_classes = [permissions.AllowAny]
    throttle_classes = [RegistrationRateThrottle]

    def post(self, request):
        serializer = RegistrationSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)

        result = register_user(
            email=data.pop("email"),
            password=data.pop("password"),
            name=data.pop("name"),
            role=data.pop("role"),
            institution=data.pop("institution", None),
            profile=data,
        )
        if not result.success:
            return _fail(result)

        user = result.data["user"]
        return Response(
            {**tokens_for_user(user), "user": UserSerializer(user).data},
            status=status.HTTP_201_CREATED,
        )


class LoginView(generics.GenericAPIView):
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]
    throttle_classes = [LoginRateThrottle]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class GradlinkTokenRefreshView(TokenRefreshView):
    permission_classes = [permissions.AllowAny]


class LogoutView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, *args, **kwargs):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({"detail": "Refresh token required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
        except TokenError:
            return Response({"detail": "Invalid token"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    """
    GET /api/auth/me/

    Current user with roles, effective permissions and resolved tenant.
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        return Response({
            "user": UserSerializer(actor.user).data,
            "permissions": sorted(actor.perms),
            "primary_role": actor.primary_role,
            "tenant": (
                {"id": actor.tenant.id, "slug": actor.tenant.slug, "name": actor.tenant.name}
                if actor.tenant else None
            ),
        })


# =============================================================================
# User administration (super-admin)
# =============================================================================

class UserListView(APIView):
    """
    GET /api/users/

    Query params:
    - role: filter by role name
    - institution: filter by tenant slug
    - search: email/name contains
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "users.view")

        users = User.objects.select_related("institution").order_by("email")

        role = request.query_params.get("role")
        if role:
            users = users.filter(user_roles__role__name=role)
        institution = request.query_params.get("institution")
        if institution:
            users = users.filter(institution__slug=institution)
        search = request.query_params.get("search")
        if search:
            users = users.filter(email__icontains=search) | users.filter(name__icontains=search)

        return Response(UserSerializer(users.distinct()[:200], many=True).data)


class UserRoleView(APIView):
    """
    POST   /api/users/<pk>/roles/          body: {"role": "...", "institution": "slug"}
    DELETE /api/users/<pk>/roles/<role>/
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        user = get_object_or_404(User, pk=pk)

        serializer = RoleAssignmentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = assign_role(
            actor,
            user,
            serializer.validated_data["role"],
            institution=serializer.validated_data.get("institution"),
        )
        if not result.success:
            return _fail(result)
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)

    def delete(self, request, pk, role):
        actor = resolve_actor(request)
        user = get_object_or_404(User, pk=pk)

        result = revoke_role(actor, user, role)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class UserSuspendView(APIView):
    """
    POST   /api/users/<pk>/suspend/   suspend
    DELETE /api/users/<pk>/suspend/   reactivate
    """
    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        user = get_object_or_404(User, pk=pk)

        serializer = SuspendUserSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = suspend_user(actor, user, serializer.validated_data["reason"])
        if not result.success:
            return _fail(result)
        return Response(UserSerializer(user).data)

    def delete(self, request, pk):
        actor = resolve_actor(request)
        user = get_object_or_404(User, pk=pk)

        result = reactivate_user(actor, user)
        if not result.success:
            return _fail(result)
        return Response(UserSerializer(user).data)
