"""
Role dashboards.

GET /api/dashboard/ picks the dashboard for the user's highest role; the
per-role routes serve one dashboard each and refuse other roles.
"""
import logging

from rest_framework import status
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import HasRole, require_tenant, resolve_actor
from accounts.models import Role
from dashboards import services
from dashboards.pages import render_page

logger = logging.getLogger(__name__)


def _graduate(request, actor):
    require_tenant(actor)
    props = services.graduate_dashboard(actor)
    if props is None:
        return Response({"detail": "Graduate profile not found."}, status=status.HTTP_404_NOT_FOUND)
    return render_page(request, "Dashboard/Graduate", props)


def _employer(request, actor):
    props = services.employer_dashboard(actor)
    if props is None:
        return Response({"detail": "Employer profile not found."}, status=status.HTTP_404_NOT_FOUND)
    return render_page(request, "Dashboard/Employer", props)


def _institution_admin(request, actor):
    require_tenant(actor)
    return render_page(request, "InstitutionAdmin/Dashboard", services.institution_dashboard(actor))


def _super_admin(request, actor):
    return render_page(request, "SuperAdmin/Dashboard", services.super_admin_dashboard(actor))


DASHBOARDS = {
    Role.SUPER_ADMIN: _super_admin,
    Role.INSTITUTION_ADMIN: _institution_admin,
    Role.EMPLOYER: _employer,
    Role.GRADUATE: _graduate,
}


class DashboardView(APIView):
    """GET /api/dashboard/"""
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        role = actor.primary_role
        if role is None:
            raise PermissionDenied("No dashboard is available for this account.")
        logger.debug(f"Dashboard for {actor.user.email} as {role}")
        return DASHBOARDS[role](request, actor)


class RoleDashboardView(APIView):
    """GET /api/dashboard/<role>/"""
    role = None

    def get(self, request):
        actor = resolve_actor(request)
        return DASHBOARDS[self.role](request, actor)


class GraduateDashboardView(RoleDashboardView):
    role = Role.GRADUATE
    permission_classes = [IsAuthenticated, HasRole.of(Role.GRADUATE)]


class EmployerDashboardView(RoleDashboardView):
    role = Role.EMPLOYER
    permission_classes = [IsAuthenticated, HasRole.of(Role.EMPLOYER)]


class InstitutionAdminDashboardView(RoleDashboardView):
    role = Role.INSTITUTION_ADMIN
    permission_classes = [IsAuthenticated, HasRole.of(Role.INSTITUTION_ADMIN)]


class SuperAdminDashboardView(RoleDashboardView):
    role = Role.SUPER_ADMIN
    permission_classes = [IsAuthenticated, HasRole.of(Role.SUPER_ADMIN)]
