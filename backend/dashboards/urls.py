from django.urls import path

from dashboards.views import (
    DashboardView,
    EmployerDashboardView,
    GraduateDashboardView,
    InstitutionAdminDashboardView,
    SuperAdminDashboardView,
)

app_name = "dashboards"

urlpatterns = [
    path("", DashboardView.as_view(), name="dashboard"),
    path("graduate/", GraduateDashboardView.as_view(), name="graduate"),
    path("employer/", EmployerDashboardView.as_view(), name="employer"),
    path("institution-admin/", InstitutionAdminDashboardView.as_view(), name="institution-admin"),
    path("super-admin/", SuperAdminDashboardView.as_view(), name="super-admin"),
]
