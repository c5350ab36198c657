from django.urls import path

from tenant.views import (
    CurrentTenantView,
    TenantDetailView,
    TenantDomainView,
    TenantListCreateView,
)

app_name = "tenant"

urlpatterns = [
    path("tenant/", CurrentTenantView.as_view(), name="current-tenant"),
    path("tenants/", TenantListCreateView.as_view(), name="tenant-list"),
    path("tenants/<int:pk>/", TenantDetailView.as_view(), name="tenant-detail"),
    path("tenants/<int:pk>/domains/", TenantDomainView.as_view(), name="tenant-domains"),
]
