"""
Tenant administration API (super-admin only).
"""
from django.db.models import Q
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import resolve_actor, require
from tenant.commands import add_domain, create_tenant, update_tenant
from tenant.models import Tenant
from tenant.serializers import (
    DomainCreateSerializer,
    DomainSerializer,
    TenantCreateSerializer,
    TenantSerializer,
    TenantUpdateSerializer,
)


class TenantListCreateView(APIView):
    """
    GET  /api/tenants/      list institutions (?status=, ?search=)
    POST /api/tenants/      create an institution
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "tenants.manage")

        tenants = Tenant.objects.prefetch_related("domains")
        status_filter = request.query_params.get("status")
        if status_filter:
            tenants = tenants.filter(status=status_filter)
        search = request.query_params.get("search")
        if search:
            tenants = tenants.filter(Q(name__icontains=search) | Q(slug__icontains=search))

        return Response(TenantSerializer(tenants, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)

        serializer = TenantCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_tenant(actor, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)

        return Response(TenantSerializer(result.data["tenant"]).data, status=status.HTTP_201_CREATED)


class TenantDetailView(APIView):
    """
    GET   /api/tenants/<pk>/
    PATCH /api/tenants/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        actor = resolve_actor(request)
        require(actor, "tenants.manage")
        tenant = get_object_or_404(Tenant, pk=pk)
        return Response(TenantSerializer(tenant).data)

    def patch(self, request, pk):
        actor = resolve_actor(request)
        tenant = get_object_or_404(Tenant, pk=pk)

        serializer = TenantUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_tenant(actor, tenant, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(TenantSerializer(result.data["tenant"]).data)


class TenantDomainView(APIView):
    """
    POST /api/tenants/<pk>/domains/
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor = resolve_actor(request)
        tenant = get_object_or_404(Tenant, pk=pk)

        serializer = DomainCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = add_domain(actor, tenant, **serializer.validated_data)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_400_BAD_REQUEST)
        return Response(DomainSerializer(result.data["domain"]).data, status=status.HTTP_201_CREATED)


class CurrentTenantView(APIView):
    """
    GET /api/tenant/

    The institution resolved for this request (public branding info).
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        tenant = actor.tenant
        if tenant is None:
            return Response({"tenant": None})
        return Response({
            "tenant": {
                "id": tenant.id,
                "name": tenant.name,
                "slug": tenant.slug,
                "status": tenant.status,
                "mode": tenant.mode,
            }
        })
