"""
Component theme API for the tenant in context.
"""
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.authz import require, require_tenant, resolve_actor
from themes.commands import create_theme, delete_theme, set_default_theme, update_theme
from themes.models import ComponentTheme
from themes.serializers import (
    ComponentThemeSerializer,
    ComponentThemeUpdateSerializer,
    ComponentThemeWriteSerializer,
)
from themes.services import (
    accessibility_issues,
    compile_css,
    inheritance_chain,
    merged_config,
    preview_html,
)


def _fail(result):
    code = status.HTTP_404_NOT_FOUND if result.not_found else status.HTTP_400_BAD_REQUEST
    return Response({"detail": result.error}, status=code)


def _theme_for(request, pk, permission="themes.view"):
    actor = resolve_actor(request)
    require(actor, permission)
    tenant = require_tenant(actor)
    return actor, get_object_or_404(ComponentTheme, pk=pk, tenant=tenant)


class ThemeListCreateView(APIView):
    """
    GET  /api/themes/
    POST /api/themes/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        actor = resolve_actor(request)
        require(actor, "themes.view")
        tenant = require_tenant(actor)
        themes = ComponentTheme.objects.filter(tenant=tenant)
        return Response(ComponentThemeSerializer(themes, many=True).data)

    def post(self, request):
        actor = resolve_actor(request)
        serializer = ComponentThemeWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = create_theme(actor, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(ComponentThemeSerializer(result.data["theme"]).data, status=status.HTTP_201_CREATED)


class ThemeDetailView(APIView):
    """
    GET    /api/themes/<pk>/   (includes merged config and inheritance chain)
    PATCH  /api/themes/<pk>/
    DELETE /api/themes/<pk>/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        _, theme = _theme_for(request, pk)
        data = ComponentThemeSerializer(theme).data
        data["merged_config"] = merged_config(theme)
        data["inheritance_chain"] = [
            {"id": link.id, "slug": link.slug, "is_default": link.is_default}
            for link in inheritance_chain(theme)
        ]
        return Response(data)

    def patch(self, request, pk):
        actor, theme = _theme_for(request, pk, "themes.manage")
        serializer = ComponentThemeUpdateSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        result = update_theme(actor, theme, **serializer.validated_data)
        if not result.success:
            return _fail(result)
        return Response(ComponentThemeSerializer(result.data["theme"]).data)

    def delete(self, request, pk):
        actor, theme = _theme_for(request, pk, "themes.manage")
        result = delete_theme(actor, theme)
        if not result.success:
            return _fail(result)
        return Response(status=status.HTTP_204_NO_CONTENT)


class ThemeSetDefaultView(APIView):
    """POST /api/themes/<pk>/set-default/"""
    permission_classes = [IsAuthenticated]

    def post(self, request, pk):
        actor, theme = _theme_for(request, pk, "themes.manage")
        result = set_default_theme(actor, theme)
        if not result.success:
            return _fail(result)
        return Response(ComponentThemeSerializer(result.data["theme"]).data)


class ThemeCssView(APIView):
    """GET /api/themes/<pk>/css/?minify=1 - compiled stylesheet (text/css)."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        _, theme = _theme_for(request, pk)
        minify = request.query_params.get("minify", "").lower() in ("1", "true")
        return HttpResponse(compile_css(theme, minify=minify), content_type="text/css")


class ThemePreviewView(APIView):
    """GET /api/themes/<pk>/preview/ - standalone HTML page."""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        _, theme = _theme_for(request, pk)
        return HttpResponse(preview_html(theme), content_type="text/html")


class ThemeAccessibilityView(APIView):
    """GET /api/themes/<pk>/accessibility/"""
    permission_classes = [IsAuthenticated]

    def get(self, request, pk):
        _, theme = _theme_for(request, pk)
        issues = accessibility_issues(merged_config(theme))
        return Response({"passes": not issues, "issues": issues})
