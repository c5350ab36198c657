"""
Page-component payloads.

UI routes answer with the component a client-side router should mount
and the props to mount it with:

    {"component": "Dashboard/Graduate", "props": {...}, "url": "/api/dashboard/", "version": "1"}
"""
from django.conf import settings
from rest_framework.response import Response


def page_payload(request, component: str, props: dict) -> dict:
    return {
        "component": component,
        "props": props,
        "url": request.get_full_path(),
        "version": str(getattr(settings, "PAGE_COMPONENT_VERSION", "1")),
    }


def render_page(request, component: str, props: dict, status=200) -> Response:
    return Response(page_payload(request, component, props), status=status)
