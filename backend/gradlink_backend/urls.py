from django.contrib import admin
from django.urls import include, path
from django.conf import settings
from django.conf.urls.static import static

from ops.urls import health_patterns, metrics_patterns

urlpatterns = [
    # Health and metrics
    path("_health/", include(health_patterns)),
    path("_metrics/", include(metrics_patterns)),

    # Admin and API
    path("admin/", admin.site.urls),
    path("api/", include("accounts.urls")),
    path("api/", include("tenant.urls")),
    path("api/", include("graduates.urls")),
    path("api/", include("employers.urls")),
    path("api/", include("notifications.urls")),
    path("api/career-analytics/", include("analytics.urls")),
    path("api/dashboard/", include("dashboards.urls")),
    path("api/themes/", include("themes.urls")),
    path("api-auth/", include("rest_framework.urls")),
]

# Serve media files in development
if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
