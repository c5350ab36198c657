from django.urls import path

from themes.views import (
    ThemeAccessibilityView,
    ThemeCssView,
    ThemeDetailView,
    ThemeListCreateView,
    ThemePreviewView,
    ThemeSetDefaultView,
)

app_name = "themes"

urlpatterns = [
    path("", ThemeListCreateView.as_view(), name="theme-list"),
    path("<int:pk>/", ThemeDetailView.as_view(), name="theme-detail"),
    path("<int:pk>/set-default/", ThemeSetDefaultView.as_view(), name="theme-set-default"),
    path("<int:pk>/css/", ThemeCssView.as_view(), name="theme-css"),
    path("<int:pk>/preview/", ThemePreviewView.as_view(), name="theme-preview"),
    path("<int:pk>/accessibility/", ThemeAccessibilityView.as_view(), name="theme-accessibility"),
]
