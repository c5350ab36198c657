# accounts/urls.py
"""
URL configuration for accounts/auth API.

Endpoints:
- /auth/ - Authentication (register, login, refresh, logout, me)
- /users/ - User administration (roles, suspension)
"""

from django.urls import path

from .views import (
    # Auth
    RegisterView,
    LoginView,
    GradlinkTokenRefreshView,
    LogoutView,
    MeView,
    # Users
    UserListView,
    UserRoleView,
    UserSuspendView,
)

app_name = "accounts"

urlpatterns = [
    # ==========================================================================
    # Authentication
    # ==========================================================================
    path("auth/register/", RegisterView.as_view(), name="register"),
    path("auth/login/", LoginView.as_view(), name="login"),
    path("auth/refresh/", GradlinkTokenRefreshView.as_view(), name="token-refresh"),
    path("auth/logout/", LogoutView.as_view(), name="logout"),
    path("auth/me/", MeView.as_view(), name="me"),

    # ==========================================================================
    # Users
    # ==========================================================================
    path("users/", UserListView.as_view(), name="user-list"),
    path("users/<int:pk>/roles/", UserRoleView.as_view(), name="user-roles"),
    path("users/<int:pk>/roles/<str:role>/", UserRoleView.as_view(), name="user-role-delete"),
    path("users/<int:pk>/suspend/", UserSuspendView.as_view(), name="user-suspend"),
]
