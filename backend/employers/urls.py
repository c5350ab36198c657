from django.urls import path, re_path

from employers.views import (
    EmployerListView,
    EmployerProfileView,
    EmployerVerifyView,
    JobActionView,
    JobDetailView,
    JobListCreateView,
)

app_name = "employers"

urlpatterns = [
    # ==========================================================================
    # Employers
    # ==========================================================================
    path("employers/", EmployerListView.as_view(), name="employer-list"),
    path("employers/me/", EmployerProfileView.as_view(), name="employer-profile"),
    path("employers/<int:pk>/verify/", EmployerVerifyView.as_view(), name="employer-verify"),

    # ==========================================================================
    # Jobs
    # ==========================================================================
    path("jobs/", JobListCreateView.as_view(), name="job-list"),
    path("jobs/<int:pk>/", JobDetailView.as_view(), name="job-detail"),
    re_path(
        r"^jobs/(?P<pk>\d+)/(?P<action>approve|reject|pause|resume|fill|extend)/$",
        JobActionView.as_view(),
        name="job-action",
    ),
]
