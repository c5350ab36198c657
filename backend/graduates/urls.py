from django.urls import path

from graduates.views import (
    ApplicationListView,
    ApplicationStatusView,
    ApplyToJobView,
    CourseDetailView,
    CourseListCreateView,
    GraduateDetailView,
    GraduateListCreateView,
    GraduateProfileView,
    GraduateSearchView,
    JobApplicationsView,
    MyApplicationsView,
    WithdrawApplicationView,
)

app_name = "graduates"

urlpatterns = [
    # ==========================================================================
    # Courses
    # ==========================================================================
    path("courses/", CourseListCreateView.as_view(), name="course-list"),
    path("courses/<int:pk>/", CourseDetailView.as_view(), name="course-detail"),

    # ==========================================================================
    # Graduates
    # ==========================================================================
    path("graduates/", GraduateListCreateView.as_view(), name="graduate-list"),
    path("graduates/me/", GraduateProfileView.as_view(), name="graduate-profile"),
    path("graduates/search/", GraduateSearchView.as_view(), name="graduate-search"),
    path("graduates/<int:pk>/", GraduateDetailView.as_view(), name="graduate-detail"),

    # ==========================================================================
    # Applications
    # ==========================================================================
    path("jobs/<int:pk>/apply/", ApplyToJobView.as_view(), name="job-apply"),
    path("jobs/<int:pk>/applications/", JobApplicationsView.as_view(), name="job-applications"),
    path("applications/", ApplicationListView.as_view(), name="application-list"),
    path("applications/mine/", MyApplicationsView.as_view(), name="my-applications"),
    path("applications/<int:pk>/status/", ApplicationStatusView.as_view(), name="application-status"),
    path("applications/<int:pk>/withdraw/", WithdrawApplicationView.as_view(), name="application-withdraw"),
]
