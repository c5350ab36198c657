from django.contrib import admin

from graduates.models import Course, Graduate, JobApplication


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "department", "level", "is_active", "tenant")
    list_filter = ("level", "is_active")
    search_fields = ("code", "name", "department")


@admin.register(Graduate)
class GraduateAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "graduation_year", "employment_status", "tenant")
    list_filter = ("employment_status", "graduation_year", "profile_visibility")
    search_fields = ("name", "email", "student_id")
    raw_id_fields = ("course",)


@admin.register(JobApplication)
class JobApplicationAdmin(admin.ModelAdmin):
    list_display = ("id", "graduate", "job_id", "status", "match_score", "created_at")
    list_filter = ("status", "is_flagged")
    raw_id_fields = ("graduate",)
