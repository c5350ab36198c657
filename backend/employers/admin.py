from django.contrib import admin

from employers.models import Employer, Job


@admin.register(Employer)
class EmployerAdmin(admin.ModelAdmin):
    list_display = ("company_name", "industry", "company_size", "verification_status", "active_jobs_count")
    list_filter = ("verification_status", "company_size", "subscription_plan")
    search_fields = ("company_name", "user__email")
    raw_id_fields = ("user", "verified_by")


@admin.register(Job)
class JobAdmin(admin.ModelAdmin):
    list_display = ("title", "employer", "status", "application_deadline", "total_applications", "view_count")
    list_filter = ("status", "job_type", "work_arrangement")
    search_fields = ("title", "employer__company_name")
    raw_id_fields = ("employer", "approved_by", "tenant")
