from rest_framework import serializers

from employers.models import Employer, Job


class EmployerSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source="user.email", read_only=True)
    remaining_job_posts = serializers.IntegerField(read_only=True)
    is_verified = serializers.BooleanField(read_only=True)

    class Meta:
        model = Employer
        fields = (
            "id",
            "email",
            "company_name",
            "industry",
            "company_size",
            "website",
            "description",
            "address",
            "contact_person_name",
            "contact_email",
            "contact_phone",
            "verification_status",
            "is_verified",
            "verified_at",
            "rejection_reason",
            "subscription_plan",
            "job_post_limit",
            "remaining_job_posts",
            "total_jobs_posted",
            "active_jobs_count",
            "total_hires",
            "created_at",
        )
        read_only_fields = fields


class EmployerUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employer
        fields = (
            "company_name",
            "industry",
            "company_size",
            "website",
            "description",
            "address",
            "contact_person_name",
            "contact_email",
            "contact_phone",
        )


class EmployerVerifySerializer(serializers.Serializer):
    decision = serializers.ChoiceField(
        choices=(
            Employer.VerificationStatus.VERIFIED,
            Employer.VerificationStatus.REJECTED,
            Employer.VerificationStatus.UNDER_REVIEW,
        )
    )
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class JobSerializer(serializers.ModelSerializer):
    employer_name = serializers.CharField(source="employer.company_name", read_only=True)
    employer_verified = serializers.BooleanField(source="employer.is_verified", read_only=True)
    salary_range = serializers.CharField(read_only=True)
    application_rate = serializers.FloatField(read_only=True)
    is_expired = serializers.BooleanField(read_only=True)
    days_until_deadline = serializers.IntegerField(read_only=True)

    class Meta:
        model = Job
        fields = (
            "id",
            "employer",
            "employer_name",
            "employer_verified",
            "tenant",
            "title",
            "description",
            "location",
            "target_programs",
            "required_skills",
            "preferred_qualifications",
            "experience_level",
            "min_experience_years",
            "salary_min",
            "salary_max",
            "salary_type",
            "salary_negotiable",
            "salary_range",
            "job_type",
            "work_arrangement",
            "status",
            "application_deadline",
            "days_until_deadline",
            "is_expired",
            "view_count",
            "total_applications",
            "application_rate",
            "rejection_reason",
            "approved_at",
            "created_at",
        )
        read_only_fields = fields


class JobWriteSerializer(serializers.ModelSerializer):
    required_skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    target_programs = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    preferred_qualifications = serializers.ListField(child=serializers.CharField(max_length=255), required=False)

    class Meta:
        model = Job
        fields = (
            "tenant",
            "title",
            "description",
            "location",
            "target_programs",
            "required_skills",
            "preferred_qualifications",
            "experience_level",
            "min_experience_years",
            "salary_min",
            "salary_max",
            "salary_type",
            "salary_negotiable",
            "job_type",
            "work_arrangement",
            "requires_approval",
            "application_deadline",
        )

    def validate_application_deadline(self, value):
        from django.utils import timezone

        if value and value < timezone.localdate():
            raise serializers.ValidationError("The application deadline cannot be in the past.")
        return value


class JobActionSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")
    days = serializers.IntegerField(required=False, default=30)
