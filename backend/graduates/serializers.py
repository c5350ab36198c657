from rest_framework import serializers

from graduates.models import Course, Graduate, JobApplication, max_graduation_year


class CourseSerializer(serializers.ModelSerializer):
    graduate_count = serializers.SerializerMethodField()

    class Meta:
        model = Course
        fields = (
            "id",
            "name",
            "code",
            "department",
            "level",
            "description",
            "duration_months",
            "skills_gained",
            "career_paths",
            "is_active",
            "graduate_count",
            "created_at",
        )
        read_only_fields = ("id", "graduate_count", "created_at")

    def get_graduate_count(self, obj):
        annotated = getattr(obj, "graduate_count", None)
        if annotated is not None:
            return annotated
        return obj.graduates.count()


class CourseWriteSerializer(serializers.ModelSerializer):
    skills_gained = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    career_paths = serializers.ListField(child=serializers.CharField(max_length=255), required=False)

    class Meta:
        model = Course
        fields = (
            "name",
            "code",
            "department",
            "level",
            "description",
            "duration_months",
            "skills_gained",
            "career_paths",
            "is_active",
        )


class GraduateSerializer(serializers.ModelSerializer):
    course_name = serializers.CharField(source="course.name", read_only=True, default=None)
    profile_completion = serializers.FloatField(read_only=True)
    is_employed = serializers.BooleanField(read_only=True)

    class Meta:
        model = Graduate
        fields = (
            "id",
            "user",
            "name",
            "email",
            "phone",
            "student_id",
            "address",
            "course",
            "course_name",
            "previous_institution",
            "graduation_year",
            "gpa",
            "academic_standing",
            "employment_status",
            "is_employed",
            "current_job_title",
            "current_company",
            "current_salary",
            "employment_start_date",
            "skills",
            "certifications",
            "demographics",
            "profile_visibility",
            "allow_employer_contact",
            "job_search_active",
            "profile_completion",
            "last_profile_update",
            "created_at",
        )
        read_only_fields = fields


class GraduateWriteSerializer(serializers.ModelSerializer):
    """
    Validates graduate input for create/update.

    The course must belong to the current institution; the tenant-scoped
    manager already narrows the queryset, so a foreign course id is
    reported as "does not exist".
    """
    course = serializers.PrimaryKeyRelatedField(
        queryset=Course.objects.all(),
        required=False,
        allow_null=True,
    )
    skills = serializers.ListField(child=serializers.CharField(max_length=100), required=False)
    certifications = serializers.ListField(child=serializers.CharField(max_length=255), required=False)
    demographics = serializers.DictField(child=serializers.CharField(max_length=100), required=False)

    class Meta:
        model = Graduate
        fields = (
            "name",
            "email",
            "phone",
            "student_id",
            "address",
            "course",
            "previous_institution",
            "graduation_year",
            "gpa",
            "academic_standing",
            "employment_status",
            "current_job_title",
            "current_company",
            "current_salary",
            "employment_start_date",
            "skills",
            "certifications",
            "demographics",
            "profile_visibility",
            "allow_employer_contact",
            "job_search_active",
        )

    def get_fields(self):
        fields = super().get_fields()
        if "course" in fields:
            # Evaluated per request so the tenant filter is applied
            fields["course"].queryset = Course.objects.all()
        return fields

    def validate_graduation_year(self, value):
        if value < 1900 or value > max_graduation_year():
            raise serializers.ValidationError(
                f"Graduation year must be between 1900 and {max_graduation_year()}."
            )
        return value

    def validate_current_salary(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Salary cannot be negative.")
        return value

    def validate(self, attrs):
        status = attrs.get("employment_status", getattr(self.instance, "employment_status", None))
        if status in (Graduate.EmploymentStatus.UNEMPLOYED, Graduate.EmploymentStatus.FURTHER_STUDIES):
            if attrs.get("current_company") or attrs.get("current_job_title"):
                raise serializers.ValidationError(
                    {"employment_status": "Current job details require an employed status."}
                )
        return attrs


class GraduateProfileSerializer(GraduateWriteSerializer):
    """Fields a graduate may edit on their own profile."""

    class Meta(GraduateWriteSerializer.Meta):
        fields = (
            "name",
            "phone",
            "address",
            "employment_status",
            "current_job_title",
            "current_company",
            "current_salary",
            "employment_start_date",
            "skills",
            "certifications",
            "demographics",
            "profile_visibility",
            "allow_employer_contact",
            "job_search_active",
        )


class JobApplicationSerializer(serializers.ModelSerializer):
    graduate_name = serializers.CharField(source="graduate.name", read_only=True)
    graduate_email = serializers.EmailField(source="graduate.email", read_only=True)
    job_title = serializers.SerializerMethodField()
    company_name = serializers.SerializerMethodField()

    class Meta:
        model = JobApplication
        fields = (
            "id",
            "job",
            "job_title",
            "company_name",
            "graduate",
            "graduate_name",
            "graduate_email",
            "cover_letter",
            "status",
            "application_source",
            "match_score",
            "match_factors",
            "employer_notes",
            "status_changed_at",
            "hired_at",
            "is_flagged",
            "created_at",
        )
        read_only_fields = fields

    def _job(self, obj):
        # Jobs are looked up in the system database by id; views pass a map
        jobs = self.context.get("jobs") or {}
        return jobs.get(obj.job_id)

    def get_job_title(self, obj):
        job = self._job(obj)
        return job.title if job else None

    def get_company_name(self, obj):
        job = self._job(obj)
        return job.employer.company_name if job else None


class ApplySerializer(serializers.Serializer):
    cover_letter = serializers.CharField(max_length=2000)


class ApplicationStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=JobApplication.Status.choices)
    notes = serializers.CharField(max_length=1000, required=False, allow_blank=True, default="")
