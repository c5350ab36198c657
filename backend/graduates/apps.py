from django.apps import AppConfig


class GraduatesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "graduates"
    verbose_name = "Graduates"
