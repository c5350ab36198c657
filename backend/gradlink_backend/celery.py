"""
Celery application configuration.

This is the main Celery app for the Gradlink backend.
It handles notification delivery, scheduled analytics snapshots and job
expiry.

Usage:
    # Start worker
    celery -A gradlink_backend worker -l INFO

    # Start beat scheduler (for periodic tasks)
    celery -A gradlink_backend beat -l INFO

    # Start both (development only)
    celery -A gradlink_backend worker -B -l INFO
"""
import os

from celery import Celery

# Set default Django settings
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "gradlink_backend.settings")

# Create Celery app
app = Celery("gradlink_backend")

# Load config from Django settings
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all installed apps
app.autodiscover_tasks()
