# notifications/email_service.py
"""
Email delivery for notifications.

Handles:
- New application emails to employers

All emails are sent from DEFAULT_FROM_EMAIL.
"""

import logging
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags
from django.conf import settings

logger = logging.getLogger(__name__)


def send_application_received_email(employer, job, application, graduate) -> bool:
    """
    Tell an employer that a graduate applied to one of their jobs.

    Args:
        employer: Employer model instance (system database)
        job: Job the application is for
        application: JobApplication (tenant database)
        graduate: The applicant

    Returns:
        True if email was sent successfully, False otherwise
    """
    recipient = employer.contact_email or employer.user.email
    applications_url = f"{settings.FRONTEND_URL}/employer/jobs/{job.id}/applications"

    context = {
        "company_name": employer.company_name,
        "contact_name": employer.contact_person_name or employer.company_name,
        "job_title": job.title,
        "graduate_name": graduate.name,
        "match_score": application.match_score,
        "applications_url": applications_url,
    }

    try:
        html_message = render_to_string("notifications/application_received.html", context)
        plain_message = strip_tags(html_message)

        send_mail(
            subject=f"New application for {job.title}",
            message=plain_message,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[recipient],
            html_message=html_message,
            fail_silently=False,
        )
        logger.info(f"Application email sent to {recipient} for job {job.id}")
        return True
    except Exception as e:
        logger.error(f"Failed to send application email to {recipient}: {e}")
        return False
