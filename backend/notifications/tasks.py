"""
Celery tasks for notification delivery.

Tasks:
- notify_employer_of_application: in-app + email + websocket ping when a
  graduate applies to a job
- notify_graduate_of_status_change: in-app + websocket ping when an
  employer moves an application through the pipeline

Both are enqueued with transaction.on_commit by graduates.commands and
never affect the request that triggered them.
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def notify_employer_of_application(self, application_id: int, tenant_id: int) -> dict:
    """
    Notify the job's employer about a new application.

    Args:
        application_id: JobApplication id in the tenant database
        tenant_id: Tenant the application belongs to

    Returns:
        Dict with the notification id and email outcome
    """
    from employers.models import Job
    from graduates.models import JobApplication
    from notifications.email_service import send_application_received_email
    from notifications.models import Notification
    from notifications.service import notify
    from tenant.models import Tenant

    try:
        tenant = Tenant.objects.get(id=tenant_id)
    except Tenant.DoesNotExist:
        logger.error(f"Tenant {tenant_id} not found")
        return {"error": f"Tenant {tenant_id} not found"}

    with tenant.run():
        try:
            application = JobApplication.objects.select_related("graduate").get(id=application_id)
        except JobApplication.DoesNotExist:
            logger.error(f"Application {application_id} not found in tenant {tenant.slug}")
            return {"error": f"Application {application_id} not found"}
        graduate = application.graduate

    job = Job.objects.select_related("employer__user").get(id=application.job_id)
    employer = job.employer

    already_sent = Notification.objects.filter(
        user_id=employer.user_id,
        notification_type=Notification.Type.APPLICATION_RECEIVED,
        data__application_id=application.id,
        data__tenant_id=tenant.id,
    ).first()
    if already_sent:
        logger.info(f"Application {application_id} already notified ({already_sent.id})")
        return {"notification_id": already_sent.id, "email_sent": False}

    notification = notify(
        user_id=employer.user_id,
        notification_type=Notification.Type.APPLICATION_RECEIVED,
        title=f"New application for {job.title}",
        message=f"{graduate.name} from {tenant.name} applied for {job.title}.",
        data={
            "application_id": application.id,
            "tenant_id": tenant.id,
            "tenant_slug": tenant.slug,
            "job_id": job.id,
            "match_score": float(application.match_score) if application.match_score is not None else None,
        },
    )
    email_sent = send_application_received_email(employer, job, application, graduate)

    logger.info(
        f"Employer {employer.id} notified of application {application_id} "
        f"(notification {notification.id}, email={'sent' if email_sent else 'failed'})"
    )
    return {"notification_id": notification.id, "email_sent": email_sent}


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=60,
    autoretry_for=(Exception,),
    retry_backoff=True,
)
def notify_graduate_of_status_change(self, application_id: int, tenant_id: int) -> dict:
    """Tell the applicant their application moved to a new status."""
    from employers.models import Job
    from graduates.models import JobApplication
    from notifications.models import Notification
    from notifications.service import notify
    from tenant.models import Tenant

    tenant = Tenant.objects.filter(id=tenant_id).first()
    if tenant is None:
        logger.error(f"Tenant {tenant_id} not found")
        return {"error": f"Tenant {tenant_id} not found"}

    with tenant.run():
        application = JobApplication.objects.select_related("graduate").filter(id=application_id).first()
    if application is None:
        logger.error(f"Application {application_id} not found in tenant {tenant.slug}")
        return {"error": f"Application {application_id} not found"}

    user_id = application.graduate.user_id
    if user_id is None:
        return {"skipped": "graduate has no user account"}

    job = Job.objects.select_related("employer").get(id=application.job_id)
    notification = notify(
        user_id=user_id,
        notification_type=Notification.Type.APPLICATION_STATUS,
        title=f"Application update: {job.title}",
        message=f"{job.employer.company_name} marked your application as {application.get_status_display()}.",
        data={
            "application_id": application.id,
            "job_id": job.id,
            "status": application.status,
        },
    )
    return {"notification_id": notification.id}
