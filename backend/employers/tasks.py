"""
Celery tasks for job postings.

Tasks:
- expire_jobs: flip active jobs past their application deadline to expired
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def expire_jobs(self) -> dict:
    """Periodic task: expire overdue job postings."""
    from employers.commands import expire_overdue_jobs

    expired = expire_overdue_jobs()
    logger.info(f"Job expiry sweep finished: {expired} expired")
    return {"expired": expired}
