"""
Celery tasks for career analytics.

Tasks:
- generate_periodic_snapshots: previous period's snapshot in every active tenant
"""
import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True)
def generate_periodic_snapshots(self, period_type: str = "monthly") -> dict:
    """Periodic task scheduled through celery beat."""
    from analytics.services import generate_snapshots_for_all_tenants

    result = generate_snapshots_for_all_tenants(period_type)
    failed = [slug for slug, r in result["tenants"].items() if r["status"] == "error"]
    if failed:
        logger.warning(f"Snapshot generation failed for tenants: {', '.join(failed)}")
    logger.info(
        f"{period_type.title()} snapshots for {result['period_start']} - {result['period_end']}: "
        f"{len(result['tenants'])} tenants processed"
    )
    return result
