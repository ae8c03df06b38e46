from apscheduler.schedulers.background import BackgroundScheduler
from django.conf import settings
from django.core.management import call_command
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

# ============================================================
# GLOBAL SAFETY LOCK
# Prevents scheduler from starting more than once
# ============================================================
_scheduler = None


def start_scheduler():
    """
    Start APScheduler for notification retries.

    - Respects ENABLE_SCHEDULER setting
    - Prevents double start (Django autoreload, imports)
    - Only retries deliveries; invitation expiry is evaluated on read
    """
    global _scheduler

    if not getattr(settings, "ENABLE_SCHEDULER", False):
        logger.info("APScheduler disabled via settings (ENABLE_SCHEDULER=False)")
        return None

    if _scheduler is not None:
        logger.info("APScheduler already running, skipping initialization")
        return _scheduler

    interval = getattr(settings, "NOTIFICATION_RETRY_INTERVAL_MINUTES", 30)

    logger.info("Starting APScheduler...")

    _scheduler = BackgroundScheduler(
        timezone=settings.TIME_ZONE
    )

    _scheduler.add_job(
        run_notification_retries,
        trigger="interval",
        minutes=interval,
        id="retry_invitation_notifications",
        replace_existing=True,
        max_instances=1,      # Prevent overlapping runs
        coalesce=True,        # Merge missed runs if server was down
    )

    _scheduler.start()

    logger.info(
        "APScheduler started: invitation notification retries every %s minutes",
        interval,
    )
    return _scheduler


def run_notification_retries():
    """
    Wrapper job that calls the Django management command.
    Keeps all business logic out of the scheduler.
    """
    now = timezone.now()
    logger.info(f"Running scheduled notification retries at {now:%Y-%m-%d %H:%M:%S}")

    call_command("retry_invitation_notifications")
