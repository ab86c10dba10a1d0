"""Background scheduler for periodic jobs (currently the event reminder mailer)."""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from eventify.controller.reminder_controller import send_event_reminders
from eventify.constant_file import REMINDER_INTERVAL_MINUTES

logger = logging.getLogger(__name__)

scheduler = None


def _on_job_error(event):
    exc = event.exception
    logger.error(
        "Scheduled job failed: job_id=%s error=%s",
        event.job_id, exc,
        exc_info=(type(exc), exc, None) if exc else None,
    )
    if event.traceback:
        logger.error("Traceback for job %s:\n%s", event.job_id, event.traceback)


def _on_job_missed(event):
    logger.warning(
        "Scheduled job missed: job_id=%s scheduled_run_time=%s",
        event.job_id,
        event.scheduled_run_time,
    )


def init_scheduler(interval_minutes: int = REMINDER_INTERVAL_MINUTES):
    global scheduler

    if scheduler is not None:
        logger.warning("Scheduler already initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone="UTC",
        job_defaults={
            'coalesce': True,
            'max_instances': 1,
            'misfire_grace_time': 60
        }
    )

    scheduler.add_job(
        func=send_event_reminders,
        trigger=IntervalTrigger(minutes=interval_minutes),
        kwargs={'window_minutes': interval_minutes},
        id='send_event_reminders',
        name='Send Event Reminders',
        replace_existing=True
    )
    logger.info("Scheduled job: send_event_reminders (every %d minutes)", interval_minutes)

    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    scheduler.start()
    logger.info("Background scheduler started")
    return scheduler


def shutdown_scheduler():
    global scheduler

    if scheduler is not None:
        scheduler.shutdown(wait=True)
        logger.info("Background scheduler shut down")
        scheduler = None
