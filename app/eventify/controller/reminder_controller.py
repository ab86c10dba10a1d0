"""Reminder emails for events that are about to start.

Runs on the scheduler's background thread, so everything here is blocking and
opens its own session when none is handed in. The look-ahead window equals the
job interval: consecutive runs cover back-to-back windows, so each event is
reminded once.
"""

import logging
from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from eventify.database import SessionLocal
from eventify.models.event_model import Event
from eventify.models.attendee_model import Attendee
from eventify.controller import mailer
from eventify.controller.qr_code_sender import safe_format
from eventify.constant_file import REMINDER_INTERVAL_MINUTES, app_url, email_from_name

logger = logging.getLogger(__name__)


def lead_time(minutes: int) -> str:
    if minutes % 60:
        return f"{minutes} minutes"
    hours = minutes // 60
    return "1 hour" if hours == 1 else f"{hours} hours"


def render_reminder_email(attendee_name: str, event: Event, window_minutes: int = REMINDER_INTERVAL_MINUTES):
    start_time = safe_format(event.start_at, '%I:%M %p')
    location = event.location or 'TBD'
    subject = f"Reminder: {event.title} starts within {lead_time(window_minutes)}"

    html_body = f"""
    <html>
    <body style="font-family: Arial, sans-serif; color: #333;">
        <h2>Hi {attendee_name},</h2>
        <p>This is a reminder that <strong>{event.title}</strong> starts at {start_time}.</p>
        <p><strong>Location:</strong> {location}</p>
        <p>Bring the check-in code from your confirmation email.</p>
        <p><a href="{app_url}">{email_from_name}</a></p>
    </body>
    </html>
    """
    text_body = (
        f"Hi {attendee_name},\n\n"
        f"{event.title} starts at {start_time}.\n"
        f"Location: {location}\n\n"
        f"The {email_from_name} Team\n"
    )
    return subject, html_body, text_body


def find_events_starting_soon(db: Session, now: datetime = None, window_minutes: int = REMINDER_INTERVAL_MINUTES):
    now = now or datetime.utcnow()
    window_end = now + timedelta(minutes=window_minutes)
    return (
        db.query(Event)
        .filter(Event.start_at > now, Event.start_at <= window_end, Event.status != "cancelled")
        .order_by(Event.start_at.asc())
        .all()
    )


def send_event_reminders(db: Session = None, now: datetime = None, window_minutes: int = REMINDER_INTERVAL_MINUTES):
    """Emails every attendee of each event starting within the window.

    A failed recipient is logged and skipped; there is no retry and no record
    of what was already sent.
    """
    owns_session = db is None
    db = db or SessionLocal()
    summary = {"events": 0, "sent": 0, "failed": 0}
    try:
        events = find_events_starting_soon(db, now, window_minutes)
        summary["events"] = len(events)
        for event in events:
            attendees = db.query(Attendee).filter(Attendee.event_id == event.id).all()
            for attendee in attendees:
                subject, html_body, text_body = render_reminder_email(attendee.name, event, window_minutes)
                try:
                    mailer.send_email_sync(attendee.email, subject, html_body, text_body)
                    summary["sent"] += 1
                except Exception as e:
                    summary["failed"] += 1
                    logger.error("Reminder for event %s to %s failed: %s", event.id, attendee.email, e)
        logger.info("Reminder run: %(events)d event(s), %(sent)d sent, %(failed)d failed", summary)
        return summary
    finally:
        if owns_session:
            db.close()
