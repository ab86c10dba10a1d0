from datetime import datetime, timedelta

from eventify import scheduler
from eventify.controller import mailer
from eventify.controller.reminder_controller import (send_event_reminders,
                                                     find_events_starting_soon,
                                                     render_reminder_email,
                                                     lead_time)
from eventify.models.attendee_model import Attendee

NOW = datetime(2030, 3, 1, 12, 0)


def _attend(db, event, user_id, email):
    db.add(Attendee(event_id=event.id, user_id=user_id, name=f"Guest {user_id}", email=email,
                    ticket_code=f"code-{event.id}-{user_id}"))
    db.commit()


def test_window_is_next_hour_exclusive_of_now(db, make_event):
    started = make_event(title="Starting Now", start_at=NOW)
    edge = make_event(title="Edge", start_at=NOW + timedelta(minutes=60))
    soon = make_event(title="Soon", start_at=NOW + timedelta(minutes=30))
    make_event(title="Later", start_at=NOW + timedelta(minutes=61))
    make_event(title="Cancelled", start_at=NOW + timedelta(minutes=10), status="cancelled")

    events = find_events_starting_soon(db, NOW)

    assert [event.title for event in events] == ["Soon", "Edge"]
    assert started not in events
    assert edge in events and soon in events


def test_reminders_go_to_every_attendee(db, make_event, monkeypatch):
    sent = []
    monkeypatch.setattr(mailer, "send_email_sync", lambda to, subject, html, text=None: sent.append((to, subject)))
    soon = make_event(title="Career Fair", start_at=NOW + timedelta(minutes=45))
    later = make_event(title="Later", start_at=NOW + timedelta(hours=3))
    _attend(db, soon, 1, "a@uni.edu")
    _attend(db, soon, 2, "b@uni.edu")
    _attend(db, later, 3, "c@uni.edu")

    summary = send_event_reminders(db, NOW)

    assert summary == {"events": 1, "sent": 2, "failed": 0}
    assert sorted(to for to, _ in sent) == ["a@uni.edu", "b@uni.edu"]
    assert all(subject == "Reminder: Career Fair starts within 1 hour" for _, subject in sent)


def test_reminder_failures_are_counted_not_raised(db, make_event, monkeypatch):
    def flaky(to, subject, html, text=None):
        if to == "bad@uni.edu":
            raise OSError("mailbox unavailable")

    monkeypatch.setattr(mailer, "send_email_sync", flaky)
    event = make_event(start_at=NOW + timedelta(minutes=5))
    _attend(db, event, 1, "bad@uni.edu")
    _attend(db, event, 2, "good@uni.edu")

    assert send_event_reminders(db, NOW) == {"events": 1, "sent": 1, "failed": 1}


def test_reminder_email_content(make_event):
    event = make_event(title="Chess Club", start_at=datetime(2030, 3, 1, 13, 0))

    subject, html_body, text_body = render_reminder_email("Ada", event)

    assert subject == "Reminder: Chess Club starts within 1 hour"
    assert "01:00 PM" in html_body
    assert "Location: TBD" in text_body


def test_scheduler_registers_reminder_job():
    running = scheduler.init_scheduler(interval_minutes=60)
    try:
        job = running.get_job("send_event_reminders")
        assert job is not None
        assert job.func is send_event_reminders
        assert job.kwargs == {"window_minutes": 60}
        assert scheduler.init_scheduler() is running
    finally:
        scheduler.shutdown_scheduler()
    assert scheduler.scheduler is None


def test_window_follows_job_interval(db, make_event):
    make_event(title="Soon", start_at=NOW + timedelta(minutes=20))
    make_event(title="Next Run", start_at=NOW + timedelta(minutes=45))

    first_run = find_events_starting_soon(db, NOW, window_minutes=30)
    second_run = find_events_starting_soon(db, NOW + timedelta(minutes=30), window_minutes=30)

    assert [event.title for event in first_run] == ["Soon"]
    assert [event.title for event in second_run] == ["Next Run"]


def test_scheduler_passes_its_interval_as_window():
    running = scheduler.init_scheduler(interval_minutes=15)
    try:
        assert running.get_job("send_event_reminders").kwargs == {"window_minutes": 15}
    finally:
        scheduler.shutdown_scheduler()


def test_lead_time_wording():
    assert lead_time(60) == "1 hour"
    assert lead_time(120) == "2 hours"
    assert lead_time(15) == "15 minutes"
