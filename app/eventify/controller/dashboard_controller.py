from datetime import datetime, timedelta
from sqlalchemy import func
from sqlalchemy.orm import Session
from eventify.models.event_model import Event
from eventify.models.registration_model import Registration
from eventify.models.room_model import Room


def get_event_status(start_at: datetime, now: datetime = None) -> str:
    """Display label for an event's timing relative to now."""
    if start_at is None:
        return "TBD"
    now = now or datetime.utcnow()
    if start_at < now:
        return "Completed"
    if start_at - now <= timedelta(days=7):
        return "This Week"
    return "Upcoming"


# ------------------ Student dashboard ------------------
async def student_dashboard_stats(db: Session, user_id: int, now: datetime = None):
    now = now or datetime.utcnow()
    start_times = [
        start_at for (start_at,) in
        db.query(Event.start_at)
        .join(Registration, Registration.event_id == Event.id)
        .filter(Registration.user_id == user_id)
        .all()
    ]
    labels = [get_event_status(start_at, now) for start_at in start_times]
    return {
        "total": len(labels),
        # "This Week" events are upcoming too
        "upcoming": sum(1 for label in labels if label in ("Upcoming", "This Week")),
        "this_week": labels.count("This Week"),
        "completed": labels.count("Completed"),
    }


# ------------------ Admin dashboard ------------------
async def admin_dashboard_stats(db: Session, admin_id: int, now: datetime = None):
    now = now or datetime.utcnow()
    events = db.query(Event).filter(Event.created_by == admin_id)

    total_events = events.count()
    upcoming_events = events.filter(Event.start_at > now).count()
    total_attendees = (
        db.query(func.coalesce(func.sum(Event.attendee_count), 0))
        .filter(Event.created_by == admin_id)
        .scalar()
    )
    categories = (
        db.query(func.count(func.distinct(Event.category)))
        .filter(Event.created_by == admin_id, Event.category.isnot(None))
        .scalar()
    )
    return {
        "total_events": total_events,
        "upcoming_events": upcoming_events,
        "total_attendees": int(total_attendees or 0),
        "categories": categories or 0,
        "rooms": db.query(Room).count(),
    }
