import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from eventify.models.event_model import Event, CLOSED_STATUSES, EVENT_STATUSES, EVENT_VISIBILITIES
from eventify.models.room_model import Room
from eventify.controller.ws_manager import event_manager
from eventify.constant_file import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from eventify.exceptions import NotFoundError, ValidationFailedError, SchedulingConflictError

logger = logging.getLogger(__name__)

# Fields an admin may set directly; attendee_count is owned by the registration flow
EDITABLE_FIELDS = (
    "title", "description", "start_at", "end_at", "location", "room_id", "category",
    "visibility", "image_url", "capacity", "status", "registration_deadline",
)

DATE_FILTERS = ("today", "tomorrow", "this-week", "this-month")


def to_naive_utc(value):
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def date_window(date_filter: str, now: datetime = None):
    """Returns the [start, end) range of a named date filter."""
    now = now or datetime.utcnow()
    today = datetime(now.year, now.month, now.day)
    if date_filter == "today":
        return today, today + timedelta(days=1)
    if date_filter == "tomorrow":
        return today + timedelta(days=1), today + timedelta(days=2)
    if date_filter == "this-week":
        # Weeks start on Sunday
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        return week_start, week_start + timedelta(days=7)
    if date_filter == "this-month":
        month_start = datetime(now.year, now.month, 1)
        if now.month == 12:
            return month_start, datetime(now.year + 1, 1, 1)
        return month_start, datetime(now.year, now.month + 1, 1)
    raise ValidationFailedError(f"Unknown date filter: {date_filter}")


def registration_open(event: Event, now: datetime = None) -> bool:
    now = now or datetime.utcnow()
    if event.status in CLOSED_STATUSES:
        return False
    if event.registration_deadline and now >= event.registration_deadline:
        return False
    return True


def is_full(event: Event) -> bool:
    return event.capacity is not None and (event.attendee_count or 0) >= event.capacity


def event_message(kind: str, event: Event):
    return {
        "event": kind,
        "data": {
            "id": event.id,
            "title": event.title,
            "start_at": event.start_at,
            "end_at": event.end_at,
            "location": event.location,
            "category": event.category,
            "visibility": event.visibility,
            "capacity": event.capacity,
            "attendee_count": event.attendee_count,
            "status": event.status,
        },
    }


# ------------------ Scheduling conflicts ------------------
def find_scheduling_conflicts(db: Session, room_id: int, start_at: datetime, end_at: datetime, exclude_event_id: int = None):
    query = db.query(Event).filter(
        Event.room_id == room_id,
        Event.start_at < end_at,
        Event.end_at > start_at,
        Event.status != "cancelled",
    )
    if exclude_event_id is not None:
        query = query.filter(Event.id != exclude_event_id)
    return query.order_by(Event.start_at).all()


def _validate_fields(data: dict):
    if "title" in data and not (data["title"] or "").strip():
        raise ValidationFailedError("Event title is required")
    if "status" in data and data["status"] not in EVENT_STATUSES:
        raise ValidationFailedError(f"Unknown event status: {data['status']}")
    if "visibility" in data and data["visibility"] not in EVENT_VISIBILITIES:
        raise ValidationFailedError(f"Unknown visibility: {data['visibility']}")
    if data.get("capacity") is not None and data["capacity"] < 1:
        raise ValidationFailedError("Capacity must be at least 1")


def _validate_schedule(db: Session, data: dict, exclude_event_id: int = None):
    start_at, end_at = data.get("start_at"), data.get("end_at")
    if start_at is None or end_at is None:
        raise ValidationFailedError("Event start and end time are required")
    if end_at <= start_at:
        raise ValidationFailedError("Event end time must be after its start time")

    room_id = data.get("room_id")
    if room_id is None:
        return
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFoundError(f"Room {room_id} not found")
    conflicts = find_scheduling_conflicts(db, room_id, start_at, end_at, exclude_event_id)
    if conflicts:
        titles = ", ".join(conflict.title for conflict in conflicts)
        raise SchedulingConflictError(f"{room.name} is already booked for: {titles}")


# ------------------ Add New Event ------------------
async def add_event_controller(db: Session, event_data: dict, created_by: int):
    data = {key: to_naive_utc(val) for key, val in event_data.items() if key in EDITABLE_FIELDS and val is not None}
    if not (data.get("title") or "").strip():
        raise ValidationFailedError("Event title is required")
    _validate_fields(data)
    _validate_schedule(db, data)

    new_event = Event(**data)
    new_event.created_by = created_by
    new_event.attendee_count = 0
    db.add(new_event)
    db.commit()
    db.refresh(new_event)
    logger.info("Event %s created by user %s", new_event.id, created_by)

    await event_manager.broadcast(event_message("new_event", new_event))
    return new_event


# ------------------ Retrieve Event ------------------
async def retrieve_event_controller(db: Session, event_id: int):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


# ------------------ Browse public events ------------------
async def list_events_controller(db: Session, category: str = None, location: str = None,
                                 start_date: datetime = None, end_date: datetime = None,
                                 search: str = None, date_filter: str = None,
                                 cursor: int = None, limit: int = DEFAULT_PAGE_SIZE):
    limit = max(1, min(limit or DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE))
    query = db.query(Event).filter(Event.visibility == "public")

    if category:
        query = query.filter(Event.category == category)
    if location:
        query = query.filter(Event.location == location)
    if start_date:
        query = query.filter(Event.start_at >= to_naive_utc(start_date))
    if end_date:
        query = query.filter(Event.start_at <= to_naive_utc(end_date))
    if date_filter:
        window_start, window_end = date_window(date_filter)
        query = query.filter(Event.start_at >= window_start, Event.start_at < window_end)
    if search:
        search_pattern = f"%{search.strip()}%"
        query = query.filter(
            or_(
                Event.title.ilike(search_pattern),
                Event.description.ilike(search_pattern),
                Event.category.ilike(search_pattern),
            )
        )

    if cursor is not None:
        last = db.query(Event).filter(Event.id == cursor).first()
        if not last:
            raise ValidationFailedError("Invalid pagination cursor")
        query = query.filter(
            or_(
                Event.start_at > last.start_at,
                and_(Event.start_at == last.start_at, Event.id > last.id),
            )
        )

    # One extra row tells us whether another page exists
    rows = query.order_by(Event.start_at.asc(), Event.id.asc()).limit(limit + 1).all()
    events = rows[:limit]
    next_cursor = events[-1].id if len(rows) > limit else None
    return {"events": events, "next_cursor": next_cursor}


async def retrieve_upcoming_events_controller(db: Session, limit: int = DEFAULT_PAGE_SIZE):
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    return (
        db.query(Event)
        .filter(Event.visibility == "public", Event.start_at > datetime.utcnow())
        .order_by(Event.start_at.asc())
        .limit(limit)
        .all()
    )


async def retrieve_admin_events_controller(db: Session, admin_id: int):
    return (
        db.query(Event)
        .filter(Event.created_by == admin_id)
        .order_by(Event.start_at.desc())
        .all()
    )


# ------------------ Update Event ------------------
async def update_event_controller(db: Session, event_id: int, update_data: dict):
    event = await retrieve_event_controller(db, event_id)
    changes = {key: to_naive_utc(val) for key, val in update_data.items() if key in EDITABLE_FIELDS}
    _validate_fields(changes)

    merged = {field: getattr(event, field) for field in EDITABLE_FIELDS}
    merged.update(changes)
    if {"start_at", "end_at", "room_id"} & changes.keys():
        _validate_schedule(db, merged, exclude_event_id=event.id)

    for key, val in changes.items():
        setattr(event, key, val)

    db.commit()
    db.refresh(event)

    await event_manager.broadcast(event_message("event_updated", event))
    return event


async def update_event_status_controller(db: Session, event_id: int, new_status: str):
    return await update_event_controller(db, event_id, {"status": new_status})


# ------------------ Duplicate Event ------------------
async def duplicate_event_controller(db: Session, event_id: int, created_by: int):
    event = await retrieve_event_controller(db, event_id)
    duration = event.end_at - event.start_at
    start_at = datetime.utcnow().replace(microsecond=0) + timedelta(days=7)

    copy_data = {field: getattr(event, field) for field in EDITABLE_FIELDS}
    copy_data.update({
        "title": f"{event.title} (Copy)",
        "start_at": start_at,
        "end_at": start_at + duration,
        "status": "draft",
        "registration_deadline": None,
    })
    return await add_event_controller(db, copy_data, created_by)


# ------------------ Delete Event ------------------
async def delete_event_controller(db: Session, event_id: int):
    event = await retrieve_event_controller(db, event_id)
    deleted = {"id": event.id, "title": event.title}

    db.delete(event)
    db.commit()
    logger.info("Event %s deleted", event_id)

    await event_manager.broadcast({"event": "event_deleted", "data": deleted})
    return deleted


# ------------------ Bulk operations ------------------
async def bulk_delete_events_controller(db: Session, event_ids: list):
    deleted, failed = [], []
    for event_id in event_ids:
        try:
            await delete_event_controller(db, event_id)
            deleted.append(event_id)
        except NotFoundError:
            failed.append(event_id)
    return {"success_count": len(deleted), "failed_count": len(failed), "deleted": deleted, "failed": failed}


async def bulk_update_status_controller(db: Session, event_ids: list, new_status: str):
    updated, failed = [], []
    for event_id in event_ids:
        try:
            await update_event_status_controller(db, event_id, new_status)
            updated.append(event_id)
        except NotFoundError:
            failed.append(event_id)
    return {"success_count": len(updated), "failed_count": len(failed), "updated": updated, "failed": failed}


# ------------------ Seat availability ------------------
async def retrieve_event_seat_availability(db: Session, event_id: int):
    event = await retrieve_event_controller(db, event_id)
    attendee_count = event.attendee_count or 0
    seats = {
        "capacity": event.capacity,
        "attendee_count": attendee_count,
        "seats_left": None,
        "percent_full": None,
        "is_full": is_full(event),
        "registration_open": registration_open(event),
    }
    if event.capacity:
        seats["seats_left"] = max(event.capacity - attendee_count, 0)
        seats["percent_full"] = round(attendee_count / event.capacity * 100)
    return seats
