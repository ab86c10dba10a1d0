import logging
from datetime import datetime
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from eventify.models.user_model import User
from eventify.models.event_model import Event
from eventify.models.attendee_model import Attendee
from eventify.models.registration_model import Registration
from eventify.controller.qr_code_sender import send_registration_confirmation
from eventify.controller.qrcode_event_controller import generate_ticket_code
from eventify.controller.event_controller import registration_open, is_full
from eventify.controller.ws_manager import event_manager
from eventify.exceptions import (NotFoundError,
                                 AlreadyRegisteredError,
                                 NotRegisteredError,
                                 CapacityExceededError,
                                 RegistrationClosedError)

logger = logging.getLogger(__name__)


def _count_message(event: Event):
    return {
        "event": "attendee_count",
        "data": {"id": event.id, "attendee_count": event.attendee_count, "capacity": event.capacity},
    }


def _lock_event(db: Session, event_id: int) -> Event:
    # Row lock serializes concurrent registrations for the same event
    event = db.query(Event).filter(Event.id == event_id).with_for_update().first()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return event


# ------------------ Register ------------------
async def register_for_event(db: Session, user: User, event_id: int):
    event = _lock_event(db, event_id)

    if not registration_open(event):
        db.rollback()
        raise RegistrationClosedError(f"Registration for {event.title} is closed")

    existing = db.query(Registration).filter(
        Registration.user_id == user.id,
        Registration.event_id == event.id,
    ).first() or db.query(Attendee).filter(
        Attendee.user_id == user.id,
        Attendee.event_id == event.id,
    ).first()
    if existing:
        db.rollback()
        raise AlreadyRegisteredError("You are already registered for this event")

    if is_full(event):
        db.rollback()
        raise CapacityExceededError(f"{event.title} is at full capacity")

    ticket_code = generate_ticket_code()
    registration = Registration(user_id=user.id, event_id=event.id)
    attendee = Attendee(
        event_id=event.id,
        user_id=user.id,
        name=user.display_name,
        email=user.email,
        ticket_code=ticket_code,
    )
    db.add(registration)
    db.add(attendee)
    event.attendee_count = (event.attendee_count or 0) + 1

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise AlreadyRegisteredError("You are already registered for this event")

    db.refresh(registration)
    db.refresh(event)
    logger.info("User %s registered for event %s (%s/%s)",
                user.id, event.id, event.attendee_count, event.capacity or "unlimited")

    await _send_confirmation(db, registration, user, event, ticket_code)
    await event_manager.broadcast(_count_message(event))

    return {
        "registration": registration,
        "ticket_code": ticket_code,
        "attendee_count": event.attendee_count,
        "email_sent": registration.email_sent,
    }


async def _send_confirmation(db: Session, registration: Registration, user: User, event: Event, ticket_code: str):
    """Mail failures are recorded on the registration, never raised."""
    try:
        message_id = await send_registration_confirmation(user.email, user.display_name, event, ticket_code)
        registration.email_sent = True
        registration.email_sent_at = datetime.utcnow()
        registration.email_message_id = message_id
        registration.email_error = None
    except Exception as e:
        logger.error("Confirmation email for registration %s failed: %s", registration.id, e)
        registration.email_sent = False
        registration.email_error = str(e)[:500]
    db.commit()
    db.refresh(registration)


# ------------------ Unregister ------------------
async def unregister_from_event(db: Session, user: User, event_id: int):
    event = _lock_event(db, event_id)

    registration = db.query(Registration).filter(
        Registration.user_id == user.id,
        Registration.event_id == event.id,
    ).first()
    if not registration:
        db.rollback()
        raise NotRegisteredError("You are not registered for this event")

    db.query(Attendee).filter(
        Attendee.user_id == user.id,
        Attendee.event_id == event.id,
    ).delete(synchronize_session=False)
    db.delete(registration)
    event.attendee_count = max((event.attendee_count or 0) - 1, 0)
    db.commit()
    db.refresh(event)
    logger.info("User %s unregistered from event %s", user.id, event.id)

    await event_manager.broadcast(_count_message(event))
    return {"event_id": event.id, "attendee_count": event.attendee_count}


# ------------------ Queries ------------------
async def get_user_registrations(db: Session, user_id: int):
    rows = (
        db.query(Registration, Event)
        .join(Event, Event.id == Registration.event_id)
        .filter(Registration.user_id == user_id)
        .order_by(Event.start_at.asc())
        .all()
    )
    return [
        {
            "id": registration.id,
            "event_id": event.id,
            "registered_at": registration.registered_at,
            "attended": registration.attended,
            "status": registration.status,
            "email_sent": registration.email_sent,
            "event": event,
        }
        for registration, event in rows
    ]


async def is_user_registered(db: Session, user_id: int, event_id: int) -> bool:
    return db.query(Registration).filter(
        Registration.user_id == user_id,
        Registration.event_id == event_id,
    ).first() is not None


async def get_event_attendees(db: Session, event_id: int):
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")
    return (
        db.query(Attendee)
        .filter(Attendee.event_id == event_id)
        .order_by(Attendee.registered_at.asc())
        .all()
    )


async def set_attendance(db: Session, event_id: int, user_id: int, attended: bool):
    attendee = db.query(Attendee).filter(
        Attendee.event_id == event_id,
        Attendee.user_id == user_id,
    ).first()
    if not attendee:
        raise NotRegisteredError("User is not registered for this event")

    status = "attended" if attended else "registered"
    attendee.attended = attended
    attendee.status = status
    attendee.checked_in_at = datetime.utcnow() if attended else None

    registration = db.query(Registration).filter(
        Registration.event_id == event_id,
        Registration.user_id == user_id,
    ).first()
    if registration:
        registration.attended = attended
        registration.status = status

    db.commit()
    db.refresh(attendee)
    return attendee
