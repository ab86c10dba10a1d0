"""Operational helpers behind the root scripts (table setup, data repair)."""

import logging
from sqlalchemy import func
from sqlalchemy.orm import Session
from eventify.database import Base
from eventify.models.user_model import User
from eventify.models.event_model import Event
from eventify.models.attendee_model import Attendee
# Imported so every table is registered on Base.metadata
from eventify.models.registration_model import Registration  # noqa: F401
from eventify.models.room_model import Room  # noqa: F401
from eventify.models.otp_records_model import OTPRecord  # noqa: F401
from eventify.cryptography import encrypt_password
from eventify.validators import is_profile_complete, is_valid_email, PASSWORD_PATTERN
from eventify.exceptions import ValidationFailedError

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "student_id", "session", "phone", "department")


def recount_attendee_counts(db: Session):
    """Resets every event's attendee_count to its number of attendee rows.

    Returns a list of (event_id, old_count, new_count) for the events that changed.
    """
    counts = dict(
        db.query(Attendee.event_id, func.count(Attendee.id))
        .group_by(Attendee.event_id)
        .all()
    )
    changed = []
    for event in db.query(Event).order_by(Event.id).all():
        actual = counts.get(event.id, 0)
        if event.attendee_count != actual:
            changed.append((event.id, event.attendee_count, actual))
            event.attendee_count = actual
    db.commit()
    return changed


def fix_user_profiles(db: Session):
    fixed = 0
    for user in db.query(User).all():
        changed = False
        if not (user.display_name or "").strip():
            user.display_name = user.email.split("@")[0]
            changed = True
        if user.role not in ("student", "admin"):
            user.role = "student"
            changed = True
        complete = is_profile_complete({field: getattr(user, field) for field in PROFILE_FIELDS})
        if user.profile_complete != complete:
            user.profile_complete = complete
            changed = True
        if changed:
            fixed += 1
    db.commit()
    return fixed


def describe_schema():
    return {
        table.name: [(column.name, str(column.type), column.nullable) for column in table.columns]
        for table in Base.metadata.sorted_tables
    }


def create_admin(db: Session, email: str, password: str, display_name: str = "Administrator"):
    """Creates an admin account, or promotes the existing account with that email."""
    email = (email or "").strip().lower()
    if not is_valid_email(email):
        raise ValidationFailedError(f"Invalid email: {email}")

    user = db.query(User).filter(func.lower(User.email) == email).first()
    if user:
        user.role = "admin"
    else:
        if not PASSWORD_PATTERN.match(password or ""):
            raise ValidationFailedError("Password must be at least 8 characters and contain at least 1 letter and 1 number")
        user = User(email=email, password=encrypt_password(password), display_name=display_name, role="admin")
        db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin account ready: %s", email)
    return user
