import logging
from datetime import datetime, timedelta
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from eventify.models.user_model import User
from eventify.models.event_model import Event
from eventify.models.attendee_model import Attendee
from eventify.models.registration_model import Registration
from eventify.models.otp_records_model import OTPRecord
from eventify.cryptography import encrypt_password, verify_password, create_access_token
from eventify.controller.otp_handler import generate_otp, send_otp_email
from eventify.constant_file import OTP_EXPIRE_MINUTES
from eventify.validators import (validate_signup,
                                 validate_profile,
                                 is_profile_complete,
                                 is_valid_email,
                                 PASSWORD_PATTERN)
from eventify.exceptions import (AuthenticationError,
                                 DuplicateAccountError,
                                 NotFoundError,
                                 ValidationFailedError)

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "student_id", "session", "department", "phone", "bio", "avatar_url")


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def user_public_dict(user: User):
    """User as returned to clients, without the password hash."""
    return {
        "id": user.id,
        "display_name": user.display_name,
        "email": user.email,
        "role": user.role,
        "student_id": user.student_id,
        "session": user.session,
        "department": user.department,
        "phone": user.phone,
        "bio": user.bio,
        "avatar_url": user.avatar_url,
        "profile_complete": user.profile_complete,
        "created_at": user.created_at,
        "updated_at": user.updated_at,
    }


async def retrieve_user_by_email(db: Session, email: str):
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


async def retrieve_user(db: Session, user_id: int):
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError(f"User {user_id} not found")
    return user


# ------------------ Sign up ------------------
async def sign_up(db: Session, display_name: str, email: str, password: str,
                  student_id: str, session: str, phone: str = None,
                  department: str = None, avatar_url: str = None):
    email = normalize_email(email)
    validate_signup(display_name, email, password, student_id, session, phone)

    if await retrieve_user_by_email(db, email):
        raise DuplicateAccountError(f"An account with email {email} already exists")

    profile = {
        "display_name": display_name.strip(),
        "student_id": student_id.strip(),
        "session": session.strip(),
        "department": department,
        "phone": phone,
        "avatar_url": avatar_url,
    }
    new_user = User(email=email, password=encrypt_password(password), role="student", **profile)
    new_user.profile_complete = is_profile_complete(profile)
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateAccountError(f"An account with email {email} already exists")
    db.refresh(new_user)
    logger.info("New student account %s", new_user.id)
    return new_user


# ------------------ Sign in ------------------
async def sign_in(db: Session, email: str, password: str):
    user = await retrieve_user_by_email(db, email)
    if not user or not verify_password(password, user.password):
        raise AuthenticationError("Invalid email or password")
    token = create_access_token(user.id, user.role)
    return {"access_token": token, "token_type": "bearer", "user": user_public_dict(user)}


# ------------------ Profile ------------------
async def update_profile(db: Session, user: User, update_data: dict):
    changes = {key: val for key, val in update_data.items() if key in PROFILE_FIELDS}
    if not changes:
        raise ValidationFailedError("No profile fields provided")

    merged = {field: getattr(user, field) for field in PROFILE_FIELDS}
    merged.update(changes)
    validate_profile(merged, user.role)

    for key, val in changes.items():
        setattr(user, key, val.strip() if isinstance(val, str) else val)
    user.profile_complete = is_profile_complete(merged)

    db.commit()
    db.refresh(user)
    return user


async def change_password(db: Session, user: User, current_password: str, new_password: str):
    if not verify_password(current_password, user.password):
        raise AuthenticationError("Incorrect current password")
    if not PASSWORD_PATTERN.match(new_password or ""):
        raise ValidationFailedError("Password must be at least 8 characters and contain at least 1 letter and 1 number")
    user.password = encrypt_password(new_password)
    db.commit()


# ------------------ Delete account ------------------
async def delete_account(db: Session, user: User):
    """Removes the user with their registrations, keeping every event's count in step."""
    user_id = user.id
    registrations = db.query(Registration).filter(Registration.user_id == user_id).all()
    event_ids = {registration.event_id for registration in registrations}
    event_ids.update(
        event_id for (event_id,) in
        db.query(Attendee.event_id).filter(Attendee.user_id == user_id).all()
    )

    if event_ids:
        events = db.query(Event).filter(Event.id.in_(event_ids)).with_for_update().all()
        for event in events:
            event.attendee_count = max((event.attendee_count or 0) - 1, 0)

    db.query(Attendee).filter(Attendee.user_id == user_id).delete(synchronize_session=False)
    db.query(OTPRecord).filter(OTPRecord.owner_id == user_id, OTPRecord.owner_type == "user").delete(synchronize_session=False)
    db.delete(user)
    db.commit()
    logger.info("Account %s deleted, released %d registration(s)", user_id, len(event_ids))
    return {"id": user_id, "released_events": sorted(event_ids)}


# ------------------ Password reset ------------------
async def initiate_password_reset_otp(db: Session, email: str, owner_type="user"):
    if not is_valid_email(normalize_email(email)):
        raise ValidationFailedError(f"Invalid email: {email}")
    owner = await retrieve_user_by_email(db, email)
    if not owner:
        # Do not reveal which emails have accounts
        return False

    now = datetime.utcnow()
    otp_record = db.query(OTPRecord).filter(
        OTPRecord.owner_id == owner.id,
        OTPRecord.owner_type == owner_type
    ).first()

    if otp_record and otp_record.expires_at > now:
        otp_to_send = otp_record.otp
    else:
        otp_to_send = generate_otp()
        expires_at = now + timedelta(minutes=OTP_EXPIRE_MINUTES)
        if otp_record:
            otp_record.otp = otp_to_send
            otp_record.expires_at = expires_at
        else:
            db.add(OTPRecord(owner_id=owner.id, owner_type=owner_type, otp=otp_to_send, expires_at=expires_at))
        db.commit()

    return await send_otp_email(owner.email, otp_to_send)


def _check_otp(db: Session, owner: User, otp: str, owner_type: str):
    otp_record = db.query(OTPRecord).filter(
        OTPRecord.owner_id == owner.id,
        OTPRecord.owner_type == owner_type
    ).first()
    if not otp_record:
        raise NotFoundError("No OTP record found")
    if otp_record.expires_at < datetime.utcnow():
        db.delete(otp_record)
        db.commit()
        raise ValidationFailedError("OTP has expired")
    if otp_record.otp != otp:
        raise ValidationFailedError("Incorrect OTP")
    return otp_record


async def verify_reset_otp_controller(db: Session, email: str, otp: str, owner_type="user"):
    owner = await retrieve_user_by_email(db, email)
    if not owner:
        raise NotFoundError("No account with this email")
    _check_otp(db, owner, otp, owner_type)
    return {"email": owner.email}


async def password_reset_controller(db: Session, email: str, otp: str, new_password: str, owner_type="user"):
    owner = await retrieve_user_by_email(db, email)
    if not owner:
        raise NotFoundError("No account with this email")
    if not new_password or not PASSWORD_PATTERN.match(new_password):
        raise ValidationFailedError("Password must be at least 8 characters and contain at least 1 letter and 1 number")

    otp_record = _check_otp(db, owner, otp, owner_type)
    owner.password = encrypt_password(new_password)
    db.delete(otp_record)
    db.commit()
    logger.info("Password reset for user %s", owner.id)
    return {"email": owner.email}
