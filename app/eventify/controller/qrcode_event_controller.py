from sqlalchemy.orm import Session
from eventify.models.attendee_model import Attendee
from eventify.models.event_model import Event
from eventify.models.registration_model import Registration
from eventify.exceptions import NotFoundError
from datetime import datetime
from io import BytesIO
import secrets
import qrcode


def generate_ticket_code():
    return secrets.token_hex(8)


def make_qr_png(ticket_code: str) -> bytes:
    qr_img = qrcode.make(f"eventify:ticket:{ticket_code}")
    buffered = BytesIO()
    qr_img.save(buffered, format="PNG")
    return buffered.getvalue()


def parse_qr_text(qr_text: str) -> str:
    """Accepts either the raw ticket code or the full QR payload."""
    prefix = "eventify:ticket:"
    qr_text = qr_text.strip()
    if qr_text.startswith(prefix):
        return qr_text[len(prefix):]
    return qr_text


async def check_in_controller(db: Session, qr_text: str):
    ticket_code = parse_qr_text(qr_text)
    attendee = db.query(Attendee).filter(Attendee.ticket_code == ticket_code).first()
    if not attendee:
        raise NotFoundError("Ticket not found")

    event = db.query(Event).filter(Event.id == attendee.event_id).first()

    # Prevent reuse
    if attendee.attended:
        return {
            "status": "reused",
            "message": "This ticket has already been used.",
            "attendee": attendee,
        }

    now = datetime.utcnow()
    attendee.attended = True
    attendee.status = "attended"
    attendee.checked_in_at = now

    registration = db.query(Registration).filter(
        Registration.user_id == attendee.user_id,
        Registration.event_id == attendee.event_id
    ).first()
    if registration:
        registration.attended = True
        registration.status = "attended"

    db.commit()
    db.refresh(attendee)

    return {
        "status": "valid",
        "message": "Ticket verified successfully.",
        "attendee": attendee,
        "event": {"id": event.id, "title": event.title, "location": event.location} if event else None,
        "verified_at": attendee.checked_in_at.isoformat(),
    }


async def retrieve_ticket_code(db: Session, user_id: int, event_id: int):
    attendee = db.query(Attendee).filter(
        Attendee.user_id == user_id,
        Attendee.event_id == event_id
    ).first()
    if not attendee:
        raise NotFoundError("No ticket for this event")
    return attendee.ticket_code
