from datetime import datetime
from io import BytesIO
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy.orm import Session
from eventify.models.user_model import User
from eventify.models.event_model import Event
from eventify.models.registration_model import Registration
from eventify.constant_file import email_from_name
from eventify.exceptions import NotFoundError, PermissionDeniedError


def is_certificate_eligible(event: Event, registration: Registration) -> bool:
    return event.status == "completed" and registration.status == "attended"


async def retrieve_certificates(db: Session, user_id: int):
    rows = (
        db.query(Registration, Event)
        .join(Event, Event.id == Registration.event_id)
        .filter(Registration.user_id == user_id)
        .order_by(Event.end_at.desc())
        .all()
    )
    return [
        {"event_id": event.id, "title": event.title, "end_at": event.end_at, "category": event.category}
        for registration, event in rows
        if is_certificate_eligible(event, registration)
    ]


def render_certificate_pdf(user: User, event: Event) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=landscape(A4))
    width, height = landscape(A4)

    # Border
    pdf.setLineWidth(3)
    pdf.rect(12 * mm, 12 * mm, width - 24 * mm, height - 24 * mm)
    pdf.setLineWidth(0.8)
    pdf.rect(16 * mm, 16 * mm, width - 32 * mm, height - 32 * mm)

    y = height - 45 * mm
    pdf.setFont("Helvetica-Bold", 30)
    pdf.drawCentredString(width / 2, y, "Certificate of Participation")
    y -= 18 * mm

    pdf.setFont("Helvetica", 14)
    pdf.drawCentredString(width / 2, y, "This is to certify that")
    y -= 16 * mm

    pdf.setFont("Helvetica-Bold", 24)
    pdf.drawCentredString(width / 2, y, user.display_name)
    y -= 10 * mm

    if user.student_id:
        pdf.setFont("Helvetica", 12)
        pdf.drawCentredString(width / 2, y, f"Student ID: {user.student_id}")
    y -= 14 * mm

    pdf.setFont("Helvetica", 14)
    pdf.drawCentredString(width / 2, y, "has successfully participated in")
    y -= 14 * mm

    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawCentredString(width / 2, y, event.title)
    y -= 12 * mm

    held_on = event.end_at.strftime('%B %d, %Y') if event.end_at else "TBD"
    pdf.setFont("Helvetica", 13)
    pdf.drawCentredString(width / 2, y, f"held on {held_on}")

    pdf.setFont("Helvetica-Oblique", 9)
    pdf.drawCentredString(width / 2, 22 * mm,
                          f"Issued by {email_from_name} on {datetime.utcnow().strftime('%Y-%m-%d')}")

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


async def generate_certificate(db: Session, user: User, event_id: int):
    """Returns (filename, pdf bytes) for an attended, completed event."""
    event = db.query(Event).filter(Event.id == event_id).first()
    if not event:
        raise NotFoundError(f"Event {event_id} not found")

    registration = db.query(Registration).filter(
        Registration.user_id == user.id,
        Registration.event_id == event_id,
    ).first()
    if not registration or not is_certificate_eligible(event, registration):
        raise PermissionDeniedError("Certificates are only issued for attended, completed events")

    filename = f"certificate_{event.id}_{user.id}.pdf"
    return filename, render_certificate_pdf(user, event)
