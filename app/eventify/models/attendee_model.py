from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime
from eventify.database import Base

class Attendee(Base):
    """The event-side mirror of a Registration."""

    __tablename__ = "attendees"
    __table_args__ = (UniqueConstraint("event_id", "user_id", name="uq_attendee_event_user"),)

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    registered_at = Column(DateTime, default=datetime.utcnow)
    status = Column(String, nullable=False, default="registered")
    attended = Column(Boolean, nullable=False, default=False)

    # Printed as a QR code in the confirmation email, scanned at the door
    ticket_code = Column(String, nullable=False, unique=True, index=True)
    checked_in_at = Column(DateTime, nullable=True)
