from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint
from datetime import datetime
from eventify.database import Base

class Registration(Base):
    """A user's own record of an event they signed up for."""

    __tablename__ = "registrations"
    __table_args__ = (UniqueConstraint("user_id", "event_id", name="uq_registration_user_event"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False, index=True)

    registered_at = Column(DateTime, default=datetime.utcnow)
    attended = Column(Boolean, nullable=False, default=False)
    status = Column(String, nullable=False, default="registered")  # registered, attended

    # Confirmation email bookkeeping
    email_sent = Column(Boolean, nullable=True)
    email_sent_at = Column(DateTime, nullable=True)
    email_message_id = Column(String, nullable=True)
    email_error = Column(String, nullable=True)
