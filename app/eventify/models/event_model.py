from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from eventify.database import Base

EVENT_STATUSES = ("draft", "upcoming", "ongoing", "completed", "cancelled")
EVENT_VISIBILITIES = ("public", "private")

# Events in these states do not take registrations
CLOSED_STATUSES = ("draft", "completed", "cancelled")


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    start_at = Column(DateTime, nullable=False, index=True)
    end_at = Column(DateTime, nullable=False)
    location = Column(String, nullable=True)
    category = Column(String, nullable=True, index=True)
    visibility = Column(String, nullable=False, default="public", index=True)
    image_url = Column(String, nullable=True)

    capacity = Column(Integer, nullable=True)  # None means unlimited
    attendee_count = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="upcoming")
    registration_deadline = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    attendees = relationship("Attendee", cascade="all, delete")
    registrations = relationship("Registration", cascade="all, delete")
