from sqlalchemy import Column, Integer, String, Boolean, DateTime, JSON
from datetime import datetime
from eventify.database import Base

class Room(Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, unique=True)
    capacity = Column(Integer, nullable=False)
    location = Column(String, nullable=True)
    facilities = Column(JSON, nullable=False, default=list)
    available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
