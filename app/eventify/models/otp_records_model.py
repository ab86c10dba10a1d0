from sqlalchemy import Column, Integer, String, DateTime
from eventify.database import Base
from datetime import datetime

class OTPRecord(Base):
    __tablename__ = "otp_records"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, nullable=False, index=True)  # ID of the entity the code was issued to
    owner_type = Column(String(50), nullable=False)

    otp = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
