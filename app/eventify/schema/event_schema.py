from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

EventStatus = Literal["draft", "upcoming", "ongoing", "completed", "cancelled"]


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    start_at: Optional[datetime] = None
    end_at: Optional[datetime] = None
    location: Optional[str] = None
    room_id: Optional[int] = None
    category: Optional[str] = None
    visibility: Optional[Literal["public", "private"]] = None
    image_url: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    status: Optional[EventStatus] = None
    registration_deadline: Optional[datetime] = None

    class Config:
        extra = "ignore"


class EventStatusUpdate(BaseModel):
    status: EventStatus


class BulkEventIds(BaseModel):
    event_ids: List[int]


class BulkStatusUpdate(BaseModel):
    event_ids: List[int]
    status: EventStatus


class AttendanceUpdate(BaseModel):
    attended: bool
