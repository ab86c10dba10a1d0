from pydantic import BaseModel, Field
from typing import Optional, List

class RoomCreate(BaseModel):
    name: str
    capacity: int = Field(ge=1)
    location: Optional[str] = None
    facilities: List[str] = []
    available: bool = True


class RoomUpdate(BaseModel):
    name: Optional[str] = None
    capacity: Optional[int] = Field(default=None, ge=1)
    location: Optional[str] = None
    facilities: Optional[List[str]] = None
    available: Optional[bool] = None

    class Config:
        extra = "ignore"
