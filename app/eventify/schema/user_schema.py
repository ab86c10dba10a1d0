from pydantic import BaseModel
from typing import Optional

class ProfileUpdate(BaseModel):
    display_name: Optional[str] = None
    student_id: Optional[str] = None
    session: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None

    class Config:
        extra = "ignore"
