"""Notes domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class NoteCreate(BaseModel):
    booking_request_id: Optional[str] = None
    title: str = ""
    content: str = ""


class NoteResponse(BaseModel):
    id: str
    therapist_id: str
    client_id: str
    booking_request_id: str
    title: str
    content: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NoteBookingRequest(BaseModel):
    """A booking request a note can be attached to"""

    id: str
    requested_date: Optional[datetime] = None
    client_id: str

    class Config:
        from_attributes = True
