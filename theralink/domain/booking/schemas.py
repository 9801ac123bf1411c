"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel


class SessionPrices(BaseModel):
    video: float
    chat: float


class BookingTherapistResponse(BaseModel):
    """Everything the booking page needs to render for one therapist"""

    id: str
    full_name: str
    profile_image_url: Optional[str] = None
    hourly_rate: float
    specialization: str
    bio: str
    is_community_therapist: bool
    available_dates: list[str]
    selected_date: str
    slots: list[str]
    prices: SessionPrices


class SlotsResponse(BaseModel):
    date: str
    slots: list[str]


class AppointmentCreate(BaseModel):
    """Schema for booking a session; date and time are the strings the page offered"""

    therapist_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    session_type: Literal["video", "chat"] = "video"


class AppointmentResponse(BaseModel):
    id: str
    client_id: str
    therapist_id: str
    start_time: datetime
    end_time: datetime
    session_type: str
    status: str
    meeting_link: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BookingResult(BaseModel):
    appointment: AppointmentResponse
    message: str
    redirect_to: str


class ClientSummary(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    profile_image_url: Optional[str] = None

    class Config:
        from_attributes = True


class BookingRequestResponse(BaseModel):
    id: str
    client_id: str
    status: str
    requested_date: Optional[datetime] = None
    requested_time: Optional[datetime] = None
    session_type: Optional[str] = None
    client: Optional[ClientSummary] = None
