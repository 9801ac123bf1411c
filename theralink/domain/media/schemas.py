"""Media schemas - video rooms and payment checkout"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class VideoRoomCreate(BaseModel):
    appointment_id: Optional[str] = None


class VideoRoomResponse(BaseModel):
    room_name: str
    meeting_link: str
    options: dict[str, Any]
    participants: list[str] = []


class VideoEvent(BaseModel):
    event: str
    payload: dict[str, Any] = Field(default_factory=dict)


class VideoEventResult(BaseModel):
    room_name: str
    event: str
    handled: int
    active: bool
    participants: list[str] = []


class CheckoutConfigResponse(BaseModel):
    publicAPIKey: Optional[str] = None
    live: bool
    attributes: dict[str, Any]


class WebhookResult(BaseModel):
    received: bool = True
    event: Optional[str] = None
