"""Messaging domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class MessageCreate(BaseModel):
    content: str = ""


class MessageResponse(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConversationClient(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None
    profile_image_url: Optional[str] = None

    class Config:
        from_attributes = True
