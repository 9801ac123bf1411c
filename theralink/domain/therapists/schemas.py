"""Therapist administration schemas"""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel

StatusFilter = Literal["all", "verified", "pending", "active"]


class TherapistAdminResponse(BaseModel):
    """Therapist row flattened with its profile fields"""

    id: str
    full_name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    profile_image_url: Optional[str] = None
    bio: Optional[str] = None
    specialization: Optional[str] = None
    years_experience: Optional[int] = None
    hourly_rate: Optional[float] = None
    rating: Optional[float] = None
    preferred_currency: Optional[str] = None
    license_number: Optional[str] = None
    license_type: Optional[str] = None
    therapy_approaches: Optional[list[str]] = None
    languages: Optional[list[str]] = None
    session_formats: Optional[list[str]] = None
    application_status: Optional[str] = None
    is_verified: bool = False
    has_insurance: bool = False
    insurance_info: Optional[str] = None
    is_community_therapist: bool = False
    availability: Optional[Any] = None
    created_at: Optional[datetime] = None


class VerificationUpdate(BaseModel):
    is_verified: bool


class ProfileImageResponse(BaseModel):
    url: str
    key: str
