"""Therapist router - admin review endpoints and profile image upload"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_role
from ...database import get_db
from .schemas import (
    ProfileImageResponse,
    StatusFilter,
    TherapistAdminResponse,
    VerificationUpdate,
)
from .service import TherapistService

router = APIRouter(tags=["Therapists"])


def get_therapist_service(db: Session = Depends(get_db)) -> TherapistService:
    """Dependency injection for TherapistService"""
    return TherapistService(db)


@router.get("/admin/therapists", response_model=list[TherapistAdminResponse])
async def list_therapists(
    search: Optional[str] = Query(None),
    status: StatusFilter = Query("all"),
    context: SessionContext = Depends(require_role("admin")),
    service: TherapistService = Depends(get_therapist_service),
):
    """Therapists with profile details, filtered by search term and status"""
    return service.list_therapists(search, status)


@router.patch("/admin/therapists/{therapist_id}/verification", response_model=TherapistAdminResponse)
async def update_verification(
    therapist_id: str,
    data: VerificationUpdate,
    context: SessionContext = Depends(require_role("admin")),
    service: TherapistService = Depends(get_therapist_service),
):
    """Approve or reject a therapist application"""
    return service.set_verification(therapist_id, data.is_verified)


@router.post("/therapists/me/profile-image", response_model=ProfileImageResponse)
async def upload_profile_image(
    file: UploadFile = File(...),
    context: SessionContext = Depends(get_session_context),
    service: TherapistService = Depends(get_therapist_service),
):
    """Upload a new profile picture (JPG, PNG or WebP, max 5MB)"""
    contents = await file.read()
    profile, key = service.upload_profile_image(context, file.filename, file.content_type, contents)
    return ProfileImageResponse(url=profile.profile_image_url, key=key)
