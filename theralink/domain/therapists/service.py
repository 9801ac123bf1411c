"""Therapist service - admin review and profile images"""

import logging
import time
from typing import Optional

from botocore.exceptions import BotoCoreError, ClientError
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ... import storage
from ...auth import SessionContext
from ...config import AVATARS_BUCKET
from ...models import Profile, Therapist
from .repository import TherapistRepository
from .schemas import StatusFilter, TherapistAdminResponse

logger = logging.getLogger(__name__)

MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
ALLOWED_IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "webp")
IMAGE_CACHE_CONTROL = "max-age=3600"


def _to_admin_response(therapist: Therapist) -> TherapistAdminResponse:
    profile = therapist.profile
    return TherapistAdminResponse(
        id=therapist.id,
        full_name=profile.full_name or "Unknown",
        email=profile.email or "",
        phone=profile.phone,
        location=profile.location,
        profile_image_url=profile.profile_image_url,
        bio=therapist.bio,
        specialization=therapist.specialization,
        years_experience=therapist.years_experience,
        hourly_rate=therapist.hourly_rate,
        rating=therapist.rating,
        preferred_currency=therapist.preferred_currency,
        license_number=therapist.license_number,
        license_type=therapist.license_type,
        therapy_approaches=therapist.therapy_approaches,
        languages=therapist.languages,
        session_formats=therapist.session_formats,
        application_status=therapist.application_status,
        is_verified=bool(therapist.is_verified),
        has_insurance=bool(therapist.has_insurance),
        insurance_info=therapist.insurance_info,
        is_community_therapist=bool(therapist.is_community_therapist),
        availability=therapist.availability,
        created_at=therapist.created_at,
    )


def _matches_search(item: TherapistAdminResponse, search: str) -> bool:
    term = search.lower()
    fields = (item.full_name, item.email, item.specialization, item.location)
    return any(value and term in value.lower() for value in fields)


def _matches_status(item: TherapistAdminResponse, status: StatusFilter) -> bool:
    if status == "verified":
        return item.is_verified
    if status == "pending":
        return item.application_status == "pending"
    if status == "active":
        return item.is_verified and bool(item.license_number)
    return True


class TherapistService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = TherapistRepository()

    def list_therapists(
        self, search: Optional[str] = None, status: StatusFilter = "all"
    ) -> list[TherapistAdminResponse]:
        therapists = [_to_admin_response(t) for t in self.repo.get_therapists(self.db)]
        if search:
            therapists = [t for t in therapists if _matches_search(t, search)]
        return [t for t in therapists if _matches_status(t, status)]

    def set_verification(self, therapist_id: str, is_verified: bool) -> TherapistAdminResponse:
        therapist = self.repo.get_therapist(self.db, therapist_id)
        if not therapist:
            raise HTTPException(status_code=404, detail="Therapist not found")

        try:
            therapist = self.repo.update_therapist(
                self.db,
                therapist,
                is_verified=is_verified,
                application_status="approved" if is_verified else "rejected",
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update verification for therapist {therapist_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update therapist") from e

        logger.info(f"✅ Therapist {therapist_id} {'verified' if is_verified else 'unverified'}")
        return _to_admin_response(therapist)

    def upload_profile_image(
        self,
        context: SessionContext,
        filename: Optional[str],
        content_type: Optional[str],
        contents: bytes,
    ) -> tuple[Profile, str]:
        """
        Replace the user's avatar: validate, clear old objects under the
        user's prefix, upload the new image and store its public URL on the
        profile. Returns the updated profile and the object key.
        """
        if not filename or not contents:
            raise HTTPException(status_code=400, detail="You must select an image to upload.")
        if len(contents) > MAX_IMAGE_SIZE:
            raise HTTPException(status_code=400, detail="File size must be less than 5MB")
        if not content_type or not content_type.startswith("image/"):
            raise HTTPException(status_code=400, detail="Please select a valid image file")

        ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if ext not in ALLOWED_IMAGE_EXTENSIONS:
            raise HTTPException(status_code=400, detail="Please select a JPG, PNG, or WebP image")

        profile = self.repo.get_profile(self.db, context.profile_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Profile not found")

        client = storage.get_storage_client()
        prefix = f"{profile.id}/"

        try:
            old_keys = storage.list_objects(client, AVATARS_BUCKET, prefix)
            storage.remove_objects(client, AVATARS_BUCKET, old_keys)
        except (BotoCoreError, ClientError) as e:
            # Stale avatars are harmless; keep going with the upload
            logger.warning(f"⚠️ Could not clean up old files for {profile.id}: {e}")

        key = f"{prefix}avatar-{int(time.time() * 1000)}.{ext}"
        try:
            storage.upload_object(
                client,
                AVATARS_BUCKET,
                key,
                contents,
                content_type,
                cache_control=IMAGE_CACHE_CONTROL,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"❌ Image upload failed for {profile.id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to upload image") from e

        try:
            profile = self.repo.set_profile_image(
                self.db, profile, storage.public_url(AVATARS_BUCKET, key)
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to save profile image URL for {context.profile_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to update profile image") from e
        return profile, key
