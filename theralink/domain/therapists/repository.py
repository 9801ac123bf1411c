"""Therapist repository - admin listing and verification updates"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Profile, Therapist


class TherapistRepository:
    @staticmethod
    def get_therapists(db: Session) -> list[Therapist]:
        """All therapists that have a profile"""
        return (
            db.query(Therapist)
            .join(Therapist.profile)
            .options(joinedload(Therapist.profile))
            .order_by(Therapist.created_at.desc())
            .all()
        )

    @staticmethod
    def get_therapist(db: Session, therapist_id: str) -> Optional[Therapist]:
        return db.query(Therapist).filter(Therapist.id == therapist_id).first()

    @staticmethod
    def update_therapist(db: Session, therapist: Therapist, **updates) -> Therapist:
        for key, value in updates.items():
            if hasattr(therapist, key):
                setattr(therapist, key, value)
        db.commit()
        db.refresh(therapist)
        return therapist

    @staticmethod
    def get_profile(db: Session, profile_id: str) -> Optional[Profile]:
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def set_profile_image(db: Session, profile: Profile, url: str) -> Profile:
        profile.profile_image_url = url
        db.commit()
        db.refresh(profile)
        return profile
