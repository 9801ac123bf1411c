"""Booking repository - Database operations for appointments and booking requests"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, BookingRequest, Profile, Therapist


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_therapist(db: Session, therapist_id: str) -> Optional[Therapist]:
        """Get a therapist together with its profile"""
        return (
            db.query(Therapist)
            .options(joinedload(Therapist.profile))
            .filter(Therapist.id == therapist_id)
            .first()
        )

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        """Insert one appointment row; no check against existing bookings"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def get_client_appointments(db: Session, client_id: str) -> list[Appointment]:
        return (
            db.query(Appointment)
            .filter(Appointment.client_id == client_id)
            .order_by(Appointment.start_time.asc())
            .all()
        )

    @staticmethod
    def get_booking_requests(db: Session, provider_id: str) -> list[BookingRequest]:
        """Booking requests addressed to a provider, newest requested time first"""
        return (
            db.query(BookingRequest)
            .filter(BookingRequest.therapist_id == provider_id)
            .order_by(BookingRequest.requested_time.desc())
            .all()
        )

    @staticmethod
    def get_profiles(db: Session, profile_ids: list[str]) -> list[Profile]:
        if not profile_ids:
            return []
        return db.query(Profile).filter(Profile.id.in_(profile_ids)).all()
