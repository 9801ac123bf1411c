"""Booking service - availability resolution and appointment commit"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import Appointment, Therapist
from .availability import available_dates, initial_date, parse_availability, slots_for_date
from .repository import BookingRepository
from .schemas import (
    AppointmentCreate,
    BookingRequestResponse,
    BookingTherapistResponse,
    ClientSummary,
    SessionPrices,
)

logger = logging.getLogger(__name__)

SESSION_LENGTH = timedelta(minutes=50)
CHAT_PRICE_FACTOR = 0.7
DEFAULT_HOURLY_RATE = 80
DEFAULT_SPECIALIZATION = "General Therapy"
DEFAULT_BIO = "Professional therapist."
APPOINTMENTS_PAGE = "/client/appointments"


def session_window(selected_date: str, selected_time: str) -> tuple[datetime, datetime]:
    """Start and end of a session booked at ``selected_date`` ``selected_time``"""
    start_time = datetime.fromisoformat(f"{selected_date}T{selected_time}")
    return start_time, start_time + SESSION_LENGTH


def initial_status(therapist: Therapist) -> str:
    """Community therapists' sessions are confirmed on booking"""
    return "confirmed" if therapist.is_community_therapist else "scheduled"


class BookingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()

    def get_therapist(self, therapist_id: str) -> Therapist:
        therapist = self.repo.get_therapist(self.db, therapist_id)
        if not therapist:
            raise HTTPException(status_code=404, detail="The therapist profile could not be found")
        return therapist

    def get_booking_view(
        self, therapist_id: str, today: Optional[date] = None
    ) -> BookingTherapistResponse:
        """Therapist card plus the dates and slots the booking page offers"""
        therapist = self.get_therapist(therapist_id)
        today = today or date.today()

        availability = parse_availability(therapist.availability)
        selected_date = initial_date(availability, today)
        hourly_rate = therapist.hourly_rate or DEFAULT_HOURLY_RATE

        if therapist.is_community_therapist:
            prices = SessionPrices(video=0, chat=0)
        else:
            prices = SessionPrices(video=hourly_rate, chat=round(hourly_rate * CHAT_PRICE_FACTOR))

        profile = therapist.profile
        return BookingTherapistResponse(
            id=therapist.id,
            full_name=(profile.full_name if profile else None) or "",
            profile_image_url=profile.profile_image_url if profile else None,
            hourly_rate=hourly_rate,
            specialization=therapist.specialization or DEFAULT_SPECIALIZATION,
            bio=therapist.bio or DEFAULT_BIO,
            is_community_therapist=bool(therapist.is_community_therapist),
            available_dates=available_dates(availability, today),
            selected_date=selected_date,
            slots=slots_for_date(availability, selected_date),
            prices=prices,
        )

    def get_slots(self, therapist_id: str, selected_date: str) -> list[str]:
        therapist = self.get_therapist(therapist_id)
        return slots_for_date(parse_availability(therapist.availability), selected_date)

    def book_session(
        self, data: AppointmentCreate, context: Optional[SessionContext]
    ) -> tuple[Appointment, str]:
        """
        Commit an appointment for the signed-in client.

        Returns the new row and the confirmation message. Nothing is written
        unless therapist, date, time and user are all present. Existing
        appointments at the same slot are not checked.
        """
        if context is None or not context.is_authenticated:
            raise HTTPException(status_code=401, detail="Please login to book a session")
        if not data.therapist_id:
            raise HTTPException(status_code=400, detail="Please select a therapist")
        if not data.date or not data.time:
            raise HTTPException(status_code=400, detail="Please select a date and time")

        therapist = self.get_therapist(data.therapist_id)

        try:
            start_time, end_time = session_window(data.date, data.time)
        except ValueError as e:
            raise HTTPException(status_code=400, detail="Invalid date or time selection") from e

        status = initial_status(therapist)
        try:
            appointment = self.repo.create_appointment(
                self.db,
                client_id=context.profile_id,
                therapist_id=therapist.id,
                start_time=start_time,
                end_time=end_time,
                session_type=data.session_type,
                status=status,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error booking session with therapist {therapist.id}: {e}")
            raise HTTPException(status_code=500, detail="Could not complete your booking") from e

        logger.info(
            f"📅 Appointment {appointment.id} {status} for client {context.profile_id} at {start_time}"
        )
        if status == "confirmed":
            message = "Your session has been confirmed."
        else:
            message = "Your session has been scheduled."
        return appointment, message

    def get_my_appointments(self, context: SessionContext) -> list[Appointment]:
        return self.repo.get_client_appointments(self.db, context.profile_id)

    def get_booking_requests(self, context: SessionContext) -> list[BookingRequestResponse]:
        """Provider's booking requests merged with their clients' profiles"""
        bookings = self.repo.get_booking_requests(self.db, context.profile_id)
        if not bookings:
            return []

        client_ids = list({b.client_id for b in bookings})
        clients = {p.id: p for p in self.repo.get_profiles(self.db, client_ids)}

        return [
            BookingRequestResponse(
                id=b.id,
                client_id=b.client_id,
                status=b.status,
                requested_date=b.requested_date,
                requested_time=b.requested_time,
                session_type=b.session_type,
                client=ClientSummary.model_validate(clients[b.client_id])
                if b.client_id in clients
                else None,
            )
            for b in bookings
        ]
