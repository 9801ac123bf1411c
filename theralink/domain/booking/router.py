"""Booking router - FastAPI endpoints for the booking page and appointment lists"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import (
    SessionContext,
    get_optional_session_context,
    get_session_context,
    require_role,
)
from ...database import get_db
from .schemas import (
    AppointmentCreate,
    AppointmentResponse,
    BookingRequestResponse,
    BookingResult,
    BookingTherapistResponse,
    SlotsResponse,
)
from .service import APPOINTMENTS_PAGE, BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Booking"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("/booking/therapists/{therapist_id}", response_model=BookingTherapistResponse)
async def get_booking_therapist(
    therapist_id: str,
    service: BookingService = Depends(get_booking_service),
):
    """Therapist details with available dates and the first date's slots"""
    return service.get_booking_view(therapist_id)


@router.get("/booking/therapists/{therapist_id}/slots", response_model=SlotsResponse)
async def get_booking_slots(
    therapist_id: str,
    date: str = Query(..., description="Date exactly as listed in available_dates"),
    service: BookingService = Depends(get_booking_service),
):
    """Time slots for one date"""
    return SlotsResponse(date=date, slots=service.get_slots(therapist_id, date))


@router.post("/booking/appointments", response_model=BookingResult, status_code=201)
async def book_session(
    data: AppointmentCreate,
    context: Optional[SessionContext] = Depends(get_optional_session_context),
    service: BookingService = Depends(get_booking_service),
):
    """Book a session at the selected date and time"""
    appointment, message = service.book_session(data, context)
    return BookingResult(
        appointment=AppointmentResponse.model_validate(appointment),
        message=message,
        redirect_to=APPOINTMENTS_PAGE,
    )


@router.get("/appointments", response_model=list[AppointmentResponse])
async def get_my_appointments(
    context: SessionContext = Depends(get_session_context),
    service: BookingService = Depends(get_booking_service),
):
    """The signed-in client's appointments"""
    return service.get_my_appointments(context)


@router.get("/booking-requests", response_model=list[BookingRequestResponse])
async def get_booking_requests(
    context: SessionContext = Depends(require_role("friend", "therapist")),
    service: BookingService = Depends(get_booking_service),
):
    """Upcoming and past sessions requested from the signed-in provider"""
    return service.get_booking_requests(context)
