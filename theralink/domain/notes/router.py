"""Notes router"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import SessionContext, require_role
from ...database import get_db
from .schemas import NoteBookingRequest, NoteCreate, NoteResponse
from .service import NoteService

router = APIRouter(prefix="/notes", tags=["Notes"])

provider_only = require_role("friend", "therapist")


def get_note_service(db: Session = Depends(get_db)) -> NoteService:
    """Dependency injection for NoteService"""
    return NoteService(db)


@router.get("", response_model=list[NoteResponse])
async def get_notes(
    search: Optional[str] = Query(None),
    context: SessionContext = Depends(provider_only),
    service: NoteService = Depends(get_note_service),
):
    return service.get_notes(context, search)


@router.get("/booking-requests", response_model=list[NoteBookingRequest])
async def get_note_booking_requests(
    context: SessionContext = Depends(provider_only),
    service: NoteService = Depends(get_note_service),
):
    """Booking requests a new note can be attached to"""
    return service.get_booking_requests(context)


@router.post("", response_model=NoteResponse, status_code=201)
async def create_note(
    data: NoteCreate,
    context: SessionContext = Depends(provider_only),
    service: NoteService = Depends(get_note_service),
):
    return service.create_note(context, data)
