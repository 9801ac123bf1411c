"""Notes service - provider notes attached to booking requests"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import BookingNote, BookingRequest
from .repository import NoteRepository
from .schemas import NoteCreate

logger = logging.getLogger(__name__)


class NoteService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = NoteRepository()

    def get_notes(self, context: SessionContext, search: Optional[str] = None) -> list[BookingNote]:
        return self.repo.get_notes(self.db, context.profile_id, search)

    def get_booking_requests(self, context: SessionContext) -> list[BookingRequest]:
        return self.repo.get_booking_requests(self.db, context.profile_id)

    def create_note(self, context: SessionContext, data: NoteCreate) -> BookingNote:
        """Save a note; the client is taken from the booking request"""
        if not data.content.strip() or not data.booking_request_id:
            raise HTTPException(status_code=400, detail="Missing title, content, or booking request")

        booking = self.repo.get_booking_request(self.db, data.booking_request_id, context.profile_id)
        if not booking:
            raise HTTPException(status_code=404, detail="Booking request not found")

        try:
            note = self.repo.create_note(
                self.db,
                therapist_id=context.profile_id,
                client_id=booking.client_id,
                booking_request_id=booking.id,
                title=data.title.strip(),
                content=data.content.strip(),
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Error saving note for booking {booking.id}: {e}")
            raise HTTPException(status_code=500, detail="Error saving note") from e

        logger.info(f"📝 Note {note.id} saved for booking request {booking.id}")
        return note
