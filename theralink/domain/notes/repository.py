"""Notes repository - Database operations for booking notes"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import BookingNote, BookingRequest


class NoteRepository:
    @staticmethod
    def get_notes(db: Session, provider_id: str, search: Optional[str] = None) -> list[BookingNote]:
        """Provider's notes, newest first, optionally filtered by title or content"""
        query = db.query(BookingNote).filter(BookingNote.therapist_id == provider_id)

        if search:
            search_term = f"%{search.lower()}%"
            query = query.filter(
                or_(BookingNote.title.ilike(search_term), BookingNote.content.ilike(search_term))
            )

        return query.order_by(BookingNote.created_at.desc()).all()

    @staticmethod
    def get_booking_requests(db: Session, provider_id: str) -> list[BookingRequest]:
        return (
            db.query(BookingRequest)
            .filter(BookingRequest.therapist_id == provider_id)
            .order_by(BookingRequest.requested_date.desc())
            .all()
        )

    @staticmethod
    def get_booking_request(
        db: Session, booking_request_id: str, provider_id: str
    ) -> Optional[BookingRequest]:
        """A booking request, only if it is addressed to the provider"""
        return (
            db.query(BookingRequest)
            .filter(
                BookingRequest.id == booking_request_id,
                BookingRequest.therapist_id == provider_id,
            )
            .first()
        )

    @staticmethod
    def create_note(db: Session, **note_data) -> BookingNote:
        note = BookingNote(**note_data)
        db.add(note)
        db.commit()
        db.refresh(note)
        return note
