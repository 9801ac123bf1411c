"""Messaging repository - Database operations for messages"""

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from ...models import BookingRequest, Message, Profile

# Only the most recent history is shown in the panel
THREAD_LIMIT = 50


class MessageRepository:
    @staticmethod
    def get_client_ids(db: Session, provider_id: str) -> list[str]:
        """Distinct clients who have booked with a provider"""
        rows = (
            db.query(BookingRequest.client_id)
            .filter(BookingRequest.therapist_id == provider_id)
            .distinct()
            .all()
        )
        return [row.client_id for row in rows]

    @staticmethod
    def get_profiles(db: Session, profile_ids: list[str]) -> list[Profile]:
        if not profile_ids:
            return []
        return db.query(Profile).filter(Profile.id.in_(profile_ids)).all()

    @staticmethod
    def get_thread(db: Session, user_id: str, other_id: str, limit: int = THREAD_LIMIT) -> list[Message]:
        """Messages between two people in either direction, oldest first"""
        return (
            db.query(Message)
            .filter(
                or_(
                    and_(Message.sender_id == user_id, Message.receiver_id == other_id),
                    and_(Message.sender_id == other_id, Message.receiver_id == user_id),
                )
            )
            .order_by(Message.created_at.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def create_message(db: Session, sender_id: str, receiver_id: str, content: str) -> Message:
        message = Message(sender_id=sender_id, receiver_id=receiver_id, content=content)
        db.add(message)
        db.commit()
        db.refresh(message)
        return message
