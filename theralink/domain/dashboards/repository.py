"""Dashboard repository - read-only count and aggregate queries"""

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ...models import (
    Appointment,
    Blog,
    BookingNote,
    BookingRequest,
    ContactMessage,
    Feedback,
    FriendDetails,
    Message,
    Profile,
    Review,
    SessionNote,
    Therapist,
    Transaction,
)


class DashboardRepository:
    """Every method takes its own session so queries can run in parallel"""

    @staticmethod
    def count_profiles(db: Session, role: str | None = None) -> int:
        query = db.query(func.count(Profile.id))
        if role:
            query = query.filter(Profile.role == role)
        return query.scalar() or 0

    @staticmethod
    def count_appointments(db: Session, status: str | None = None) -> int:
        query = db.query(func.count(Appointment.id))
        if status:
            query = query.filter(Appointment.status == status)
        return query.scalar() or 0

    @staticmethod
    def successful_transactions(db: Session) -> tuple[int, float]:
        """(count, total amount) of successful transactions"""
        count, total = (
            db.query(func.count(Transaction.id), func.sum(Transaction.amount))
            .filter(Transaction.status == "success")
            .one()
        )
        return count or 0, float(total or 0)

    @staticmethod
    def count_session_notes(db: Session) -> int:
        return db.query(func.count(SessionNote.id)).scalar() or 0

    @staticmethod
    def count_unread_feedback(db: Session) -> int:
        return db.query(func.count(Feedback.id)).filter(Feedback.is_read.is_(False)).scalar() or 0

    @staticmethod
    def count_unread_contact_messages(db: Session) -> int:
        return (
            db.query(func.count(ContactMessage.id))
            .filter(ContactMessage.is_read.is_(False))
            .scalar()
            or 0
        )

    @staticmethod
    def review_summary(db: Session) -> tuple[int, float]:
        """(count, average rating) of all reviews"""
        count, average = db.query(func.count(Review.id), func.avg(Review.rating)).one()
        return count or 0, float(average or 0)

    @staticmethod
    def count_pending_therapists(db: Session) -> int:
        return (
            db.query(func.count(Therapist.id))
            .filter(
                or_(
                    Therapist.application_status == "pending",
                    Therapist.application_status.is_(None),
                )
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_friend_details(db: Session) -> int:
        return db.query(func.count(FriendDetails.id)).scalar() or 0

    @staticmethod
    def count_blogs(db: Session, published_only: bool = False) -> int:
        query = db.query(func.count(Blog.id))
        if published_only:
            query = query.filter(Blog.published.is_(True))
        return query.scalar() or 0

    # Friend dashboard

    @staticmethod
    def count_active_clients(db: Session, provider_id: str) -> int:
        return (
            db.query(func.count(func.distinct(BookingRequest.client_id)))
            .filter(
                BookingRequest.therapist_id == provider_id,
                BookingRequest.status.in_(["scheduled", "confirmed"]),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_completed_sessions(db: Session, provider_id: str) -> int:
        return (
            db.query(func.count(BookingRequest.id))
            .filter(
                BookingRequest.therapist_id == provider_id,
                BookingRequest.status == "completed",
            )
            .scalar()
            or 0
        )

    @staticmethod
    def count_unread_messages(db: Session, receiver_id: str) -> int:
        return (
            db.query(func.count(Message.id))
            .filter(Message.receiver_id == receiver_id, Message.is_read.is_(False))
            .scalar()
            or 0
        )

    @staticmethod
    def count_booking_notes(db: Session, provider_id: str) -> int:
        return (
            db.query(func.count(BookingNote.id))
            .filter(BookingNote.therapist_id == provider_id)
            .scalar()
            or 0
        )
