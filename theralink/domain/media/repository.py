"""Media repository - transactions and appointment meeting links"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, Profile, Transaction


class MediaRepository:
    @staticmethod
    def get_transaction(db: Session, reference: str) -> Optional[Transaction]:
        return db.query(Transaction).filter(Transaction.reference == reference).first()

    @staticmethod
    def upsert_transaction(db: Session, reference: str, **values) -> Transaction:
        """Insert or update the transaction identified by its payment reference"""
        transaction = MediaRepository.get_transaction(db, reference)
        if transaction is None:
            transaction = Transaction(reference=reference)
            db.add(transaction)
        for key, value in values.items():
            setattr(transaction, key, value)
        db.commit()
        db.refresh(transaction)
        return transaction

    @staticmethod
    def get_profile(db: Session, profile_id: Optional[str]) -> Optional[Profile]:
        if not profile_id:
            return None
        return db.query(Profile).filter(Profile.id == profile_id).first()

    @staticmethod
    def get_appointment(db: Session, appointment_id: str) -> Optional[Appointment]:
        return db.query(Appointment).filter(Appointment.id == appointment_id).first()

    @staticmethod
    def set_meeting_link(db: Session, appointment: Appointment, link: str) -> Appointment:
        appointment.meeting_link = link
        db.commit()
        db.refresh(appointment)
        return appointment
