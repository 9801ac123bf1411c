"""Media service - video rooms for sessions and IntaSend payments"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...config import (
    INTASEND_COUNTRY,
    INTASEND_CURRENCY,
    INTASEND_LIVE,
    INTASEND_PUBLISHABLE_KEY,
    INTASEND_WEBHOOK_CHALLENGE,
)
from ...models import Transaction
from ...webhook_security import verify_intasend_challenge
from .payments import PaymentResult, PaymentWidget
from .repository import MediaRepository
from .schemas import VideoEventResult, VideoRoomResponse
from .video import VIDEO_EVENTS, VideoRoom, VideoRoomRegistry, therapy_room_name, video_rooms

logger = logging.getLogger(__name__)


def _room_response(room: VideoRoom) -> VideoRoomResponse:
    return VideoRoomResponse(
        room_name=room.room_name,
        meeting_link=room.meeting_link,
        options=room.options,
        participants=sorted(room.participants),
    )


class VideoService:
    def __init__(self, db: Session, registry: VideoRoomRegistry = video_rooms):
        self.db = db
        self.registry = registry
        self.repo = MediaRepository()

    def start_room(self, context: SessionContext, appointment_id: Optional[str] = None) -> VideoRoomResponse:
        """Open an unbranded room for the therapist, optionally linking it to an appointment"""
        appointment = None
        if appointment_id:
            appointment = self.repo.get_appointment(self.db, appointment_id)
            if not appointment:
                raise HTTPException(status_code=404, detail="Appointment not found")
            if appointment.therapist_id != context.profile_id:
                raise HTTPException(status_code=403, detail="You do not have access to this page")

        room = VideoRoom(
            therapy_room_name(context.profile_id),
            display_name="Therapist",
            prejoin_page=False,
            hide_branding=True,
            owner_id=context.profile_id,
        )
        room = self.registry.acquire(room)

        if appointment is not None:
            try:
                self.repo.set_meeting_link(self.db, appointment, room.meeting_link)
            except SQLAlchemyError as e:
                self.db.rollback()
                self.registry.release(room.room_name)
                logger.error(f"❌ Failed to save meeting link for appointment {appointment.id}: {e}")
                raise HTTPException(status_code=500, detail="Failed to save meeting link") from e
            logger.info(f"🔗 Meeting link set for appointment {appointment.id}")

        return _room_response(room)

    def join_room(self, room_name: str, context: SessionContext) -> VideoRoomResponse:
        """Widget options for a participant joining by link"""
        room = VideoRoom(room_name, display_name=context.full_name or "Client", prejoin_page=True)
        active = self.registry.get(room_name)
        if active is not None:
            room.participants = set(active.participants)
        return _room_response(room)

    def handle_event(self, room_name: str, event: str, payload: dict) -> VideoEventResult:
        if event not in VIDEO_EVENTS:
            raise HTTPException(status_code=400, detail=f"Unknown video event: {event}")
        room = self.registry.get(room_name)
        if room is None or room.disposed:
            raise HTTPException(status_code=404, detail="Video room not found")

        handled = room.emit(event, payload)
        return VideoEventResult(
            room_name=room_name,
            event=event,
            handled=handled,
            active=not room.disposed,
            participants=sorted(room.participants),
        )

    def end_room(self, room_name: str, context: SessionContext) -> None:
        """Only the host who opened a room may end it for everyone"""
        room = self.registry.get(room_name)
        if room is None:
            raise HTTPException(status_code=404, detail="Video room not found")
        if room.owner_id and room.owner_id != context.profile_id:
            raise HTTPException(status_code=403, detail="You do not have access to this page")
        self.registry.release(room_name)
        logger.info(f"🛑 Video room {room_name} ended by {context.profile_id}")


class PaymentService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = MediaRepository()

    def build_widget(self) -> PaymentWidget:
        widget = PaymentWidget(INTASEND_PUBLISHABLE_KEY, live=INTASEND_LIVE)
        widget.on_complete(lambda result: self.record_transaction(result, "success"))
        widget.on_failed(lambda result: self.record_transaction(result, "failed"))
        widget.on_progress(
            lambda result: logger.info(f"⏳ Payment {result.reference} in progress")
        )
        return widget

    def get_checkout(self, context: SessionContext, amount: float) -> dict:
        if not INTASEND_PUBLISHABLE_KEY:
            raise HTTPException(status_code=500, detail="Payments are not configured")

        first_name, _, last_name = (context.full_name or "").partition(" ")
        return self.build_widget().checkout_config(
            amount=amount,
            currency=INTASEND_CURRENCY,
            country=INTASEND_COUNTRY,
            email=context.email,
            first_name=first_name or None,
            last_name=last_name or None,
            api_ref=context.profile_id,
        )

    def handle_webhook(self, payload: dict) -> Optional[str]:
        verify_intasend_challenge(payload, INTASEND_WEBHOOK_CHALLENGE)
        return self.build_widget().handle_webhook(payload)

    def record_transaction(self, result: PaymentResult, status: str) -> Transaction:
        """Upsert the transaction for a finished payment, keyed by its reference"""
        if not result.reference:
            raise HTTPException(status_code=400, detail="Missing payment reference")

        user = self.repo.get_profile(self.db, result.user_id)
        try:
            transaction = self.repo.upsert_transaction(
                self.db,
                result.reference,
                user_id=user.id if user else None,
                amount=result.amount,
                currency=result.currency or INTASEND_CURRENCY,
                status=status,
                payment_method=result.payment_method,
                phone_number=result.phone_number,
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to record payment {result.reference}: {e}")
            raise HTTPException(status_code=500, detail="Failed to record payment") from e

        logger.info(f"💳 Payment {result.reference} recorded as {status}")
        return transaction
