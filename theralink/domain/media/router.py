"""Media router - video rooms and IntaSend checkout"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_role
from ...database import get_db
from .schemas import (
    CheckoutConfigResponse,
    VideoEvent,
    VideoEventResult,
    VideoRoomCreate,
    VideoRoomResponse,
    WebhookResult,
)
from .service import PaymentService, VideoService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Media"])


def get_video_service(db: Session = Depends(get_db)) -> VideoService:
    """Dependency injection for VideoService"""
    return VideoService(db)


def get_payment_service(db: Session = Depends(get_db)) -> PaymentService:
    """Dependency injection for PaymentService"""
    return PaymentService(db)


@router.post("/video/rooms", response_model=VideoRoomResponse, status_code=201)
async def start_video_room(
    data: VideoRoomCreate,
    context: SessionContext = Depends(require_role("friend", "therapist")),
    service: VideoService = Depends(get_video_service),
):
    """Start a video session room"""
    return service.start_room(context, data.appointment_id)


@router.get("/video/rooms/{room_name}", response_model=VideoRoomResponse)
async def join_video_room(
    room_name: str,
    context: SessionContext = Depends(get_session_context),
    service: VideoService = Depends(get_video_service),
):
    """Widget options for joining a room by its link"""
    return service.join_room(room_name, context)


@router.post("/video/rooms/{room_name}/events", response_model=VideoEventResult)
async def video_room_event(
    room_name: str,
    data: VideoEvent,
    context: SessionContext = Depends(get_session_context),
    service: VideoService = Depends(get_video_service),
):
    """Relay a lifecycle event fired by the embedded widget"""
    return service.handle_event(room_name, data.event, data.payload)


@router.delete("/video/rooms/{room_name}", status_code=204)
async def end_video_room(
    room_name: str,
    context: SessionContext = Depends(require_role("friend", "therapist")),
    service: VideoService = Depends(get_video_service),
):
    """Dispose a room when the session ends"""
    service.end_room(room_name, context)


@router.get("/payments/checkout", response_model=CheckoutConfigResponse)
async def get_checkout(
    amount: float = Query(..., gt=0),
    context: SessionContext = Depends(get_session_context),
    service: PaymentService = Depends(get_payment_service),
):
    """Configuration for the IntaSend checkout button"""
    return service.get_checkout(context, amount)


@router.post("/payments/intasend/webhook", response_model=WebhookResult)
async def intasend_webhook(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    """IntaSend payment status callback"""
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    event = service.handle_webhook(payload)
    logger.info(f"📬 IntaSend webhook processed: {payload.get('invoice_id')} -> {event}")
    return WebhookResult(event=event)
