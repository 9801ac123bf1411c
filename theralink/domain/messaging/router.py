"""Messaging router"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import SessionContext, get_session_context, require_role
from ...database import get_db
from .schemas import ConversationClient, MessageCreate, MessageResponse
from .service import MessageService

router = APIRouter(prefix="/messages", tags=["Messages"])


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    """Dependency injection for MessageService"""
    return MessageService(db)


@router.get("/clients", response_model=list[ConversationClient])
async def get_clients(
    context: SessionContext = Depends(require_role("friend", "therapist")),
    service: MessageService = Depends(get_message_service),
):
    """Clients the provider can message"""
    return service.get_clients(context)


@router.get("/{client_id}", response_model=list[MessageResponse])
async def get_thread(
    client_id: str,
    context: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service),
):
    return service.get_thread(context, client_id)


@router.post("/{client_id}", response_model=list[MessageResponse], status_code=201)
async def send_message(
    client_id: str,
    data: MessageCreate,
    context: SessionContext = Depends(get_session_context),
    service: MessageService = Depends(get_message_service),
):
    """Send a message and get the updated thread back"""
    return service.send_message(context, client_id, data.content)
