"""Messaging service - provider/client threads"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import SessionContext
from ...models import Message, Profile
from .repository import MessageRepository

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = MessageRepository()

    def get_clients(self, context: SessionContext) -> list[Profile]:
        client_ids = self.repo.get_client_ids(self.db, context.profile_id)
        return self.repo.get_profiles(self.db, client_ids)

    def get_thread(self, context: SessionContext, client_id: str) -> list[Message]:
        return self.repo.get_thread(self.db, context.profile_id, client_id)

    def send_message(self, context: SessionContext, client_id: str, content: str) -> list[Message]:
        """Insert a message, then return the refetched thread"""
        content = (content or "").strip()
        if not content or not client_id:
            raise HTTPException(
                status_code=400,
                detail="Cannot send message: client not selected or message is empty.",
            )

        try:
            self.repo.create_message(self.db, context.profile_id, client_id, content)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to send message from {context.profile_id} to {client_id}: {e}")
            raise HTTPException(status_code=500, detail="Failed to send") from e

        return self.get_thread(context, client_id)
