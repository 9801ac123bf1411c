import logging

import firebase_admin
from fastapi import APIRouter, Depends, HTTPException
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin import exceptions as firebase_exceptions

from ..auth import SessionContext, get_session_context
from ..config import FIREBASE_PROJECT_ID

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


def get_firebase_app():
    """Initialize the Firebase Admin SDK on first use"""
    try:
        return firebase_admin.get_app()
    except ValueError:
        try:
            cred = credentials.ApplicationDefault()
            app = firebase_admin.initialize_app(cred, {"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with default credentials")
        except Exception:
            app = firebase_admin.initialize_app(options={"projectId": FIREBASE_PROJECT_ID})
            logger.info("Firebase Admin initialized with project ID only")
        return app


@router.get("/me")
async def get_me(context: SessionContext = Depends(get_session_context)):
    """Current session context"""
    return {
        "id": context.profile_id,
        "email": context.email,
        "full_name": context.full_name,
        "role": context.role,
    }


@router.post("/logout")
async def logout(context: SessionContext = Depends(get_session_context)):
    """End the session: revoke the user's refresh tokens and clear the context"""
    try:
        firebase_auth.revoke_refresh_tokens(context.firebase_uid, app=get_firebase_app())
    except firebase_exceptions.FirebaseError as e:
        logger.error(f"Failed to revoke tokens for profile {context.profile_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to sign out. Please try again.") from e

    logger.info(f"👋 Profile {context.profile_id} signed out")
    context.clear()
    return {"success": True, "authenticated": context.is_authenticated}
