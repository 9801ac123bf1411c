import base64
import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.x509 import load_pem_x509_certificate
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import FIREBASE_PROJECT_ID
from .database import get_db
from .models import Profile

logger = logging.getLogger(__name__)

GOOGLE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)

security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)

# Cache for Google's public keys
_cached_keys = None


@dataclass
class SessionContext:
    """
    The signed-in user as seen by every service call.

    Built once per request from a verified token and handed explicitly to the
    domain services. ``clear()`` is called at sign-out so a context that
    outlives its session can no longer identify anyone.
    """

    profile_id: Optional[str]
    firebase_uid: Optional[str]
    email: Optional[str]
    role: Optional[str]
    full_name: Optional[str] = None

    @classmethod
    def from_profile(cls, profile: Profile) -> "SessionContext":
        return cls(
            profile_id=profile.id,
            firebase_uid=profile.firebase_uid,
            email=profile.email,
            role=profile.role,
            full_name=profile.full_name,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.profile_id is not None

    def clear(self) -> None:
        self.profile_id = None
        self.firebase_uid = None
        self.email = None
        self.role = None
        self.full_name = None


def _b64url_decode(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


async def get_google_public_keys():
    """Fetch Google's public keys for Firebase token verification"""
    global _cached_keys
    if _cached_keys:
        return _cached_keys

    try:
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.get(GOOGLE_CERTS_URL)
            if response.status_code == 200:
                _cached_keys = response.json()
                logger.info(f"✅ Fetched {len(_cached_keys)} Google public keys")
                return _cached_keys
            logger.error(f"❌ Failed to fetch Google public keys: HTTP {response.status_code}")
    except httpx.HTTPError as e:
        logger.error(f"❌ Error fetching Google public keys: {str(e)}")
    return None


async def verify_firebase_token(token: str) -> dict:
    """
    Verify a Firebase ID token: RS256 signature against Google's certificates,
    then audience, issuer, expiry and issued-at claims.
    """
    global _cached_keys

    if not FIREBASE_PROJECT_ID:
        logger.error("❌ FIREBASE_PROJECT_ID not configured")
        raise HTTPException(status_code=500, detail="Authentication not configured")

    parts = token.split(".")
    if len(parts) != 3:
        raise HTTPException(status_code=401, detail="Invalid token format. Expected a valid JWT token.")
    header_b64, payload_b64, signature_b64 = parts

    try:
        header = json.loads(_b64url_decode(header_b64))
    except (ValueError, TypeError) as e:
        raise HTTPException(status_code=401, detail="Invalid token header") from e

    kid = header.get("kid")
    if header.get("alg") != "RS256" or not kid:
        raise HTTPException(status_code=401, detail="Invalid token header")

    public_keys = await get_google_public_keys()
    if not public_keys or kid not in public_keys:
        # Google rotates keys; refetch once before giving up
        _cached_keys = None
        public_keys = await get_google_public_keys()
        if not public_keys or kid not in public_keys:
            logger.error(f"❌ Key ID {kid} not found in public keys after retry")
            raise HTTPException(status_code=401, detail="Unable to verify token signature")

    cert = load_pem_x509_certificate(public_keys[kid].encode(), default_backend())
    try:
        cert.public_key().verify(
            _b64url_decode(signature_b64),
            f"{header_b64}.{payload_b64}".encode(),
            padding.PKCS1v15(),
            hashes.SHA256(),
        )
    except Exception as e:
        logger.warning(f"❌ Token signature verification failed: {str(e)}")
        raise HTTPException(status_code=401, detail="Invalid token signature") from e

    claims = json.loads(_b64url_decode(payload_b64))

    if claims.get("aud") != FIREBASE_PROJECT_ID:
        raise HTTPException(status_code=401, detail="Invalid token audience")
    if claims.get("iss") != f"https://securetoken.google.com/{FIREBASE_PROJECT_ID}":
        raise HTTPException(status_code=401, detail="Invalid token issuer")

    now = time.time()
    if claims.get("exp", 0) < now:
        raise HTTPException(
            status_code=401,
            detail="Token has expired. Please refresh your session.",
            headers={"X-Token-Expired": "true"},
        )
    # 60 seconds of clock skew
    if claims.get("iat", 0) > now + 60:
        raise HTTPException(status_code=401, detail="Invalid token")

    return claims


def resolve_profile(db: Session, claims: dict) -> Profile:
    """Find the profile for verified token claims, creating a client profile on first sign-in"""
    firebase_uid = claims.get("sub") or claims.get("user_id") or claims.get("uid")
    if not firebase_uid:
        raise HTTPException(status_code=401, detail="Invalid token claims")

    email = claims.get("email")
    profile = db.query(Profile).filter(Profile.firebase_uid == firebase_uid).first()
    if profile:
        return profile

    if email:
        # Same person signing in with a different provider
        profile = db.query(Profile).filter(Profile.email == email).first()
        if profile:
            logger.info(f"🔄 Linking profile {profile.id} to new Firebase UID")
            profile.firebase_uid = firebase_uid
            db.commit()
            db.refresh(profile)
            return profile

    logger.info(f"🆕 Creating profile for {email}")
    profile = Profile(
        firebase_uid=firebase_uid,
        email=email,
        full_name=claims.get("name", ""),
        role="client",
    )
    db.add(profile)
    try:
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"❌ Failed to create profile: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to create profile") from e
    db.refresh(profile)
    return profile


async def get_session_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db),
) -> SessionContext:
    """Populate the session context from the bearer token"""
    claims = await verify_firebase_token(credentials.credentials)
    profile = resolve_profile(db, claims)
    return SessionContext.from_profile(profile)


async def get_optional_session_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
    db: Session = Depends(get_db),
) -> Optional[SessionContext]:
    """Like get_session_context, but anonymous callers get None instead of a 401"""
    if not credentials:
        return None
    claims = await verify_firebase_token(credentials.credentials)
    return SessionContext.from_profile(resolve_profile(db, claims))


def require_role(*roles: str):
    """Dependency factory restricting an endpoint to the given profile roles"""

    async def checker(context: SessionContext = Depends(get_session_context)) -> SessionContext:
        if context.role not in roles:
            logger.warning(f"⚠️ Profile {context.profile_id} ({context.role}) denied; needs {roles}")
            raise HTTPException(status_code=403, detail="You do not have access to this page")
        return context

    return checker
