"""Password hashing and JWT helpers"""

import secrets
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from jose import jwt, JWTError
from passlib.context import CryptContext

from .config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: Dict[str, Any], lifetime: timedelta) -> str:
    claims = dict(claims, exp=datetime.utcnow() + lifetime)
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    subject: str,
    user_type: str,
    extra_claims: Optional[Dict[str, Any]] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Signed access token for ``subject``.

    ``extra_claims`` carries impersonation markers (``imp`` and ``imp_log``)
    when a staff member acts as another user.
    """
    claims = {"sub": subject, "user_type": user_type, "type": ACCESS, **(extra_claims or {})}
    minutes = expires_minutes or settings.ACCESS_TOKEN_EXPIRE_MINUTES
    return _encode(claims, timedelta(minutes=minutes))


def create_refresh_token(subject: str, user_type: str) -> str:
    claims = {"sub": subject, "user_type": user_type, "type": REFRESH}
    return _encode(claims, timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS))


def decode_token(token: str) -> Optional[Dict[str, Any]]:
    """Claims of a valid token, None when the signature or expiry check fails"""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None


def verify_refresh_token(token: str) -> Optional[Dict[str, Any]]:
    payload = decode_token(token)
    if payload and payload.get("type") == REFRESH:
        return payload
    return None


def generate_share_token() -> str:
    """64 hex characters, used in public order share links."""
    return secrets.token_hex(32)


def generate_invitation_token() -> str:
    """Token emailed to shadow publishers so they can claim their account."""
    return secrets.token_urlsafe(32)
