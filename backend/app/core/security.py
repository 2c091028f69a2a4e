"""Security utilities: application password checks and JWT token operations.

The application has a single owner, so login exchanges one configured password
for a bearer token. Tokens carry a subject and an expiration claim.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from passlib.context import CryptContext

from backend.app.core.settings import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

APP_SUBJECT = "owner"

_app_password_hash: Optional[str] = None


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_app_password_hash() -> str:
    """Return the configured password hash, hashing the plain default once if none is set."""
    global _app_password_hash
    if _app_password_hash is None:
        settings = get_settings()
        _app_password_hash = settings.app_password_hash or get_password_hash(settings.app_password)
    return _app_password_hash


def verify_app_password(plain_password: str) -> bool:
    if not plain_password:
        return False
    return verify_password(plain_password, get_app_password_hash())


def create_access_token(subject: str | Dict[str, Any] = APP_SUBJECT, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    identifier = subject.get("sub") if isinstance(subject, dict) and "sub" in subject else subject
    expire_delta = timedelta(minutes=expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expire_delta
    payload = {"sub": str(identifier), "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")


def decode_access_token(token: str) -> Dict[str, Any]:
    settings = get_settings()
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=["HS256"])
    except jwt.ExpiredSignatureError as exc:
        raise ValueError("Expired token") from exc
    except jwt.InvalidTokenError as exc:
        raise ValueError("Invalid token") from exc
