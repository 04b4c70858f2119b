from datetime import timedelta
from typing import Optional
from uuid import UUID

from jose import JWTError, jwt

from riskflow.common.timeutil import utcnow
from riskflow.core.config import get_settings


def create_access_token(
    user_id: UUID,
    *,
    org_id: Optional[UUID] = None,
    role: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Create a signed JWT access token for a user."""
    settings = get_settings()
    if expires_delta:
        expire = utcnow() + expires_delta
    else:
        expire = utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode = {
        "sub": str(user_id),
        "exp": expire,
        "type": "access",
    }
    if org_id is not None:
        to_encode["org"] = str(org_id)
    if role is not None:
        to_encode["role"] = role
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_token(token: str) -> Optional[UUID]:
    """Decode an access token and return the user ID it was issued for.

    Returns None for expired, tampered, or malformed tokens.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None

    if payload.get("type") != "access":
        return None

    subject = payload.get("sub")
    if not subject:
        return None
    try:
        return UUID(subject)
    except ValueError:
        return None
