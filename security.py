"""
Password hashing (bcrypt) and issuance of the API's own bearer tokens.

Tokens are stateless HS256 JWTs carrying the user id as ``sub``. Nothing is
recorded server-side, so logging out is just the client discarding its token.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from settings import get_settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(user_id: int, expires_delta: Optional[timedelta] = None) -> str:
    """
    Mint a signed token for ``user_id``.

    Args:
        user_id: Primary key of the authenticated user
        expires_delta: Optional override of the configured lifetime

    Returns:
        The encoded JWT string
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expires_days)

    to_encode = {
        "sub": str(user_id),
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[int]:
    """Return the user id carried by a valid token, or None if it is invalid or expired."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None

    subject = payload.get("sub")
    if subject is None:
        return None
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None
