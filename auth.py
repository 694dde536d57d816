"""Authentication helpers: bearer-token guard and Firebase identity bridging.

This module provides:
1. ``get_current_user``, a FastAPI dependency that extracts the
   ``Authorization: Bearer <token>`` header, validates the API's own JWT and
   loads the matching ``models.User`` row.
2. ``verify_id_token``, which checks a Firebase ID token against Google's
   published JSON Web Key Set (JWKS) for the configured project.
3. ``create_firebase_user``, a best-effort mirror of a local registration
   into Firebase through the Identity Toolkit REST API.

Settings consumed (see ``settings.py``):
    FIREBASE_PROJECT_ID  - audience / issuer suffix of Firebase ID tokens
    FIREBASE_API_KEY     - web API key used for the signUp REST call

If the project id is missing every Firebase token is rejected with 401.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, Optional

import httpx
import structlog
from fastapi import Depends, HTTPException, Request, status
from jose import JWTError, jwt
from pydantic import BaseModel
from sqlalchemy.orm import Session

import crud
import models
from database import get_db
from security import decode_access_token
from settings import get_settings

logger = structlog.get_logger(__name__)

FIREBASE_JWKS_URL = (
    "https://www.googleapis.com/service_accounts/v1/jwk/securetoken@system.gserviceaccount.com"
)
FIREBASE_SIGNUP_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signUp"


class FirebaseError(Exception):
    """Raised when a Firebase REST call fails."""


class FirebaseIdentity(BaseModel):
    sub: str
    email: Optional[str] = None
    email_verified: bool = False
    exp: int
    aud: str


class FirebaseSettings(BaseModel):
    project_id: str

    @property
    def issuer(self) -> str:
        return f"https://securetoken.google.com/{self.project_id}"


def _load_firebase_settings() -> FirebaseSettings:
    project_id = get_settings().firebase_project_id
    if not project_id:
        raise RuntimeError("Firebase project id is not configured")
    return FirebaseSettings(project_id=project_id)


@lru_cache
def _get_jwks():
    logger.info("Fetching JWKS", jwks_url=FIREBASE_JWKS_URL)
    resp = httpx.get(FIREBASE_JWKS_URL, timeout=10)
    resp.raise_for_status()
    return resp.json()


def verify_id_token(id_token: str) -> FirebaseIdentity:
    """Verify a Firebase ID token and return its claims.

    Raises HTTPException(401) on any failure, including missing configuration
    and an unreachable key endpoint.
    """
    invalid = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid authentication token"
    )
    try:
        firebase = _load_firebase_settings()
        jwks = _get_jwks()
    except (RuntimeError, httpx.HTTPError) as exc:
        logger.warning("Firebase verification unavailable", exc=str(exc))
        raise invalid

    try:
        payload = jwt.decode(
            id_token,
            jwks,
            algorithms=["RS256"],
            audience=firebase.project_id,
            issuer=firebase.issuer,
            options={"verify_at_hash": False},
        )
        return FirebaseIdentity.model_validate(payload)
    except (JWTError, ValueError) as exc:
        logger.warning("Firebase token verification failed", exc=str(exc))
        raise invalid


def create_firebase_user(email: str, password: str) -> dict:
    """Create an email/password account in Firebase. Raises FirebaseError on failure."""
    api_key = get_settings().firebase_api_key
    if not api_key:
        raise FirebaseError("Firebase API key is not configured")
    try:
        resp = httpx.post(
            FIREBASE_SIGNUP_URL,
            params={"key": api_key},
            json={"email": email, "password": password, "returnSecureToken": False},
            timeout=10,
        )
        resp.raise_for_status()
    except httpx.HTTPError as exc:
        raise FirebaseError(f"Error creating user: {exc}") from exc
    return resp.json()


# Helper to extract Authorization header (works with FastAPI DI)
def _get_authorization_header(request: Request) -> Optional[str]:
    return request.headers.get("Authorization")


# --- FastAPI dependency ---
async def get_current_user(
    authorization: Annotated[Optional[str], Depends(_get_authorization_header)],
    db: Session = Depends(get_db),
) -> models.User:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, no token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1].strip()
    user_id = decode_access_token(token)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, token failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = crud.get_user_by_id(db, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authorized, user not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
