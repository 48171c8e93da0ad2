# dailysync/app/services/auth_service.py

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from dailysync.app.config import settings
from dailysync.app.db import get_db
from dailysync.app.models.enums import Role
from dailysync.app.models.user import User
from dailysync.app.utils.errors import Forbidden, Unauthorized

logger = logging.getLogger(__name__)

SESSION_COOKIE = "access_token"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

bearer_scheme = HTTPBearer(auto_error=False)


# ---------------------------------------------------
# SESSION VALUE OBJECT
# ---------------------------------------------------

@dataclass(frozen=True)
class SessionUser:
    """
    The authenticated caller, built once per request from the session token.
    """
    id: str
    role: Role
    is_active: bool = True
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ---------------------------------------------------
# PASSWORDS
# ---------------------------------------------------

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        # malformed or unknown hash format
        return False


def unusable_password() -> str:
    """Hash of a random secret nobody knows; for accounts bootstrapped from a session."""
    return hash_password(secrets.token_urlsafe(32))


# ---------------------------------------------------
# TOKENS
# ---------------------------------------------------

def create_access_token(user, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign a session token for a User row (or SessionUser).
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS))
    role = user.role.value if isinstance(user.role, Role) else str(user.role)
    claims = {
        "sub": str(user.id),
        "role": role,
        "email": user.email,
        "name": user.name,
        "is_active": bool(user.is_active),
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Validates signature and expiry. Returns decoded JWT payload.
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise Unauthorized()


def session_from_claims(payload: dict) -> SessionUser:
    sub = payload.get("sub")
    if not sub:
        raise Unauthorized()
    try:
        role = Role(payload.get("role", Role.USER.value))
    except ValueError:
        raise Unauthorized()
    return SessionUser(
        id=str(sub),
        role=role,
        is_active=bool(payload.get("is_active", True)),
        email=payload.get("email"),
        name=payload.get("name"),
    )


# ---------------------------------------------------
# EXTRACT TOKEN (COOKIE OR HEADER)
# ---------------------------------------------------

def extract_token(request: Request, creds: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    """
    Priority:
    1. Cookie: access_token
    2. Authorization Bearer token
    """
    cookie_token = request.cookies.get(SESSION_COOKIE)
    if cookie_token:
        return cookie_token
    if creds and creds.credentials:
        return creds.credentials
    return None


def resolve_session(request: Request, creds: Optional[HTTPAuthorizationCredentials] = None) -> Optional[SessionUser]:
    """
    Non-raising variant used by the HTML pages: None when there is no valid session.
    """
    token = extract_token(request, creds)
    if not token:
        return None
    try:
        return session_from_claims(decode_token(token))
    except Unauthorized:
        return None


# ---------------------------------------------------
# DEPENDENCIES
# ---------------------------------------------------

def get_session_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> SessionUser:
    """
    Auth flow:
        Cookie/Bearer -> decode token -> SessionUser -> stored row still active

    A token whose subject has no row yet is accepted on its claims; the
    row is created on first webhook creation.
    """
    token = extract_token(request, creds)
    if not token:
        raise Unauthorized()

    user = session_from_claims(decode_token(token))

    if not user.is_active:
        raise Forbidden("Account is inactive or suspended")

    row = db.get(User, user.id)
    if row is not None and not row.is_active:
        raise Forbidden("Account is inactive or suspended")

    return user


def get_current_admin(user: SessionUser = Depends(get_session_user)) -> SessionUser:
    if not user.is_admin:
        raise Forbidden("Forbidden - Admin access required")
    return user
