# dailysync/app/routers/auth.py

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from dailysync.app.config import settings
from dailysync.app.db import get_db
from dailysync.app.repositories.user_repository import UserRepository
from dailysync.app.schemas.user import LoginRequest, UserOut
from dailysync.app.services.auth_service import (
    SESSION_COOKIE,
    create_access_token,
    verify_password,
)
from dailysync.app.utils.errors import Forbidden, Unauthorized
from dailysync.app.utils.responses import success, validate_body

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def authenticate(db: Session, email: str, password: str):
    """
    Returns the User for valid credentials. Raises Unauthorized for unknown
    email or wrong password, Forbidden for a deactivated account.
    """
    user = UserRepository(db).get_by_email(email)
    if not user or not verify_password(password, user.hashed_password):
        raise Unauthorized("Invalid email or password")
    if not user.is_active:
        raise Forbidden("Account is inactive or suspended")
    return user


# -----------------------------------------------------
# LOGIN
# -----------------------------------------------------
@router.post("/login")
def login(body: dict = Body(...), db: Session = Depends(get_db)):
    data = validate_body(LoginRequest, body, "Invalid login data")
    user = authenticate(db, data.email, data.password)

    token = create_access_token(user)
    response = success({
        "accessToken": token,
        "tokenType": "bearer",
        "user": UserOut.model_validate(user).dump(),
    })
    response.set_cookie(
        SESSION_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return response
