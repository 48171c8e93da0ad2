# dailysync/app/routers/users.py

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from dailysync.app.db import get_db
from dailysync.app.models import User
from dailysync.app.repositories.user_repository import UserRepository
from dailysync.app.schemas.user import UserCreate, UserOut
from dailysync.app.services.access import ensure_owner
from dailysync.app.services.auth_service import (
    SessionUser,
    get_current_admin,
    get_session_user,
    hash_password,
)
from dailysync.app.utils.errors import Conflict, NotFound, ValidationFailed
from dailysync.app.utils.responses import build_pagination, page_params, success, validate_body

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["Users"])


def register_user(db: Session, data: UserCreate) -> User:
    """
    Create an account. Raises Conflict when the email is taken.
    Shared by the API and the dashboard's "Add User" form.
    """
    repo = UserRepository(db)
    if repo.get_by_email(data.email):
        raise Conflict("A user with this email already exists")

    user = repo.create({
        "name": data.name.strip(),
        "email": data.email.lower(),
        "hashed_password": hash_password(data.password),
        "role": data.role,
        "is_active": data.is_active,
    })
    logger.info("User %s created role=%s", user.id, user.role.value)
    return user


def deactivate_user(db: Session, actor: SessionUser, user_id: str) -> User:
    """
    Soft delete. An admin can't deactivate their own account.
    """
    if user_id == actor.id:
        raise ValidationFailed("You cannot deactivate your own account")

    repo = UserRepository(db)
    user = repo.get(user_id)
    if not user:
        raise NotFound("User not found")

    user = repo.update(user, {"is_active": False})
    logger.info("User %s deactivated by %s", user.id, actor.id)
    return user


# ---------------------------------------
# GET /api/users (admin)
# ---------------------------------------
@router.get("")
def list_users(
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    search: str = Query(""),
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    page, limit, offset = page_params(page, limit)
    users, total = UserRepository(db).search(search.strip(), offset, limit)
    return success({
        "users": [UserOut.model_validate(u).dump() for u in users],
        "pagination": build_pagination(page, limit, total),
    })


# ---------------------------------------
# POST /api/users (admin)
# ---------------------------------------
@router.post("")
def create_user(
    body: dict = Body(...),
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    data = validate_body(UserCreate, body, "Invalid user data")
    user = register_user(db, data)
    return success(UserOut.model_validate(user).dump(), message="User created successfully", status_code=201)


# ---------------------------------------
# GET /api/users/{id} (admin or self)
# ---------------------------------------
@router.get("/{user_id}")
def get_user(
    user_id: str,
    user: SessionUser = Depends(get_session_user),
    db: Session = Depends(get_db),
):
    ensure_owner(user, user_id)
    row = UserRepository(db).get(user_id)
    if not row:
        raise NotFound("User not found")
    return success(UserOut.model_validate(row).dump())


# ---------------------------------------
# DELETE /api/users/{id} (admin, soft)
# ---------------------------------------
@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    admin: SessionUser = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    user = deactivate_user(db, admin, user_id)
    return success(UserOut.model_validate(user).dump(), message="User deactivated successfully")
