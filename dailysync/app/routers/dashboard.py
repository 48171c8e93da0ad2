# dailysync/app/routers/dashboard.py
"""
Server-rendered dashboard pages (cookie session).

User management page state:

    table:  loaded | error (with a "Try Again" link)
    modal:  closed -> open (?modal=open)
            submit -> closed + notice on success
                   -> open with the draft kept on error
"""

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dailysync.app.config import settings
from dailysync.app.db import get_db
from dailysync.app.models import Role, User
from dailysync.app.repositories.user_repository import UserRepository
from dailysync.app.routers.auth import authenticate
from dailysync.app.routers.users import deactivate_user, register_user
from dailysync.app.schemas.user import UserCreate
from dailysync.app.services.analytics import dashboard_summary
from dailysync.app.services.auth_service import (
    SESSION_COOKIE,
    SessionUser,
    create_access_token,
    resolve_session,
)
from dailysync.app.utils.errors import ApiError
from dailysync.app.utils.responses import build_pagination, page_params

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Dashboard"], include_in_schema=False)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

REQUIRED_FIELDS_MESSAGE = "Please fill in all required fields."
LOAD_ERROR_MESSAGE = "Failed to load users"
USERS_PAGE_SIZE = 10


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def _page_user(request: Request, db: Optional[Session] = None) -> Optional[SessionUser]:
    user = resolve_session(request)
    if user is None or not user.is_active:
        return None
    if db is not None:
        row = db.get(User, user.id)
        if row is not None and not row.is_active:
            return None
    return user


def _users_url(**params) -> str:
    query = urlencode({k: v for k, v in params.items() if v})
    return "/dashboard/users" + (f"?{query}" if query else "")


# ---------------------------------------
# Login / logout
# ---------------------------------------
@router.get("/login")
def login_page(request: Request):
    if _page_user(request):
        return _redirect("/dashboard")
    return templates.TemplateResponse(request, "login.html", {"error": None, "email": ""})


@router.post("/login")
def login_submit(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    db: Session = Depends(get_db),
):
    if not email.strip() or not password:
        return templates.TemplateResponse(
            request, "login.html", {"error": REQUIRED_FIELDS_MESSAGE, "email": email}, status_code=400,
        )
    try:
        user = authenticate(db, email.strip(), password)
    except ApiError as exc:
        return templates.TemplateResponse(
            request, "login.html", {"error": exc.detail, "email": email}, status_code=exc.status_code,
        )

    response = _redirect("/dashboard")
    response.set_cookie(
        SESSION_COOKIE,
        create_access_token(user),
        max_age=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        httponly=True,
        samesite="lax",
    )
    return response


@router.post("/logout")
def logout():
    response = _redirect("/login")
    response.delete_cookie(SESSION_COOKIE)
    return response


# ---------------------------------------
# Overview
# ---------------------------------------
@router.get("/dashboard")
def dashboard_page(request: Request, db: Session = Depends(get_db)):
    user = _page_user(request, db)
    if not user:
        return _redirect("/login")

    summary = dashboard_summary(db, user)
    return templates.TemplateResponse(
        request, "dashboard.html", {"user": user, "summary": summary},
    )


# ---------------------------------------
# User management
# ---------------------------------------
def _user_stats(repo: UserRepository) -> dict:
    return {
        "total": repo.count(),
        "active": repo.count(User.is_active.is_(True)),
        "admins": repo.count(User.role == Role.ADMIN),
        "agents": repo.count(User.role == Role.USER),
    }


def _render_users_page(
    request: Request,
    db: Session,
    admin: SessionUser,
    *,
    page: int = 1,
    search: str = "",
    modal_open: bool = False,
    draft: Optional[dict] = None,
    form_error: Optional[str] = None,
    notice: Optional[str] = None,
    status_code: int = 200,
):
    repo = UserRepository(db)
    page, limit, offset = page_params(page, USERS_PAGE_SIZE)

    context = {
        "user": admin,
        "search": search,
        "notice": notice,
        "modal_open": modal_open,
        "draft": draft or {"name": "", "email": "", "role": Role.USER.value},
        "form_error": form_error,
        "roles": [r.value for r in Role],
        "load_error": None,
        "users": [],
        "stats": None,
        "pagination": build_pagination(page, limit, 0),
    }

    try:
        users, total = repo.search(search, offset, limit)
        context["users"] = users
        context["stats"] = _user_stats(repo)
        context["pagination"] = build_pagination(page, limit, total)
    except SQLAlchemyError:
        logger.exception("User list query failed")
        db.rollback()
        context["load_error"] = LOAD_ERROR_MESSAGE

    context["retry_url"] = _users_url(page=page, search=search)
    context["prev_url"] = _users_url(page=page - 1, search=search)
    context["next_url"] = _users_url(page=page + 1, search=search)
    context["open_modal_url"] = _users_url(page=page, search=search, modal="open")
    context["close_modal_url"] = context["retry_url"]

    return templates.TemplateResponse(request, "users.html", context, status_code=status_code)


@router.get("/dashboard/users")
def users_page(
    request: Request,
    page: int = Query(1),
    search: str = Query(""),
    modal: str = Query(""),
    notice: str = Query(""),
    db: Session = Depends(get_db),
):
    user = _page_user(request, db)
    if not user:
        return _redirect("/login")
    if not user.is_admin:
        return _redirect("/dashboard")

    return _render_users_page(
        request, db, user,
        page=page,
        search=search.strip(),
        modal_open=(modal == "open"),
        notice=notice or None,
    )


@router.post("/dashboard/users")
def users_create(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    password: str = Form(""),
    role: str = Form(Role.USER.value),
    db: Session = Depends(get_db),
):
    user = _page_user(request, db)
    if not user:
        return _redirect("/login")
    if not user.is_admin:
        return _redirect("/dashboard")

    # password is never echoed back into the form
    draft = {"name": name, "email": email, "role": role}

    def reopen(message: str, status_code: int):
        return _render_users_page(
            request, db, user,
            modal_open=True, draft=draft, form_error=message, status_code=status_code,
        )

    if not name.strip() or not email.strip() or not password:
        return reopen(REQUIRED_FIELDS_MESSAGE, 400)

    try:
        data = UserCreate(name=name.strip(), email=email.strip(), password=password, role=role)
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first.get("loc", ()))
        return reopen(f"{field}: {first.get('msg')}" if field else first.get("msg"), 400)

    try:
        register_user(db, data)
    except ApiError as exc:
        return reopen(exc.detail, exc.status_code)

    return _redirect(_users_url(notice="User created successfully"))


@router.post("/dashboard/users/{user_id}/deactivate")
def users_deactivate(request: Request, user_id: str, db: Session = Depends(get_db)):
    user = _page_user(request, db)
    if not user:
        return _redirect("/login")
    if not user.is_admin:
        return _redirect("/dashboard")

    try:
        deactivate_user(db, user, user_id)
    except ApiError as exc:
        return _redirect(_users_url(notice=exc.detail))

    return _redirect(_users_url(notice="User deactivated successfully"))
