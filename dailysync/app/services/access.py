# dailysync/app/services/access.py
"""
Row-level access rules shared by every query site.

Non-admin callers are restricted to rows they own; admins see everything.
"""

from sqlalchemy import true
from sqlalchemy.sql.elements import ColumnElement

from dailysync.app.services.auth_service import SessionUser
from dailysync.app.utils.errors import Forbidden


def owner_clause(user: SessionUser, owner_column) -> ColumnElement[bool]:
    """
    WHERE predicate scoping ``owner_column`` to the caller.

        q.filter(owner_clause(user, DailyReport.user_id))
    """
    if user.is_admin:
        return true()
    return owner_column == user.id


def can_access(user: SessionUser, owner_id: str | None) -> bool:
    return user.is_admin or owner_id == user.id


def ensure_owner(user: SessionUser, owner_id: str | None) -> None:
    if not can_access(user, owner_id):
        raise Forbidden("Forbidden - Access denied")
