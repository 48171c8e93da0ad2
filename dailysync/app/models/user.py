from sqlalchemy import Boolean, Enum, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dailysync.app.db import Base
from dailysync.app.models.base import IdMixin, TimestampMixin
from dailysync.app.models.enums import Role


class User(Base, IdMixin, TimestampMixin):
    """
    Dashboard account.

    Regular users (role USER) submit daily and meeting reports and only ever
    see their own rows; admins see everything and manage webhooks and users.
    Accounts are never hard-deleted, only deactivated.
    """

    __tablename__ = "users"

    # -----------------------------
    # Identity
    # -----------------------------
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255), unique=True, index=True, nullable=False
    )

    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    # -----------------------------
    # Access
    # -----------------------------
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=20),
        nullable=False,
        default=Role.USER,
        index=True
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # -----------------------------
    # Relationships
    # -----------------------------
    daily_reports = relationship(
        "DailyReport",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    meeting_reports = relationship(
        "MeetingReport",
        back_populates="user",
        cascade="all, delete-orphan"
    )

    webhooks = relationship(
        "IncomingWebhook",
        back_populates="creator"
    )

    __table_args__ = (
        Index("idx_user_role_active", "role", "is_active"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def __repr__(self):
        return f"<User id={self.id} email='{self.email}' role={self.role} active={self.is_active}>"
