"""
db/models/user_account.py

User account model — the authenticatable identity (email + credential),
kept separate from the role-specific student/trainer profile.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, TimestampMixin


class UserRole:
    SYSTEM_ADMIN = "SYSTEM_ADMIN"
    COLLEGE_ADMIN = "COLLEGE_ADMIN"
    TRAINER = "TRAINER"
    STUDENT = "STUDENT"


class AccountStatus:
    """Account lifecycle: PENDING_SETUP until the temporary password is changed."""

    PENDING_SETUP = "PENDING_SETUP"
    ACTIVE = "ACTIVE"
    INCOMPLETE = "INCOMPLETE"
    SUSPENDED = "SUSPENDED"


class UserAccount(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    college_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("colleges.id", ondelete="SET NULL"),
        nullable=True,
        comment="Tenant; NULL only for SYSTEM_ADMIN",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash, never plain text",
    )
    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )
    must_change_password: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    account_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountStatus.ACTIVE,
    )
    invitation_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    first_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index("ix_users_college_id", "college_id"),
        Index("ix_users_account_status", "account_status"),
        Index("ix_users_college_role", "college_id", "role"),
    )

    @property
    def is_pending_setup(self) -> bool:
        return self.account_status == AccountStatus.PENDING_SETUP

    def __repr__(self) -> str:
        return (
            f"<UserAccount id={self.id} email={self.email!r} "
            f"role={self.role!r} status={self.account_status!r}>"
        )
