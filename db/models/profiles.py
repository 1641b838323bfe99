"""
db/models/profiles.py

Role-specific profiles linked one-to-one with a UserAccount.
"""

from __future__ import annotations

import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin
from db.models.user_account import UserAccount


class StudentProfile(Base, TimestampMixin):
    __tablename__ = "students"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    college_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("colleges.id", ondelete="CASCADE"),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    roll_number: Mapped[str] = mapped_column(String(50), nullable=False)
    degree: Mapped[str | None] = mapped_column(String(100), nullable=True)
    branch: Mapped[str | None] = mapped_column(String(100), nullable=True)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    user: Mapped[UserAccount] = relationship(UserAccount)

    __table_args__ = (
        UniqueConstraint("college_id", "roll_number", name="uq_students_college_roll_number"),
        Index("ix_students_college_id", "college_id"),
    )

    def __repr__(self) -> str:
        return f"<StudentProfile id={self.id} roll_number={self.roll_number!r}>"


class TrainerProfile(Base, TimestampMixin):
    __tablename__ = "trainers"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    college_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("colleges.id", ondelete="CASCADE"),
        nullable=False,
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str | None] = mapped_column(String(100), nullable=True)
    specialization: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[UserAccount] = relationship(UserAccount)

    __table_args__ = (Index("ix_trainers_college_id", "college_id"),)

    def __repr__(self) -> str:
        return f"<TrainerProfile id={self.id} department={self.department!r}>"
