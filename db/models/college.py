"""
db/models/college.py

College model — the tenant. Identities, profiles, and upload batches are all
scoped to one college.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin

if TYPE_CHECKING:
    from db.models.upload_batch import UploadBatch


class College(Base, TimestampMixin):
    """
    Represents one institution using the platform.

    is_active soft-disables a tenant; inactive colleges cannot receive
    bulk uploads.
    """

    __tablename__ = "colleges"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    domain: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        unique=True,
        comment="Optional college mail domain (e.g. mit.edu)",
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    upload_batches: Mapped[list["UploadBatch"]] = relationship(
        "UploadBatch",
        back_populates="college",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (Index("ix_colleges_is_active", "is_active"),)

    def __repr__(self) -> str:
        return f"<College id={self.id} name={self.name!r} domain={self.domain!r}>"
