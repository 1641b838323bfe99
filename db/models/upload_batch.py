"""
db/models/upload_batch.py

Upload batch model — one CSV bulk-upload submission and its rollup counts.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin

if TYPE_CHECKING:
    from db.models.college import College
    from db.models.upload_row_result import UploadRowResult


class UploadBatchStatus:
    """Valid status transitions: PROCESSING → COMPLETED | FAILED."""

    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class UploadBatch(Base, CreatedAtMixin):
    """
    Represents one uploaded roster file.

    Counters are advanced row by row in the same commit as the row result,
    so an interrupted import still reports what it actually persisted.
    error_report holds the structural failure message for FAILED batches.
    """

    __tablename__ = "bulk_uploads"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    college_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("colleges.id", ondelete="CASCADE"),
        nullable=False,
    )
    uploaded_by_user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="STUDENT, TRAINER",
    )
    file_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    total_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    successful_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_rows: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=UploadBatchStatus.PROCESSING,
        comment="PROCESSING → COMPLETED | FAILED",
    )
    error_report: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    # ── Relationships ──────────────────────────────────────────────────────────

    college: Mapped["College"] = relationship(
        "College",
        back_populates="upload_batches",
    )

    row_results: Mapped[list["UploadRowResult"]] = relationship(
        "UploadRowResult",
        back_populates="upload_batch",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="UploadRowResult.row_number",
    )

    # ── Indexes ────────────────────────────────────────────────────────────────

    __table_args__ = (
        Index("ix_bulk_uploads_college_id", "college_id"),
        Index("ix_bulk_uploads_status", "status"),
        Index("ix_bulk_uploads_created_at", "created_at"),
        Index("ix_bulk_uploads_college_entity_type", "college_id", "entity_type"),
    )

    def __repr__(self) -> str:
        return (
            f"<UploadBatch id={self.id} entity_type={self.entity_type!r} "
            f"status={self.status!r} rows={self.successful_rows}/{self.total_rows}>"
        )
