"""
db/models/upload_row_result.py

Per-row audit record of one bulk-upload row's outcome.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, CreatedAtMixin, JSONType

if TYPE_CHECKING:
    from db.models.upload_batch import UploadBatch


class RowResultStatus:
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class UploadRowResult(Base, CreatedAtMixin):
    __tablename__ = "bulk_upload_results"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    upload_batch_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("bulk_uploads.id", ondelete="CASCADE"),
        nullable=False,
    )
    row_number: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="1-based data row number, header excluded",
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        comment="SUCCESS, FAILED, SKIPPED",
    )
    entity_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        comment="Created student/trainer profile id",
    )
    user_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid,
        nullable=True,
        comment="Created user account id",
    )
    error_message: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    row_data: Mapped[dict[str, Any] | None] = mapped_column(
        JSONType,
        nullable=True,
        comment="Snapshot of the original CSV row for audit",
    )

    upload_batch: Mapped["UploadBatch"] = relationship(
        "UploadBatch",
        back_populates="row_results",
    )

    __table_args__ = (
        UniqueConstraint("upload_batch_id", "row_number", name="uq_bulk_upload_results_row"),
        Index("ix_bulk_upload_results_upload_id", "upload_batch_id"),
        Index("ix_bulk_upload_results_status", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<UploadRowResult upload={self.upload_batch_id} row={self.row_number} "
            f"status={self.status!r}>"
        )
