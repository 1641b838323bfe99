"""
Repository for upload batch lifecycle persistence and history lookup.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from db.models.upload_batch import UploadBatch, UploadBatchStatus


class UploadBatchRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_batch(
        self,
        *,
        college_id: uuid.UUID,
        uploaded_by_user_id: uuid.UUID,
        entity_type: str,
        file_name: str,
    ) -> UploadBatch:
        batch = UploadBatch(
            college_id=college_id,
            uploaded_by_user_id=uploaded_by_user_id,
            entity_type=entity_type,
            file_name=file_name,
            total_rows=0,
            successful_rows=0,
            failed_rows=0,
            status=UploadBatchStatus.PROCESSING,
        )
        self._session.add(batch)
        self._session.flush()
        return batch

    def get_batch(self, batch_id: uuid.UUID) -> UploadBatch | None:
        return self._session.get(UploadBatch, batch_id)

    def list_for_college(
        self,
        *,
        college_id: uuid.UUID,
        entity_type: str | None = None,
        status: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> list[UploadBatch]:
        stmt: Select[tuple[UploadBatch]] = self._filter_for_college(
            select(UploadBatch),
            college_id=college_id,
            entity_type=entity_type,
            status=status,
        )
        stmt = (
            stmt.order_by(UploadBatch.created_at.desc())
            .offset(max(0, offset))
            .limit(max(1, limit))
        )
        return list(self._session.scalars(stmt).all())

    def count_for_college(
        self,
        *,
        college_id: uuid.UUID,
        entity_type: str | None = None,
        status: str | None = None,
    ) -> int:
        stmt = self._filter_for_college(
            select(func.count()).select_from(UploadBatch),
            college_id=college_id,
            entity_type=entity_type,
            status=status,
        )
        return int(self._session.scalar(stmt) or 0)

    @staticmethod
    def _filter_for_college(
        stmt: Select,
        *,
        college_id: uuid.UUID,
        entity_type: str | None,
        status: str | None,
    ) -> Select:
        stmt = stmt.where(UploadBatch.college_id == college_id)
        if entity_type:
            stmt = stmt.where(UploadBatch.entity_type == entity_type)
        if status:
            stmt = stmt.where(UploadBatch.status == status)
        return stmt

    def set_total_rows(self, batch: UploadBatch, total_rows: int) -> UploadBatch:
        batch.total_rows = total_rows
        return batch

    def record_success(self, batch: UploadBatch) -> UploadBatch:
        batch.successful_rows += 1
        return batch

    def record_failure(self, batch: UploadBatch) -> UploadBatch:
        batch.failed_rows += 1
        return batch

    def mark_completed(self, batch: UploadBatch) -> UploadBatch:
        batch.status = UploadBatchStatus.COMPLETED
        batch.completed_at = datetime.now(timezone.utc)
        batch.error_report = None
        return batch

    def mark_failed(self, batch: UploadBatch, *, error_report: str) -> UploadBatch:
        batch.status = UploadBatchStatus.FAILED
        batch.completed_at = datetime.now(timezone.utc)
        batch.error_report = error_report
        return batch
