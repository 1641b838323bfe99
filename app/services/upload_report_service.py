"""
app/services/upload_report_service.py

Read-only access to upload history and per-row outcomes.
"""

from __future__ import annotations

import uuid
from functools import lru_cache

from sqlalchemy.orm import Session

from db.models.upload_batch import UploadBatch
from db.models.upload_row_result import RowResultStatus, UploadRowResult
from db.repositories.upload_batch_repository import UploadBatchRepository
from db.repositories.upload_row_result_repository import UploadRowResultRepository

ROW_STATUSES: tuple[str, ...] = (
    RowResultStatus.SUCCESS,
    RowResultStatus.FAILED,
    RowResultStatus.SKIPPED,
)


class UploadNotFoundError(LookupError):
    """
    Raised when an upload id does not resolve to a batch.
    """


class UploadReportService:
    def __init__(self, *, max_history: int = 100) -> None:
        self._max_history = max(1, max_history)

    def list_uploads(
        self,
        *,
        db: Session,
        college_id: uuid.UUID,
        entity_type: str | None = None,
        status: str | None = None,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[UploadBatch]:
        """
        One page of upload history for a college, newest first.

        limit is clamped to max_history; use offset with count_uploads to
        walk the full history.
        """

        effective_limit = min(limit or self._max_history, self._max_history)
        return UploadBatchRepository(db).list_for_college(
            college_id=college_id,
            entity_type=_normalize(entity_type),
            status=_normalize(status),
            limit=effective_limit,
            offset=max(0, offset),
        )

    def count_uploads(
        self,
        *,
        db: Session,
        college_id: uuid.UUID,
        entity_type: str | None = None,
        status: str | None = None,
    ) -> int:
        return UploadBatchRepository(db).count_for_college(
            college_id=college_id,
            entity_type=_normalize(entity_type),
            status=_normalize(status),
        )

    def get_upload(self, *, db: Session, upload_id: uuid.UUID) -> UploadBatch:
        batch = UploadBatchRepository(db).get_batch(upload_id)
        if batch is None:
            raise UploadNotFoundError(f"Upload not found: {upload_id}")
        return batch

    def list_row_results(
        self,
        *,
        db: Session,
        upload_id: uuid.UUID,
        status: str | None = None,
    ) -> list[UploadRowResult]:
        """
        Row outcomes for one batch ordered by row number.

        Raises:
            UploadNotFoundError: unknown upload id.
            ValueError:          status is not a known row status.
        """

        normalized_status = _normalize(status)
        if normalized_status and normalized_status not in ROW_STATUSES:
            allowed = ", ".join(ROW_STATUSES)
            raise ValueError(f"Unsupported row status '{status}'. Allowed values: {allowed}.")

        batch = self.get_upload(db=db, upload_id=upload_id)
        return UploadRowResultRepository(db).list_for_batch(batch.id, status=normalized_status)

    def count_row_results(self, *, db: Session, upload_id: uuid.UUID) -> dict[str, int]:
        batch = self.get_upload(db=db, upload_id=upload_id)
        counts = UploadRowResultRepository(db).count_by_status(batch.id)
        return {status: counts.get(status, 0) for status in ROW_STATUSES}


def _normalize(value: str | None) -> str | None:
    return value.strip().upper() if value else None


@lru_cache(maxsize=1)
def get_upload_report_service() -> UploadReportService:
    return UploadReportService()
