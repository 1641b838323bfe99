"""
Repository for per-row bulk upload audit records.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from db.models.upload_row_result import RowResultStatus, UploadRowResult


class UploadRowResultRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def add_success(
        self,
        *,
        upload_batch_id: uuid.UUID,
        row_number: int,
        entity_id: uuid.UUID,
        user_id: uuid.UUID,
        row_data: dict[str, Any] | None,
    ) -> UploadRowResult:
        return self._add(
            UploadRowResult(
                upload_batch_id=upload_batch_id,
                row_number=row_number,
                status=RowResultStatus.SUCCESS,
                entity_id=entity_id,
                user_id=user_id,
                row_data=row_data,
            )
        )

    def add_failure(
        self,
        *,
        upload_batch_id: uuid.UUID,
        row_number: int,
        error_message: str,
        row_data: dict[str, Any] | None,
    ) -> UploadRowResult:
        return self._add(
            UploadRowResult(
                upload_batch_id=upload_batch_id,
                row_number=row_number,
                status=RowResultStatus.FAILED,
                error_message=error_message,
                row_data=row_data,
            )
        )

    def list_for_batch(
        self,
        upload_batch_id: uuid.UUID,
        *,
        status: str | None = None,
    ) -> list[UploadRowResult]:
        stmt: Select[tuple[UploadRowResult]] = select(UploadRowResult).where(
            UploadRowResult.upload_batch_id == upload_batch_id
        )
        if status:
            stmt = stmt.where(UploadRowResult.status == status)
        stmt = stmt.order_by(UploadRowResult.row_number.asc())
        return list(self._session.scalars(stmt).all())

    def count_by_status(self, upload_batch_id: uuid.UUID) -> dict[str, int]:
        stmt = (
            select(UploadRowResult.status, func.count(UploadRowResult.id))
            .where(UploadRowResult.upload_batch_id == upload_batch_id)
            .group_by(UploadRowResult.status)
        )
        return {status: int(count) for status, count in self._session.execute(stmt).all()}

    def _add(self, result: UploadRowResult) -> UploadRowResult:
        self._session.add(result)
        self._session.flush()
        return result
