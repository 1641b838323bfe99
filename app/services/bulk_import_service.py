"""
app/services/bulk_import_service.py

Orchestrates one roster bulk upload end to end.

Flow:

    1. Resolve college + uploader, open the UploadBatch (PROCESSING), commit.
    2. Format-validate and parse the whole file. A structural problem marks
       the batch FAILED and is raised to the caller; no row is touched.
    3. Process rows sequentially in file order. Each row is its own unit of
       work: identity + profile + SUCCESS result + counter are committed
       together, or rolled back and replaced by a FAILED result + counter.
    4. Mark the batch COMPLETED and return the summary.

Committing per row is what lets earlier successes survive later failures.
Row-level problems never propagate; they come back as summary data.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from functools import lru_cache

from fastapi import UploadFile
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_bulk_import_settings
from app.domain.bulk_import import ImportSummary, ParsedRow, RosterRecord, RowError
from app.services.csv_row_parser import CSVRowParser
from app.services.import_profiles import ImportProfile, RowRejectedError, get_import_profile
from app.services.notification_service import NotificationSender, get_notification_sender
from app.services.password_service import hash_password
from app.validators.csv_format_validator import CSVFormatError, CSVFormatValidator
from db.models.upload_batch import UploadBatch
from db.models.user_account import UserAccount
from db.repositories.identity_repository import IdentityRepository
from db.repositories.profile_repository import ProfileRepository
from db.repositories.upload_batch_repository import UploadBatchRepository
from db.repositories.upload_row_result_repository import UploadRowResultRepository

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class UploadContextError(LookupError):
    """
    Raised when the target college or the uploading user cannot be resolved.
    No batch is created in that case.
    """


class BulkImportStructuralError(ValueError):
    """
    Raised when the file itself is unusable. The batch is already FAILED.
    """

    def __init__(self, *, upload_id: uuid.UUID, message: str) -> None:
        super().__init__(message)
        self.upload_id = upload_id

    def to_dict(self) -> dict[str, str]:
        return {"message": str(self), "upload_id": str(self.upload_id)}


class BulkImportPersistenceError(RuntimeError):
    """
    Raised when batch bookkeeping cannot be written.
    """


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class BulkImportService:
    """
    Coordinates format validation, row parsing, identity creation, and the
    per-row audit trail.
    """

    def __init__(
        self,
        *,
        max_file_bytes: int,
        max_reported_errors: int,
        log_row_errors: bool,
        notification_sender: NotificationSender | None = None,
        password_hasher: Callable[[str], str] | None = None,
        format_validator: CSVFormatValidator | None = None,
        row_parser: CSVRowParser | None = None,
    ) -> None:
        self._max_file_bytes = max(1, max_file_bytes)
        self._max_reported_errors = max(1, max_reported_errors)
        self._log_row_errors = log_row_errors
        self._notification_sender = notification_sender or get_notification_sender()
        self._password_hasher = password_hasher or hash_password
        self._format_validator = format_validator or CSVFormatValidator(max_file_bytes=self._max_file_bytes)
        self._row_parser = row_parser or CSVRowParser()

    def import_upload(
        self,
        *,
        db: Session,
        entity_type: str,
        college_id: uuid.UUID,
        uploaded_by_user_id: uuid.UUID,
        upload_file: UploadFile,
    ) -> ImportSummary:
        """
        Read a FastAPI upload (bounded by the size limit) and import it.
        """

        raw_file = upload_file.file
        raw_file.seek(0)
        # One byte past the limit is enough for the validator to reject it.
        content = raw_file.read(self._max_file_bytes + 1)
        return self.import_csv(
            db=db,
            entity_type=entity_type,
            college_id=college_id,
            uploaded_by_user_id=uploaded_by_user_id,
            file_name=upload_file.filename or "upload.csv",
            content_type=upload_file.content_type,
            content=content,
        )

    def import_csv(
        self,
        *,
        db: Session,
        entity_type: str,
        college_id: uuid.UUID,
        uploaded_by_user_id: uuid.UUID,
        file_name: str,
        content_type: str | None,
        content: bytes,
    ) -> ImportSummary:
        """
        Import one roster CSV for a college.

        Args:
            db:                   Active SQLAlchemy session (caller owns lifecycle).
                                  Committed once per row.
            entity_type:          "STUDENT" or "TRAINER".
            college_id:           Tenant receiving the new accounts.
            uploaded_by_user_id:  Administrator submitting the file.
            file_name:            Original file name, kept on the batch.
            content_type:         MIME type reported by the client.
            content:              Raw file bytes.

        Raises:
            UploadContextError:          college or uploader unknown.
            BulkImportStructuralError:   file rejected; batch marked FAILED.
            BulkImportPersistenceError:  batch bookkeeping could not be saved.
        """

        profile = get_import_profile(entity_type)
        batch_repository = UploadBatchRepository(db)
        batch = self._open_batch(
            db=db,
            profile=profile,
            college_id=college_id,
            uploaded_by_user_id=uploaded_by_user_id,
            file_name=file_name,
        )
        logger.info(
            "Bulk upload started upload_id=%s entity_type=%s college_id=%s file=%r",
            batch.id,
            profile.entity_type,
            college_id,
            file_name,
        )

        try:
            text = self._format_validator.validate(
                content=content,
                file_name=file_name,
                content_type=content_type,
                required_headers=profile.required_columns,
            )
            parsed_rows = list(self._row_parser.parse(text, profile))
        except CSVFormatError as exc:
            self._fail_batch(db=db, batch=batch, error_report=str(exc))
            raise BulkImportStructuralError(upload_id=batch.id, message=str(exc)) from exc

        batch_repository.set_total_rows(batch, len(parsed_rows))
        self._commit(db, f"Failed to record row count for upload {batch.id}.")

        errors: list[RowError] = []
        for parsed_row in parsed_rows:
            error = self._process_row(db=db, profile=profile, batch=batch, parsed_row=parsed_row)
            if error is not None and len(errors) < self._max_reported_errors:
                errors.append(error)

        batch_repository.mark_completed(batch)
        self._commit(db, f"Failed to complete upload {batch.id}.")
        logger.info(
            "Bulk upload completed upload_id=%s total=%d succeeded=%d failed=%d",
            batch.id,
            batch.total_rows,
            batch.successful_rows,
            batch.failed_rows,
        )

        return ImportSummary(
            upload_id=batch.id,
            entity_type=batch.entity_type,
            file_name=batch.file_name,
            status=batch.status,
            total_rows=batch.total_rows,
            successful_rows=batch.successful_rows,
            failed_rows=batch.failed_rows,
            errors=errors,
        )

    # ------------------------------------------------------------------
    # Batch lifecycle
    # ------------------------------------------------------------------

    def _open_batch(
        self,
        *,
        db: Session,
        profile: ImportProfile,
        college_id: uuid.UUID,
        uploaded_by_user_id: uuid.UUID,
        file_name: str,
    ) -> UploadBatch:
        college = ProfileRepository(db).get_college(college_id)
        if college is None:
            raise UploadContextError(f"College not found: {college_id}")
        if not college.is_active:
            raise UploadContextError(f"College is inactive: {college_id}")

        if IdentityRepository(db).get_user(uploaded_by_user_id) is None:
            raise UploadContextError(f"Uploader not found: {uploaded_by_user_id}")

        batch = UploadBatchRepository(db).create_batch(
            college_id=college_id,
            uploaded_by_user_id=uploaded_by_user_id,
            entity_type=profile.entity_type,
            file_name=file_name[:255],
        )
        self._commit(db, "Failed to create upload batch.")
        return batch

    def _fail_batch(self, *, db: Session, batch: UploadBatch, error_report: str) -> None:
        logger.warning("Bulk upload rejected upload_id=%s: %s", batch.id, error_report)
        UploadBatchRepository(db).mark_failed(batch, error_report=error_report)
        self._commit(db, f"Failed to mark upload {batch.id} as failed.")

    # ------------------------------------------------------------------
    # Row processing
    # ------------------------------------------------------------------

    def _process_row(
        self,
        *,
        db: Session,
        profile: ImportProfile,
        batch: UploadBatch,
        parsed_row: ParsedRow,
    ) -> RowError | None:
        """
        Run one row as its own unit of work. Returns a RowError on failure.
        """

        identities = IdentityRepository(db)
        profiles = ProfileRepository(db)

        try:
            if parsed_row.record is None:
                raise RowRejectedError(parsed_row.error or "Row could not be parsed.")
            record = parsed_row.record

            profile.validate_row(
                record,
                college_id=batch.college_id,
                identities=identities,
                profiles=profiles,
            )
            # Temporary credential is the account email by convention.
            account = identities.create_pending_identity(
                email=record.email,
                password_hash=self._password_hasher(record.email),
                role=profile.role,
                college_id=batch.college_id,
            )
            entity_id = profile.create_profile(
                record,
                account=account,
                college_id=batch.college_id,
                profiles=profiles,
            )
            UploadRowResultRepository(db).add_success(
                upload_batch_id=batch.id,
                row_number=parsed_row.row_number,
                entity_id=entity_id,
                user_id=account.id,
                row_data=parsed_row.row_data,
            )
            UploadBatchRepository(db).record_success(batch)
            db.commit()
        except Exception as exc:  # noqa: BLE001
            db.rollback()
            return self._record_row_failure(
                db=db,
                batch=batch,
                parsed_row=parsed_row,
                message=_describe_row_error(exc),
            )

        self._send_welcome_email(db=db, batch=batch, account=account, record=record)
        return None

    def _record_row_failure(
        self,
        *,
        db: Session,
        batch: UploadBatch,
        parsed_row: ParsedRow,
        message: str,
    ) -> RowError:
        if self._log_row_errors:
            logger.warning(
                "Bulk upload row failed upload_id=%s row=%s message=%s",
                batch.id,
                parsed_row.row_number,
                message,
            )

        UploadRowResultRepository(db).add_failure(
            upload_batch_id=batch.id,
            row_number=parsed_row.row_number,
            error_message=message,
            row_data=parsed_row.row_data,
        )
        UploadBatchRepository(db).record_failure(batch)
        self._commit(db, f"Failed to record row {parsed_row.row_number} of upload {batch.id}.")

        return RowError(
            row_number=parsed_row.row_number,
            message=message,
            row_data=parsed_row.identifying_fields(),
        )

    def _send_welcome_email(
        self,
        *,
        db: Session,
        batch: UploadBatch,
        account: UserAccount,
        record: RosterRecord,
    ) -> None:
        """
        Best-effort: a delivery failure is logged and the row stays SUCCESS.
        """

        try:
            self._notification_sender.send_welcome_email(
                account=account,
                full_name=record.full_name,
                temporary_password=record.email,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "Welcome email failed upload_id=%s email=%s: %s",
                batch.id,
                account.email,
                exc,
            )
            return

        try:
            IdentityRepository(db).mark_invitation_sent(account)
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning(
                "Could not stamp invitation_sent_at user_id=%s: %s",
                account.id,
                exc,
            )

    @staticmethod
    def _commit(db: Session, message: str) -> None:
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise BulkImportPersistenceError(message) from exc


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------


def _describe_row_error(exc: Exception) -> str:
    if isinstance(exc, IntegrityError):
        return "Duplicate record rejected by a uniqueness constraint."
    message = str(exc).strip()
    return message or exc.__class__.__name__


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_bulk_import_service() -> BulkImportService:
    """
    Build and cache the import service with env-driven settings.
    """
    settings = get_bulk_import_settings()
    return BulkImportService(
        max_file_bytes=settings.max_file_bytes,
        max_reported_errors=settings.max_reported_errors,
        log_row_errors=settings.log_row_errors,
    )
