"""
app/api/routers/bulk_upload.py

Roster bulk-upload HTTP endpoints.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, UploadFile, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_csv_upload
from app.domain.bulk_import import ImportKind
from app.schemas.bulk_upload import (
    BulkUploadBatchResponse,
    BulkUploadHistoryResponse,
    BulkUploadResultsResponse,
    BulkUploadRowErrorResponse,
    BulkUploadRowResultResponse,
    BulkUploadSummaryResponse,
    InvitationResentResponse,
)
from app.services.bulk_import_service import (
    BulkImportPersistenceError,
    BulkImportService,
    BulkImportStructuralError,
    UploadContextError,
    get_bulk_import_service,
)
from app.services.import_profiles import get_import_profile
from app.services.invitation_service import (
    IdentityNotFoundError,
    InvitationDispatchError,
    InvitationNotPendingError,
    InvitationService,
    get_invitation_service,
)
from app.services.upload_report_service import (
    UploadNotFoundError,
    UploadReportService,
    get_upload_report_service,
)
from db.models.upload_batch import UploadBatch
from db.models.user_account import UserRole
from db.session import get_db

router = APIRouter(prefix="/admin", tags=["bulk-upload"])


@router.post("/students/bulk-upload", response_model=BulkUploadSummaryResponse)
def upload_students(
    college_id: UUID = Query(..., description="College receiving the new students"),
    uploaded_by: UUID = Query(..., description="Administrator submitting the file"),
    file: UploadFile = Depends(get_csv_upload),
    db: Session = Depends(get_db),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> BulkUploadSummaryResponse:
    """
    Import one student roster CSV.
    """

    return _run_import(
        import_service=import_service,
        db=db,
        entity_type=ImportKind.STUDENT,
        college_id=college_id,
        uploaded_by=uploaded_by,
        file=file,
    )


@router.post("/trainers/bulk-upload", response_model=BulkUploadSummaryResponse)
def upload_trainers(
    college_id: UUID = Query(..., description="College receiving the new trainers"),
    uploaded_by: UUID = Query(..., description="Administrator submitting the file"),
    file: UploadFile = Depends(get_csv_upload),
    db: Session = Depends(get_db),
    import_service: BulkImportService = Depends(get_bulk_import_service),
) -> BulkUploadSummaryResponse:
    """
    Import one trainer roster CSV.
    """

    return _run_import(
        import_service=import_service,
        db=db,
        entity_type=ImportKind.TRAINER,
        college_id=college_id,
        uploaded_by=uploaded_by,
        file=file,
    )


@router.get("/students/bulk-upload/template")
def download_student_template() -> Response:
    return _template_response(ImportKind.STUDENT)


@router.get("/trainers/bulk-upload/template")
def download_trainer_template() -> Response:
    return _template_response(ImportKind.TRAINER)


@router.get("/bulk-uploads", response_model=BulkUploadHistoryResponse)
def list_bulk_uploads(
    college_id: UUID = Query(..., description="College whose uploads are listed"),
    entity_type: str | None = Query(default=None, description="Optional STUDENT/TRAINER filter"),
    status_filter: str | None = Query(default=None, alias="status", description="Optional batch status filter"),
    limit: int = Query(default=100, ge=1, le=100, description="Max uploads returned"),
    offset: int = Query(default=0, ge=0, description="Uploads to skip, newest first"),
    db: Session = Depends(get_db),
    report_service: UploadReportService = Depends(get_upload_report_service),
) -> BulkUploadHistoryResponse:
    batches = report_service.list_uploads(
        db=db,
        college_id=college_id,
        entity_type=entity_type,
        status=status_filter,
        limit=limit,
        offset=offset,
    )
    total = report_service.count_uploads(
        db=db,
        college_id=college_id,
        entity_type=entity_type,
        status=status_filter,
    )
    return BulkUploadHistoryResponse(
        total=total,
        limit=limit,
        offset=offset,
        uploads=[_to_batch_response(batch) for batch in batches],
    )


@router.get("/bulk-uploads/{upload_id}", response_model=BulkUploadBatchResponse)
def get_bulk_upload(
    upload_id: UUID = Path(..., description="Upload batch ID"),
    db: Session = Depends(get_db),
    report_service: UploadReportService = Depends(get_upload_report_service),
) -> BulkUploadBatchResponse:
    try:
        batch = report_service.get_upload(db=db, upload_id=upload_id)
    except UploadNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_batch_response(batch)


@router.get("/bulk-uploads/{upload_id}/results", response_model=BulkUploadResultsResponse)
def get_bulk_upload_results(
    upload_id: UUID = Path(..., description="Upload batch ID"),
    status_filter: str | None = Query(default=None, alias="status", description="Optional row status filter"),
    db: Session = Depends(get_db),
    report_service: UploadReportService = Depends(get_upload_report_service),
) -> BulkUploadResultsResponse:
    """
    Per-row audit trail for one upload, ordered by row number.
    """

    try:
        results = report_service.list_row_results(db=db, upload_id=upload_id, status=status_filter)
        counts = report_service.count_row_results(db=db, upload_id=upload_id)
    except UploadNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return BulkUploadResultsResponse(
        upload_id=upload_id,
        counts=counts,
        results=[
            BulkUploadRowResultResponse(
                row_number=result.row_number,
                status=result.status,
                entity_id=result.entity_id,
                user_id=result.user_id,
                error_message=result.error_message,
                row_data=result.row_data,
            )
            for result in results
        ],
    )


@router.post("/students/{user_id}/resend-invitation", response_model=InvitationResentResponse)
def resend_student_invitation(
    user_id: UUID = Path(..., description="Student account ID"),
    db: Session = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
) -> InvitationResentResponse:
    return _resend(invitation_service=invitation_service, db=db, user_id=user_id, role=UserRole.STUDENT)


@router.post("/trainers/{user_id}/resend-invitation", response_model=InvitationResentResponse)
def resend_trainer_invitation(
    user_id: UUID = Path(..., description="Trainer account ID"),
    db: Session = Depends(get_db),
    invitation_service: InvitationService = Depends(get_invitation_service),
) -> InvitationResentResponse:
    return _resend(invitation_service=invitation_service, db=db, user_id=user_id, role=UserRole.TRAINER)


def _run_import(
    *,
    import_service: BulkImportService,
    db: Session,
    entity_type: str,
    college_id: UUID,
    uploaded_by: UUID,
    file: UploadFile,
) -> BulkUploadSummaryResponse:
    try:
        summary = import_service.import_upload(
            db=db,
            entity_type=entity_type,
            college_id=college_id,
            uploaded_by_user_id=uploaded_by,
            upload_file=file,
        )
    except UploadContextError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    except BulkImportStructuralError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    except BulkImportPersistenceError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to persist bulk upload results.",
        ) from exc
    finally:
        file.file.close()

    return BulkUploadSummaryResponse(
        upload_id=summary.upload_id,
        entity_type=summary.entity_type,
        file_name=summary.file_name,
        status=summary.status,
        total_rows=summary.total_rows,
        successful_rows=summary.successful_rows,
        failed_rows=summary.failed_rows,
        errors=[
            BulkUploadRowErrorResponse(
                row_number=error.row_number,
                message=error.message,
                row_data=error.row_data,
            )
            for error in summary.errors
        ],
    )


def _resend(
    *,
    invitation_service: InvitationService,
    db: Session,
    user_id: UUID,
    role: str,
) -> InvitationResentResponse:
    try:
        sent_at = invitation_service.resend_invitation(db=db, user_id=user_id, role=role)
    except IdentityNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvitationNotPendingError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InvitationDispatchError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return InvitationResentResponse(user_id=user_id, invitation_sent_at=sent_at)


def _template_response(entity_type: str) -> Response:
    profile = get_import_profile(entity_type)
    return Response(
        content=profile.template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{profile.template_file_name()}"'},
    )


def _to_batch_response(batch: UploadBatch) -> BulkUploadBatchResponse:
    return BulkUploadBatchResponse(
        upload_id=batch.id,
        college_id=batch.college_id,
        uploaded_by_user_id=batch.uploaded_by_user_id,
        entity_type=batch.entity_type,
        file_name=batch.file_name,
        status=batch.status,
        total_rows=batch.total_rows,
        successful_rows=batch.successful_rows,
        failed_rows=batch.failed_rows,
        error_report=batch.error_report,
        created_at=batch.created_at,
        completed_at=batch.completed_at,
    )
