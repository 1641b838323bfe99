"""
app/schemas/bulk_upload.py

Response schemas for roster bulk-upload endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class BulkUploadRowErrorResponse(BaseModel):
    """
    API response model for one failed roster row.
    """

    row_number: int = Field(..., ge=1)
    message: str
    row_data: dict[str, str | None] = Field(default_factory=dict)


class BulkUploadSummaryResponse(BaseModel):
    """
    API response model for a processed roster upload.
    """

    upload_id: UUID
    entity_type: str
    file_name: str
    status: str
    total_rows: int = Field(..., ge=0)
    successful_rows: int = Field(..., ge=0)
    failed_rows: int = Field(..., ge=0)
    errors: list[BulkUploadRowErrorResponse] = Field(default_factory=list)


class BulkUploadBatchResponse(BaseModel):
    upload_id: UUID
    college_id: UUID
    uploaded_by_user_id: UUID | None = None
    entity_type: str
    file_name: str
    status: str
    total_rows: int
    successful_rows: int
    failed_rows: int
    error_report: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class BulkUploadHistoryResponse(BaseModel):
    total: int = Field(description="Uploads matching the filters across all pages")
    limit: int
    offset: int
    uploads: list[BulkUploadBatchResponse] = Field(default_factory=list)


class BulkUploadRowResultResponse(BaseModel):
    row_number: int
    status: str
    entity_id: UUID | None = None
    user_id: UUID | None = None
    error_message: str | None = None
    row_data: dict[str, Any] | None = None


class BulkUploadResultsResponse(BaseModel):
    upload_id: UUID
    counts: dict[str, int] = Field(default_factory=dict)
    results: list[BulkUploadRowResultResponse] = Field(default_factory=list)


class InvitationResentResponse(BaseModel):
    user_id: UUID
    invitation_sent_at: datetime
