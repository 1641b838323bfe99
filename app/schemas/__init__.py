"""
app/schemas package marker.
"""

from app.schemas.bulk_upload import (
    BulkUploadBatchResponse,
    BulkUploadHistoryResponse,
    BulkUploadResultsResponse,
    BulkUploadRowErrorResponse,
    BulkUploadRowResultResponse,
    BulkUploadSummaryResponse,
    InvitationResentResponse,
)

__all__ = [
    "BulkUploadBatchResponse",
    "BulkUploadHistoryResponse",
    "BulkUploadResultsResponse",
    "BulkUploadRowErrorResponse",
    "BulkUploadRowResultResponse",
    "BulkUploadSummaryResponse",
    "InvitationResentResponse",
]
