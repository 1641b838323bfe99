"""
app/services package marker.
"""

from app.services.bulk_import_service import (
    BulkImportPersistenceError,
    BulkImportService,
    BulkImportStructuralError,
    UploadContextError,
    get_bulk_import_service,
)
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

__all__ = [
    "BulkImportPersistenceError",
    "BulkImportService",
    "BulkImportStructuralError",
    "UploadContextError",
    "get_bulk_import_service",
    "IdentityNotFoundError",
    "InvitationDispatchError",
    "InvitationNotPendingError",
    "InvitationService",
    "get_invitation_service",
    "UploadNotFoundError",
    "UploadReportService",
    "get_upload_report_service",
]
