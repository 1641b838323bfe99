"""
Repository layer exports.
"""

from db.repositories.identity_repository import IdentityRepository, normalize_email
from db.repositories.profile_repository import ProfileRepository
from db.repositories.upload_batch_repository import UploadBatchRepository
from db.repositories.upload_row_result_repository import UploadRowResultRepository

__all__ = [
    "IdentityRepository",
    "ProfileRepository",
    "UploadBatchRepository",
    "UploadRowResultRepository",
    "normalize_email",
]
