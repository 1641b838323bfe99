"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.college import College
from db.models.profiles import StudentProfile, TrainerProfile
from db.models.upload_batch import UploadBatch, UploadBatchStatus
from db.models.upload_row_result import RowResultStatus, UploadRowResult
from db.models.user_account import AccountStatus, UserAccount, UserRole

__all__ = [
    "AccountStatus",
    "College",
    "RowResultStatus",
    "StudentProfile",
    "TrainerProfile",
    "UploadBatch",
    "UploadBatchStatus",
    "UploadRowResult",
    "UserAccount",
    "UserRole",
]
