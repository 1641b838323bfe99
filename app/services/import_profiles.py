"""
app/services/import_profiles.py

Per-kind behaviour for roster imports.

The orchestrator runs one generic row loop; everything that differs between
student and trainer files (columns, parsing, uniqueness rules, profile
creation, template) lives behind ImportProfile.
"""

from __future__ import annotations

import csv
import io
import uuid
from abc import ABC, abstractmethod
from typing import Any, Mapping

from app.domain.bulk_import import (
    STUDENT_COLUMNS,
    STUDENT_REQUIRED_COLUMNS,
    TRAINER_COLUMNS,
    TRAINER_REQUIRED_COLUMNS,
    FieldError,
    ImportKind,
    ParsedRow,
    RosterRecord,
    StudentRow,
    TrainerRow,
)
from app.services.csv_row_parser import EXTRA_VALUES_KEY
from app.validators.row_validator import RosterRowValidator
from db.models.user_account import UserAccount, UserRole
from db.repositories.identity_repository import IdentityRepository
from db.repositories.profile_repository import ProfileRepository


class RowRejectedError(ValueError):
    """
    Raised when a parsed row breaks a business rule. Becomes a FAILED row result.
    """


class DuplicateEmailError(RowRejectedError):
    def __init__(self, email: str) -> None:
        super().__init__(f"Email already exists: {email}")
        self.email = email


class DuplicateRollNumberError(RowRejectedError):
    def __init__(self, roll_number: str) -> None:
        super().__init__(f"Roll number already exists: {roll_number}")
        self.roll_number = roll_number


class ImportProfile(ABC):
    """
    Strategy for one import kind.
    """

    entity_type: str
    role: str
    columns: tuple[str, ...]
    required_columns: tuple[str, ...]
    example_row: tuple[str, ...]

    def __init__(self, validator: RosterRowValidator | None = None) -> None:
        self._validator = validator or RosterRowValidator()

    def parse_row(
        self,
        raw_row: Mapping[str, Any],
        *,
        row_number: int,
        header_count: int,
    ) -> ParsedRow:
        """
        Build the ParsedRow for one data row, keeping a placeholder when the
        row is malformed.
        """

        row_data = _snapshot(raw_row)

        if self._validator.is_completely_empty_row(raw_row):
            return ParsedRow(
                row_number=row_number,
                row_data=row_data,
                error="Completely empty rows are not allowed.",
            )

        extra_values = [value for value in raw_row.get(EXTRA_VALUES_KEY) or [] if str(value).strip()]
        if extra_values:
            return ParsedRow(
                row_number=row_number,
                row_data=row_data,
                error=(
                    f"Row has {header_count + len(extra_values)} values but the header "
                    f"defines {header_count} columns."
                ),
            )

        if any(value is None for key, value in raw_row.items() if key != EXTRA_VALUES_KEY):
            return ParsedRow(
                row_number=row_number,
                row_data=row_data,
                error=f"Row has fewer values than the header defines ({header_count} columns).",
            )

        record, errors = self._validate(raw_row)
        if errors or record is None:
            return ParsedRow(
                row_number=row_number,
                row_data=row_data,
                error=_join_field_errors(errors) or "Row could not be parsed.",
            )

        return ParsedRow(row_number=row_number, row_data=row_data, record=record)

    def validate_row(
        self,
        record: RosterRecord,
        *,
        college_id: uuid.UUID,
        identities: IdentityRepository,
        profiles: ProfileRepository,
    ) -> None:
        """
        Enforce uniqueness rules. Raises RowRejectedError.
        """

        if identities.exists_by_email(record.email):
            raise DuplicateEmailError(record.email)

    @abstractmethod
    def create_profile(
        self,
        record: RosterRecord,
        *,
        account: UserAccount,
        college_id: uuid.UUID,
        profiles: ProfileRepository,
    ) -> uuid.UUID:
        """
        Create the role-specific profile and return its id.
        """

    def template_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(self.columns)
        writer.writerow(self.example_row)
        return buffer.getvalue()

    def template_file_name(self) -> str:
        return f"{self.entity_type.lower()}_template.csv"

    @abstractmethod
    def _validate(self, raw_row: Mapping[str, Any]) -> tuple[RosterRecord | None, list[FieldError]]:
        ...


class StudentImportProfile(ImportProfile):
    entity_type = ImportKind.STUDENT
    role = UserRole.STUDENT
    columns = STUDENT_COLUMNS
    required_columns = STUDENT_REQUIRED_COLUMNS
    example_row = ("John Doe", "john.doe@college.edu", "CS2024001", "B.Tech", "Computer Science", "3")

    def validate_row(
        self,
        record: RosterRecord,
        *,
        college_id: uuid.UUID,
        identities: IdentityRepository,
        profiles: ProfileRepository,
    ) -> None:
        super().validate_row(record, college_id=college_id, identities=identities, profiles=profiles)
        if not isinstance(record, StudentRow):
            raise TypeError(f"Expected StudentRow, got {type(record).__name__}")
        if profiles.roll_number_exists(college_id=college_id, roll_number=record.roll_number):
            raise DuplicateRollNumberError(record.roll_number)

    def create_profile(
        self,
        record: RosterRecord,
        *,
        account: UserAccount,
        college_id: uuid.UUID,
        profiles: ProfileRepository,
    ) -> uuid.UUID:
        if not isinstance(record, StudentRow):
            raise TypeError(f"Expected StudentRow, got {type(record).__name__}")
        student = profiles.create_student(
            user_id=account.id,
            college_id=college_id,
            full_name=record.full_name,
            roll_number=record.roll_number,
            degree=record.degree,
            branch=record.branch,
            year=record.year,
        )
        return student.id

    def _validate(self, raw_row: Mapping[str, Any]) -> tuple[RosterRecord | None, list[FieldError]]:
        return self._validator.validate_student_row(raw_row)


class TrainerImportProfile(ImportProfile):
    entity_type = ImportKind.TRAINER
    role = UserRole.TRAINER
    columns = TRAINER_COLUMNS
    required_columns = TRAINER_REQUIRED_COLUMNS
    example_row = ("Dr. Robert Smith", "robert.smith@college.edu", "Computer Science", "Machine Learning")

    def create_profile(
        self,
        record: RosterRecord,
        *,
        account: UserAccount,
        college_id: uuid.UUID,
        profiles: ProfileRepository,
    ) -> uuid.UUID:
        if not isinstance(record, TrainerRow):
            raise TypeError(f"Expected TrainerRow, got {type(record).__name__}")
        trainer = profiles.create_trainer(
            user_id=account.id,
            college_id=college_id,
            full_name=record.full_name,
            department=record.department,
            specialization=record.specialization,
        )
        return trainer.id

    def _validate(self, raw_row: Mapping[str, Any]) -> tuple[RosterRecord | None, list[FieldError]]:
        return self._validator.validate_trainer_row(raw_row)


_PROFILES: dict[str, ImportProfile] = {
    ImportKind.STUDENT: StudentImportProfile(),
    ImportKind.TRAINER: TrainerImportProfile(),
}


def get_import_profile(entity_type: str) -> ImportProfile:
    try:
        return _PROFILES[entity_type.strip().upper()]
    except KeyError:
        allowed = ", ".join(ImportKind.ALL)
        raise ValueError(f"Unsupported import kind '{entity_type}'. Allowed values: {allowed}.") from None


def _snapshot(raw_row: Mapping[str, Any]) -> dict[str, Any]:
    snapshot: dict[str, Any] = {}
    for key, value in raw_row.items():
        if key == EXTRA_VALUES_KEY:
            snapshot[EXTRA_VALUES_KEY] = list(value or [])
        else:
            snapshot[str(key)] = value
    return snapshot


def _join_field_errors(errors: list[FieldError]) -> str:
    return "; ".join(error.describe() for error in errors)
