"""
app/domain/bulk_import.py

Domain models used by the roster bulk-import flow.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Union

# Column headers are part of the public CSV contract and must match exactly.
FULL_NAME = "Full Name"
EMAIL = "Email"
ROLL_NUMBER = "Roll Number"
DEGREE = "Degree"
BRANCH = "Branch"
YEAR = "Year"
DEPARTMENT = "Department"
SPECIALIZATION = "Specialization"

STUDENT_COLUMNS: tuple[str, ...] = (FULL_NAME, EMAIL, ROLL_NUMBER, DEGREE, BRANCH, YEAR)
STUDENT_REQUIRED_COLUMNS: tuple[str, ...] = (FULL_NAME, EMAIL, ROLL_NUMBER)

TRAINER_COLUMNS: tuple[str, ...] = (FULL_NAME, EMAIL, DEPARTMENT, SPECIALIZATION)
TRAINER_REQUIRED_COLUMNS: tuple[str, ...] = (FULL_NAME, EMAIL)


class ImportKind:
    """
    Target entity of a roster upload. Values match UploadBatch.entity_type.
    """

    STUDENT = "STUDENT"
    TRAINER = "TRAINER"

    ALL: tuple[str, ...] = (STUDENT, TRAINER)


@dataclass(frozen=True)
class StudentRow:
    full_name: str
    email: str
    roll_number: str
    degree: str | None = None
    branch: str | None = None
    year: int | None = None


@dataclass(frozen=True)
class TrainerRow:
    full_name: str
    email: str
    department: str | None = None
    specialization: str | None = None


RosterRecord = Union[StudentRow, TrainerRow]


@dataclass(frozen=True)
class FieldError:
    """
    One invalid value inside a data row.
    """

    column: str | None
    message: str

    def describe(self) -> str:
        return f"{self.column}: {self.message}" if self.column else self.message


@dataclass(frozen=True)
class ParsedRow:
    """
    One data row in file order.

    A malformed row keeps its slot with record=None and an error message so
    row numbers always line up with the source file.
    """

    row_number: int
    row_data: dict[str, Any]
    record: RosterRecord | None = None
    error: str | None = None

    @property
    def is_valid(self) -> bool:
        return self.record is not None

    def identifying_fields(self) -> dict[str, str | None]:
        if self.record is not None:
            return {"email": self.record.email, "name": self.record.full_name}
        return {
            "email": _text_or_none(self.row_data.get(EMAIL)),
            "name": _text_or_none(self.row_data.get(FULL_NAME)),
        }


def _text_or_none(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(frozen=True)
class RowError:
    """
    One failed row as reported back to the uploader.
    """

    row_number: int
    message: str
    row_data: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class ImportSummary:
    """
    End-of-run import summary. errors lists failed rows only.
    """

    upload_id: uuid.UUID
    entity_type: str
    file_name: str
    status: str
    total_rows: int
    successful_rows: int
    failed_rows: int
    errors: list[RowError] = field(default_factory=list)
