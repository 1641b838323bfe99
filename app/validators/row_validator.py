"""
app/validators/row_validator.py

Row-level validation and type parsing for roster CSV imports.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import EmailStr, TypeAdapter, ValidationError

from app.domain.bulk_import import (
    BRANCH,
    DEGREE,
    DEPARTMENT,
    EMAIL,
    FULL_NAME,
    ROLL_NUMBER,
    SPECIALIZATION,
    YEAR,
    FieldError,
    StudentRow,
    TrainerRow,
)

_EMAIL_ADAPTER: TypeAdapter[str] = TypeAdapter(EmailStr)

_MAX_LENGTHS: dict[str, int] = {
    FULL_NAME: 255,
    EMAIL: 255,
    ROLL_NUMBER: 50,
    DEGREE: 100,
    BRANCH: 100,
    DEPARTMENT: 100,
}


class RosterRowValidator:
    """
    Validates and parses raw CSV values into typed roster records.
    """

    def is_completely_empty_row(self, row: Mapping[Any, Any]) -> bool:
        """
        Return True when all values in the row are empty or whitespace.
        """

        return all(self._is_blank(value) for value in row.values())

    def validate_student_row(
        self,
        raw_row: Mapping[str, Any],
    ) -> tuple[StudentRow | None, list[FieldError]]:
        errors: list[FieldError] = []

        full_name = self._parse_required_string(raw_row, FULL_NAME, errors)
        email = self._parse_email(raw_row, errors)
        roll_number = self._parse_required_string(raw_row, ROLL_NUMBER, errors)
        degree = self._parse_optional_string(raw_row, DEGREE, errors)
        branch = self._parse_optional_string(raw_row, BRANCH, errors)
        year = self._parse_year(raw_row, errors)

        if errors:
            return None, errors

        return (
            StudentRow(
                full_name=full_name,
                email=email,
                roll_number=roll_number,
                degree=degree,
                branch=branch,
                year=year,
            ),
            [],
        )

    def validate_trainer_row(
        self,
        raw_row: Mapping[str, Any],
    ) -> tuple[TrainerRow | None, list[FieldError]]:
        errors: list[FieldError] = []

        full_name = self._parse_required_string(raw_row, FULL_NAME, errors)
        email = self._parse_email(raw_row, errors)
        department = self._parse_optional_string(raw_row, DEPARTMENT, errors)
        specialization = self._parse_optional_string(raw_row, SPECIALIZATION, errors)

        if errors:
            return None, errors

        return (
            TrainerRow(
                full_name=full_name,
                email=email,
                department=department,
                specialization=specialization,
            ),
            [],
        )

    def _parse_required_string(
        self,
        raw_row: Mapping[str, Any],
        column: str,
        errors: list[FieldError],
    ) -> str:
        value = raw_row.get(column)
        if self._is_blank(value):
            errors.append(FieldError(column=column, message="Required value is missing."))
            return ""
        return self._check_length(str(value).strip(), column, errors)

    def _parse_optional_string(
        self,
        raw_row: Mapping[str, Any],
        column: str,
        errors: list[FieldError],
    ) -> str | None:
        value = raw_row.get(column)
        if self._is_blank(value):
            return None
        return self._check_length(str(value).strip(), column, errors)

    def _parse_email(self, raw_row: Mapping[str, Any], errors: list[FieldError]) -> str:
        raw_email = self._parse_required_string(raw_row, EMAIL, errors)
        if not raw_email:
            return ""
        try:
            return _EMAIL_ADAPTER.validate_python(raw_email).lower()
        except ValidationError:
            errors.append(FieldError(column=EMAIL, message="Invalid email format."))
            return ""

    def _parse_year(self, raw_row: Mapping[str, Any], errors: list[FieldError]) -> int | None:
        value = raw_row.get(YEAR)
        if self._is_blank(value):
            return None
        try:
            year = int(str(value).strip())
        except ValueError:
            errors.append(FieldError(column=YEAR, message="Year must be a whole number."))
            return None
        if year < 1:
            errors.append(FieldError(column=YEAR, message="Year must be a positive number."))
            return None
        return year

    @staticmethod
    def _check_length(value: str, column: str, errors: list[FieldError]) -> str:
        limit = _MAX_LENGTHS.get(column)
        if limit is not None and len(value) > limit:
            errors.append(FieldError(column=column, message=f"Value exceeds {limit} characters."))
        return value

    @staticmethod
    def _is_blank(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, (list, tuple)):
            return all(str(item).strip() == "" for item in value)
        return str(value).strip() == ""
