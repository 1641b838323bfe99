"""
app/validators/csv_format_validator.py

File-level checks that run before any roster row is parsed.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence

CSV_CONTENT_TYPES = {
    "text/csv",
    "application/csv",
    "application/vnd.ms-excel",
}

_OTHER_DELIMITERS = (";", "\t", "|")


class CSVFormatError(ValueError):
    """
    Raised when the uploaded file itself is unusable (structural error).
    """


def is_csv_upload(file_name: str | None, content_type: str | None) -> bool:
    """
    Return True when the file looks like a CSV by extension or MIME type.
    """

    normalized_name = (file_name or "").strip().lower()
    normalized_type = (content_type or "").split(";", 1)[0].strip().lower()
    return normalized_name.endswith(".csv") or normalized_type in CSV_CONTENT_TYPES


class CSVFormatValidator:
    """
    Validates file type, size, encoding, delimiter, and header row.

    Performs no side effects; the decoded text is returned so the row parser
    does not decode twice.
    """

    def __init__(self, *, max_file_bytes: int) -> None:
        self._max_file_bytes = max(1, max_file_bytes)

    def validate(
        self,
        *,
        content: bytes,
        file_name: str | None,
        content_type: str | None,
        required_headers: Sequence[str],
    ) -> str:
        if not content or not content.strip():
            raise CSVFormatError("File is empty")

        if not is_csv_upload(file_name, content_type):
            raise CSVFormatError("File must be a CSV")

        if len(content) > self._max_file_bytes:
            raise CSVFormatError(
                f"File exceeds the maximum allowed size of {self._max_file_bytes} bytes"
            )

        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise CSVFormatError("CSV must be UTF-8 encoded.") from exc

        headers = self.read_headers(text)
        self.check_headers(headers, required_headers)
        return text

    def read_headers(self, text: str) -> list[str]:
        try:
            first_row = next(csv.reader(io.StringIO(text, newline="")), None)
        except csv.Error as exc:
            raise CSVFormatError(f"Invalid CSV format: {exc}") from exc

        headers = [header.strip() for header in first_row or []]
        if not any(headers):
            raise CSVFormatError("CSV header row is missing.")

        if len(headers) == 1 and any(delimiter in headers[0] for delimiter in _OTHER_DELIMITERS):
            raise CSVFormatError("CSV must be comma-delimited.")

        return headers

    @staticmethod
    def check_headers(headers: Sequence[str], required_headers: Sequence[str]) -> None:
        seen: set[str] = set()
        duplicates: list[str] = []
        for header in headers:
            if header and header in seen and header not in duplicates:
                duplicates.append(header)
            seen.add(header)
        if duplicates:
            raise CSVFormatError(f"Duplicate CSV header(s): {', '.join(duplicates)}")

        missing = [header for header in required_headers if header not in seen]
        if missing:
            raise CSVFormatError(f"Missing required CSV header(s): {', '.join(missing)}")
