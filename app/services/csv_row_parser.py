"""
app/services/csv_row_parser.py

Turns validated CSV text into an ordered stream of ParsedRow values.
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

from app.domain.bulk_import import ParsedRow
from app.validators.csv_format_validator import CSVFormatError

if TYPE_CHECKING:
    from app.services.import_profiles import ImportProfile

logger = logging.getLogger(__name__)

# DictReader collects surplus values under this key.
EXTRA_VALUES_KEY = "_extra_values"


class CSVRowParser:
    """
    Single-pass parser; row numbers are 1-based over data rows.

    Lines with no fields at all are skipped by the csv module and are not
    data rows. Everything else, including malformed rows, yields exactly one
    ParsedRow.
    """

    def parse(self, text: str, profile: "ImportProfile") -> Iterator[ParsedRow]:
        reader = csv.DictReader(
            io.StringIO(text, newline=""),
            restkey=EXTRA_VALUES_KEY,
            restval=None,
            skipinitialspace=True,
        )
        try:
            fieldnames = reader.fieldnames or []
            reader.fieldnames = [name.strip() for name in fieldnames]
            # Blank header cells (a trailing comma on the header line) keep
            # positions aligned but are not columns.
            header_count = sum(1 for name in reader.fieldnames if name)
            logger.info(
                "Parsing %s CSV with headers: %s",
                profile.entity_type,
                ", ".join(name for name in reader.fieldnames if name),
            )

            for row_number, raw_row in enumerate(reader, start=1):
                raw_row.pop("", None)
                yield profile.parse_row(
                    raw_row,
                    row_number=row_number,
                    header_count=header_count,
                )
        except csv.Error as exc:
            raise CSVFormatError(f"Invalid CSV format near line {reader.line_num}: {exc}") from exc
