"""
app/domain package marker.
"""

from app.domain.bulk_import import (
    FieldError,
    ImportKind,
    ImportSummary,
    ParsedRow,
    RosterRecord,
    RowError,
    StudentRow,
    TrainerRow,
)

__all__ = [
    "FieldError",
    "ImportKind",
    "ImportSummary",
    "ParsedRow",
    "RosterRecord",
    "RowError",
    "StudentRow",
    "TrainerRow",
]
