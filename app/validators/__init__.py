"""
app/validators package marker.
"""

from app.validators.csv_format_validator import CSVFormatError, CSVFormatValidator, is_csv_upload
from app.validators.row_validator import RosterRowValidator

__all__ = [
    "CSVFormatError",
    "CSVFormatValidator",
    "RosterRowValidator",
    "is_csv_upload",
]
