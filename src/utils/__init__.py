"""Utility modules for the workbook engine."""

from src.utils.numbers import round_half_up, to_decimal
from src.utils.timestamps import UTCDateTime, as_utc, utc_date, utc_now
from src.utils.validation import (
    ValidationOutcome,
    ValidationResponse,
    format_validation_errors,
    validate_payload,
)


__all__ = [
    "UTCDateTime",
    "ValidationOutcome",
    "ValidationResponse",
    "as_utc",
    "format_validation_errors",
    "round_half_up",
    "to_decimal",
    "utc_date",
    "utc_now",
    "validate_payload",
]
