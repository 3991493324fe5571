"""Shape validation for raw progress payloads."""

from typing import Any

from pydantic import BaseModel

from src.utils.validation import ValidationOutcome, validate_payload

from .exceptions import UnknownRecordKindError
from .schemas import ActivityRecord, AssessmentProgress, LessonProgress, ModuleProgress


PROGRESS_SCHEMAS: dict[str, type[BaseModel]] = {
    "module": ModuleProgress,
    "lesson": LessonProgress,
    "assessment": AssessmentProgress,
    "activity": ActivityRecord,
}


def validate_progress_data(data: Any, kind: str) -> ValidationOutcome:
    """Validate ``data`` as a ``kind`` record.

    Returns the parsed model on success and ``"field: message"`` errors
    otherwise. Raises ``UnknownRecordKindError`` for an unknown kind.
    """
    schema = PROGRESS_SCHEMAS.get(kind)
    if schema is None:
        raise UnknownRecordKindError(kind)
    return validate_payload(schema, data)
