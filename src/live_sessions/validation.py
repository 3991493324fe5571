"""Shape validation for raw live-session payloads."""

from typing import Any

from pydantic import BaseModel

from src.utils.validation import ValidationOutcome, validate_payload

from .exceptions import UnknownSessionKindError
from .schemas import (
    BreakoutRoom,
    LiveSession,
    QAQuestion,
    SessionParticipant,
    SessionPoll,
    SessionRecording,
)


SESSION_SCHEMAS: dict[str, type[BaseModel]] = {
    "session": LiveSession,
    "participant": SessionParticipant,
    "poll": SessionPoll,
    "question": QAQuestion,
    "breakout_room": BreakoutRoom,
    "recording": SessionRecording,
}


def validate_session_data(data: Any, kind: str) -> ValidationOutcome:
    """Validate ``data`` as a ``kind`` payload.

    Raises ``UnknownSessionKindError`` for an unknown kind.
    """
    schema = SESSION_SCHEMAS.get(kind)
    if schema is None:
        raise UnknownSessionKindError(kind)
    return validate_payload(schema, data)
