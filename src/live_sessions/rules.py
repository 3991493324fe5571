"""Join eligibility, lock and scheduling rules for live sessions.

All checks are pure and return tagged results; a rejection is an expected
outcome, never an exception.
"""

from datetime import datetime, timedelta
from typing import NamedTuple
from uuid import UUID

from src.utils.timestamps import as_utc, utc_now

from .models import (
    MAX_SESSION_DURATION_MINUTES,
    MIN_SESSION_DURATION_MINUTES,
    TERMINAL_STATUSES,
    InvitationStatus,
    ParticipantRole,
    SessionStatus,
)
from .schemas import LiveSession


class JoinDecision(NamedTuple):
    """Whether a user may join; ``reason`` is set only on denial."""

    can_join: bool
    reason: str | None = None


class TimingValidation(NamedTuple):
    valid: bool
    errors: list[str]


# ==============================================================================
# Join Eligibility
# ==============================================================================


def is_session_locked(session: LiveSession, now: datetime | None = None) -> bool:
    """Check if the session's lock is still in force."""
    locked_until = session.state.locked_until
    return locked_until is not None and locked_until > (now or utc_now())


def has_session_access(session: LiveSession, user_id: UUID) -> bool:
    """Accepted invitation, existing participant, guests allowed or public."""
    return (
        any(
            inv.user_id == user_id and inv.status == InvitationStatus.ACCEPTED
            for inv in session.invitations
        )
        or any(p.user_id == user_id for p in session.participants)
        or session.settings.allow_guests
        or session.is_public
    )


def can_user_join_session(
    session: LiveSession,
    user_id: UUID,
    user_role: ParticipantRole | None = None,
    now: datetime | None = None,
) -> JoinDecision:
    """Decide whether ``user_id`` may join ``session``.

    Checks run in a fixed order and the first failure wins:
    1. Session ended or cancelled
    2. Session locked
    3. Session at capacity
    4. No invitation, participation, guest access or public access

    ``user_role`` does not bypass any check; it is accepted so callers can
    pass the role they intend to assign.
    """
    now = now or utc_now()

    if session.status in TERMINAL_STATUSES:
        return JoinDecision(False, "Session has ended")

    if is_session_locked(session, now):
        return JoinDecision(False, "Session is locked")

    if session.current_participant_count >= session.capacity.maximum:
        return JoinDecision(False, "Session is at capacity")

    if not has_session_access(session, user_id):
        return JoinDecision(False, "Not invited to this session")

    return JoinDecision(True)


# ==============================================================================
# Scheduling
# ==============================================================================


def validate_session_timing(
    scheduled_start: datetime,
    scheduled_end: datetime,
    now: datetime | None = None,
    min_minutes: int = MIN_SESSION_DURATION_MINUTES,
    max_minutes: int = MAX_SESSION_DURATION_MINUTES,
) -> TimingValidation:
    """Check a proposed schedule, reporting every violated rule together.

    The start must be strictly after ``now``, the end strictly after the
    start, and the duration within [min_minutes, max_minutes] inclusive.
    """
    start = as_utc(scheduled_start)
    end = as_utc(scheduled_end)
    now = as_utc(now or utc_now())
    duration = end - start

    errors = []
    if start <= now:
        errors.append("Session start time must be in the future")
    if end <= start:
        errors.append("Session end time must be after start time")
    if duration < timedelta(minutes=min_minutes):
        errors.append(f"Session must be at least {min_minutes} minutes long")
    if duration > timedelta(minutes=max_minutes):
        errors.append(f"Session cannot be longer than {max_minutes} minutes")

    return TimingValidation(not errors, errors)


def resolve_session_status(
    session: LiveSession, now: datetime | None = None
) -> SessionStatus:
    """Status implied by the scheduling fields.

    Ended and cancelled sessions keep their status. Otherwise an actual end
    means ended, an actual start means live (or still paused), a reached
    scheduled start means waiting, and anything earlier is scheduled.
    """
    if session.status in TERMINAL_STATUSES:
        return session.status
    if session.actual_end is not None:
        return SessionStatus.ENDED
    if session.actual_start is not None:
        if session.status == SessionStatus.PAUSED:
            return SessionStatus.PAUSED
        return SessionStatus.LIVE
    if (now or utc_now()) >= session.scheduled_start:
        return SessionStatus.WAITING
    return SessionStatus.SCHEDULED
