"""Participant engagement scoring and session recaps."""

from decimal import Decimal

from src.utils.numbers import round_half_up, to_decimal

from .exceptions import MalformedSessionError
from .models import ENGAGEMENT_CAPS, ENGAGEMENT_WEIGHTS, SessionStatus
from .schemas import LiveSession, ParticipantEngagement, SessionParticipant


def _engagement_axes(engagement: ParticipantEngagement) -> dict[str, Decimal]:
    return {
        "messages": to_decimal(engagement.messages_count),
        "reactions": to_decimal(engagement.reactions_count),
        "polls": to_decimal(engagement.polls_participated),
        "hand_raises": to_decimal(engagement.hand_raised_count),
        "speaking_minutes": to_decimal(engagement.speaking_time),
    }


def calculate_engagement_score(participant: SessionParticipant) -> int:
    """Score a participant's activity from 0 to 100.

    Each counter is divided by its cap and clamped to [0, 1], the results
    are combined with ``ENGAGEMENT_WEIGHTS`` and rounded half-up.

    Example:
        25 messages, 10 reactions, 5 polls, 5 hand raises and 15 speaking
        minutes normalize to (0.5, 0.5, 0.5, 1.0, 0.5) and score 58.
    """
    if not isinstance(participant, SessionParticipant):
        msg = f"Expected a session participant, got {type(participant).__name__}"
        raise MalformedSessionError(msg)

    score = Decimal(0)
    for axis, value in _engagement_axes(participant.engagement).items():
        normalized = min(max(value / ENGAGEMENT_CAPS[axis], Decimal(0)), Decimal(1))
        score += normalized * ENGAGEMENT_WEIGHTS[axis]

    return round_half_up(score * 100)


def rank_participants_by_engagement(
    session: LiveSession, limit: int | None = None
) -> list[tuple[SessionParticipant, int]]:
    """Participants with their scores, highest first (stable on ties)."""
    scored = [(p, calculate_engagement_score(p)) for p in session.participants]
    scored.sort(key=lambda item: item[1], reverse=True)
    return scored if limit is None else scored[:limit]


def average_engagement(session: LiveSession) -> int:
    if not session.participants:
        return 0
    total = sum(calculate_engagement_score(p) for p in session.participants)
    return round_half_up(Decimal(total) / len(session.participants))


def generate_session_summary(
    session: LiveSession, status: SessionStatus | None = None
) -> str:
    """Plain-text recap of a session.

    ``status`` overrides the stored status, so callers can report the one
    resolved from the scheduling fields.
    """
    duration = 0
    if session.actual_start is not None and session.actual_end is not None:
        seconds = (session.actual_end - session.actual_start).total_seconds()
        duration = round_half_up(to_decimal(seconds) / 60)

    lines = [
        f'Session "{session.title}" Summary:',
        f"- Duration: {duration} minutes",
        f"- Peak Participants: {session.peak_participant_count}",
        f"- Messages Sent: {len(session.messages)}",
        f"- Polls Created: {len(session.polls)}",
        f"- Questions Asked: {len(session.questions)}",
        f"- Average Engagement: {average_engagement(session)}%",
        f"- Status: {(status or session.status).value}",
    ]
    return "\n".join(lines)
