"""Tests for join eligibility, scheduling and status rules."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.live_sessions.models import InvitationStatus, ParticipantRole, SessionStatus
from src.live_sessions.rules import (
    can_user_join_session,
    is_session_locked,
    resolve_session_status,
    validate_session_timing,
)
from src.live_sessions.schemas import (
    LiveSession,
    ParticipantInvitation,
    SessionCapacity,
    SessionParticipant,
    SessionSettings,
    SessionState,
)
from src.live_sessions.service import SessionParticipantEngine


NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)
START = NOW + timedelta(hours=1)


def make_session(maximum: int = 10, **kwargs) -> LiveSession:
    return LiveSession(
        host_id=uuid4(),
        title="Dosage calculation workshop",
        scheduled_start=START,
        scheduled_end=START + timedelta(hours=1),
        duration=60,
        capacity=SessionCapacity(maximum=maximum),
        **kwargs,
    )


def invitation(user_id, status: InvitationStatus) -> ParticipantInvitation:
    return ParticipantInvitation(
        session_id=uuid4(),
        inviter_id=uuid4(),
        user_id=user_id,
        status=status,
        invitation_token="token",
        invitation_url="https://app.example.com/invite/token",
    )


class TestCanUserJoinSession:
    """Tests for can_user_join_session."""

    def test_capacity_boundary(self) -> None:
        """One seat left admits; a full session rejects."""
        open_seat = make_session(maximum=10, current_participant_count=9, is_public=True)
        decision = can_user_join_session(open_seat, uuid4(), now=NOW)
        assert decision.can_join is True
        assert decision.reason is None

        full = make_session(maximum=10, current_participant_count=10, is_public=True)
        decision = can_user_join_session(full, uuid4(), now=NOW)
        assert decision.can_join is False
        assert decision.reason == "Session is at capacity"

    def test_role_does_not_bypass_capacity(self) -> None:
        full = make_session(maximum=3, current_participant_count=3, is_public=True)
        decision = can_user_join_session(full, uuid4(), ParticipantRole.HOST, now=NOW)
        assert decision.reason == "Session is at capacity"

    @pytest.mark.parametrize("status", [SessionStatus.ENDED, SessionStatus.CANCELLED])
    def test_terminal_session_is_checked_first(self, status: SessionStatus) -> None:
        session = make_session(
            maximum=1,
            current_participant_count=1,
            status=status,
            state=SessionState(locked_until=NOW + timedelta(minutes=5)),
        )
        decision = can_user_join_session(session, uuid4(), now=NOW)
        assert decision == (False, "Session has ended")

    def test_locked_before_capacity(self) -> None:
        session = make_session(
            maximum=1,
            current_participant_count=1,
            state=SessionState(locked_until=NOW + timedelta(minutes=5)),
        )
        decision = can_user_join_session(session, uuid4(), now=NOW)
        assert decision.reason == "Session is locked"

    def test_expired_lock(self) -> None:
        session = make_session(state=SessionState(locked_until=NOW), is_public=True)
        assert is_session_locked(session, NOW) is False
        assert can_user_join_session(session, uuid4(), now=NOW).can_join is True

    def test_not_invited(self) -> None:
        decision = can_user_join_session(make_session(), uuid4(), now=NOW)
        assert decision == (False, "Not invited to this session")

    def test_accepted_invitation(self) -> None:
        user_id = uuid4()
        session = make_session(invitations=[invitation(user_id, InvitationStatus.ACCEPTED)])
        assert can_user_join_session(session, user_id, now=NOW).can_join is True

    def test_pending_invitation_is_not_enough(self) -> None:
        user_id = uuid4()
        session = make_session(invitations=[invitation(user_id, InvitationStatus.PENDING)])
        assert can_user_join_session(session, user_id, now=NOW).can_join is False

    def test_existing_participant_rejoins(self) -> None:
        user_id = uuid4()
        participant = SessionParticipant(
            session_id=uuid4(), user_id=user_id, display_name="Ana"
        )
        session = make_session(participants=[participant])
        assert can_user_join_session(session, user_id, now=NOW).can_join is True

    def test_guests_allowed(self) -> None:
        session = make_session(settings=SessionSettings(allow_guests=True))
        assert can_user_join_session(session, uuid4(), now=NOW).can_join is True


class TestValidateSessionTiming:
    """Tests for validate_session_timing."""

    @pytest.mark.parametrize(
        "duration,valid",
        [
            (timedelta(minutes=5), True),
            (timedelta(minutes=4, seconds=59), False),
            (timedelta(minutes=480), True),
            (timedelta(minutes=481), False),
        ],
    )
    def test_duration_boundaries(self, duration: timedelta, valid: bool) -> None:
        result = validate_session_timing(START, START + duration, now=NOW)
        assert result.valid is valid

    def test_too_short_message(self) -> None:
        result = validate_session_timing(
            START, START + timedelta(minutes=4, seconds=59), now=NOW
        )
        assert result.errors == ["Session must be at least 5 minutes long"]

    def test_too_long_message(self) -> None:
        result = validate_session_timing(START, START + timedelta(minutes=481), now=NOW)
        assert result.errors == ["Session cannot be longer than 480 minutes"]

    @pytest.mark.parametrize("start", [NOW, NOW - timedelta(minutes=1)])
    def test_start_must_be_in_future(self, start: datetime) -> None:
        result = validate_session_timing(start, start + timedelta(hours=1), now=NOW)
        assert result.errors == ["Session start time must be in the future"]

    def test_reports_every_violation(self) -> None:
        result = validate_session_timing(NOW, NOW - timedelta(minutes=10), now=NOW)
        assert result.valid is False
        assert result.errors == [
            "Session start time must be in the future",
            "Session end time must be after start time",
            "Session must be at least 5 minutes long",
        ]

    def test_naive_datetimes_are_utc(self) -> None:
        start = datetime(2025, 3, 12, 16, 0)
        result = validate_session_timing(start, start + timedelta(hours=1), now=NOW)
        assert result.valid is True

    def test_engine_uses_configured_bounds(self) -> None:
        engine = SessionParticipantEngine(min_duration_minutes=15, max_duration_minutes=90)
        result = engine.validate_timing(START, START + timedelta(minutes=10), now=NOW)
        assert result.errors == ["Session must be at least 15 minutes long"]

        result = engine.validate_timing(START, START + timedelta(minutes=91), now=NOW)
        assert result.errors == ["Session cannot be longer than 90 minutes"]


class TestResolveSessionStatus:
    """Tests for resolve_session_status."""

    def test_scheduled(self) -> None:
        assert resolve_session_status(make_session(), NOW) == SessionStatus.SCHEDULED

    def test_waiting_once_start_is_reached(self) -> None:
        assert resolve_session_status(make_session(), START) == SessionStatus.WAITING

    def test_live(self) -> None:
        session = make_session(actual_start=START)
        assert resolve_session_status(session, START) == SessionStatus.LIVE

    def test_paused_stays_paused(self) -> None:
        session = make_session(actual_start=START, status=SessionStatus.PAUSED)
        assert resolve_session_status(session, START) == SessionStatus.PAUSED

    def test_ended(self) -> None:
        session = make_session(
            actual_start=START, actual_end=START + timedelta(minutes=30)
        )
        assert resolve_session_status(session, NOW) == SessionStatus.ENDED

    def test_cancelled_is_kept(self) -> None:
        session = make_session(status=SessionStatus.CANCELLED, actual_start=START)
        assert resolve_session_status(session, START) == SessionStatus.CANCELLED
