"""Tests for engagement scoring and session summaries."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from src.live_sessions.engagement import (
    average_engagement,
    calculate_engagement_score,
    generate_session_summary,
    rank_participants_by_engagement,
)
from src.live_sessions.exceptions import MalformedSessionError
from src.live_sessions.models import SessionStatus
from src.live_sessions.schemas import (
    LiveSession,
    ParticipantEngagement,
    SessionCapacity,
    SessionMessage,
    SessionParticipant,
    SessionPoll,
)


NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)


def make_participant(name: str = "Ana", **engagement) -> SessionParticipant:
    return SessionParticipant(
        session_id=uuid4(),
        user_id=uuid4(),
        display_name=name,
        engagement=ParticipantEngagement(**engagement),
    )


def make_session(**kwargs) -> LiveSession:
    return LiveSession(
        host_id=uuid4(),
        title="Dosage calculation workshop",
        scheduled_start=NOW,
        scheduled_end=NOW + timedelta(hours=2),
        duration=120,
        capacity=SessionCapacity(maximum=30),
        **kwargs,
    )


ACTIVE = {
    "messages_count": 25,
    "reactions_count": 10,
    "polls_participated": 5,
    "hand_raised_count": 5,
    "speaking_time": 15,
}


class TestEngagementScore:
    """Tests for calculate_engagement_score."""

    def test_worked_example(self) -> None:
        """(0.5, 0.5, 0.5, 1.0, 0.5) weighted is 0.575, which rounds to 58."""
        assert calculate_engagement_score(make_participant(**ACTIVE)) == 58

    def test_idle_participant(self) -> None:
        assert calculate_engagement_score(make_participant()) == 0

    def test_counters_saturate(self) -> None:
        participant = make_participant(
            messages_count=500,
            reactions_count=200,
            polls_participated=100,
            hand_raised_count=50,
            speaking_time=300,
        )
        assert calculate_engagement_score(participant) == 100

    @pytest.mark.parametrize(
        "engagement,expected",
        [
            ({"messages_count": 50}, 30),
            ({"reactions_count": 20}, 20),
            ({"polls_participated": 10}, 25),
            ({"hand_raised_count": 5}, 15),
            ({"speaking_time": 30}, 10),
            ({"speaking_time": 7.5}, 3),
        ],
    )
    def test_single_axis(self, engagement: dict, expected: int) -> None:
        assert calculate_engagement_score(make_participant(**engagement)) == expected

    def test_rejects_non_participant(self) -> None:
        with pytest.raises(MalformedSessionError):
            calculate_engagement_score(ParticipantEngagement(**ACTIVE))  # type: ignore[arg-type]


class TestRanking:
    """Tests for ranking and averages."""

    def test_highest_first_and_stable(self) -> None:
        first_idle = make_participant("Bia")
        active = make_participant("Ana", **ACTIVE)
        second_idle = make_participant("Caio")
        session = make_session(participants=[first_idle, active, second_idle])

        ranked = rank_participants_by_engagement(session)

        assert [p.display_name for p, _ in ranked] == ["Ana", "Bia", "Caio"]
        assert [score for _, score in ranked] == [58, 0, 0]

    def test_limit(self) -> None:
        session = make_session(
            participants=[make_participant("Ana", **ACTIVE), make_participant("Bia")]
        )
        assert len(rank_participants_by_engagement(session, limit=1)) == 1

    def test_average(self) -> None:
        session = make_session(
            participants=[make_participant("Ana", **ACTIVE), make_participant("Bia")]
        )
        assert average_engagement(session) == 29

    def test_average_without_participants(self) -> None:
        assert average_engagement(make_session()) == 0


class TestSessionSummary:
    """Tests for generate_session_summary."""

    def test_summary_text(self) -> None:
        host_id = uuid4()
        session = make_session(
            status=SessionStatus.ENDED,
            actual_start=NOW,
            actual_end=NOW + timedelta(minutes=89, seconds=30),
            peak_participant_count=12,
            participants=[make_participant("Ana", **ACTIVE), make_participant("Bia")],
            messages=[
                SessionMessage(sender_id=host_id, content="Welcome", timestamp=NOW),
                SessionMessage(sender_id=host_id, content="Slides", timestamp=NOW),
            ],
            polls=[
                SessionPoll(
                    session_id=uuid4(),
                    created_by=host_id,
                    question="Ready?",
                    type="yes_no",
                )
            ],
        )

        assert generate_session_summary(session) == "\n".join(
            [
                'Session "Dosage calculation workshop" Summary:',
                "- Duration: 90 minutes",
                "- Peak Participants: 12",
                "- Messages Sent: 2",
                "- Polls Created: 1",
                "- Questions Asked: 0",
                "- Average Engagement: 29%",
                "- Status: ended",
            ]
        )

    def test_not_started_has_zero_duration(self) -> None:
        summary = generate_session_summary(make_session())
        assert "- Duration: 0 minutes" in summary
        assert summary.endswith("- Status: scheduled")

    def test_resolved_status_overrides_stored(self) -> None:
        summary = generate_session_summary(make_session(), SessionStatus.WAITING)
        assert summary.endswith("- Status: waiting")
