"""Tests for learning streaks and period analytics."""

from datetime import UTC, date, datetime, timedelta, timezone
from uuid import UUID, uuid4

import pytest

from src.progress.analytics import calculate_learning_streak, generate_progress_analytics
from src.progress.models import ActivityType, RiskLevel
from src.progress.schemas import ActivityRecord, AnalyticsPeriod, ModuleProgress


# Wednesday
NOW = datetime(2025, 3, 12, 15, 30, tzinfo=UTC)
USER_ID = UUID("7b1f0c52-3f4e-4a55-9a0c-2d7e5f8c1a10")


def activity(
    when: datetime, activity_type: ActivityType = ActivityType.LESSON_COMPLETE, **kwargs
) -> ActivityRecord:
    return ActivityRecord(user_id=USER_ID, type=activity_type, timestamp=when, **kwargs)


def days_ago(*offsets: int) -> list[ActivityRecord]:
    return [activity(NOW - timedelta(days=offset)) for offset in offsets]


class TestLearningStreak:
    """Tests for calculate_learning_streak."""

    def test_three_consecutive_days(self) -> None:
        streak = calculate_learning_streak(days_ago(0, 1, 2), as_of=NOW)
        assert streak.current == 3
        assert streak.longest == 3
        assert streak.last_date == date(2025, 3, 12)

    def test_gap_breaks_current_streak(self) -> None:
        streak = calculate_learning_streak(days_ago(0, 2), as_of=NOW)
        assert streak.current == 1
        assert streak.longest >= 1

    def test_streak_ending_yesterday_is_current(self) -> None:
        streak = calculate_learning_streak(days_ago(1, 2), as_of=NOW)
        assert streak.current == 2
        assert streak.last_date == date(2025, 3, 11)

    def test_stale_streak_is_not_current(self) -> None:
        streak = calculate_learning_streak(days_ago(2, 3, 4), as_of=NOW)
        assert streak.current == 0
        assert streak.longest == 3

    def test_longest_covers_full_history(self) -> None:
        streak = calculate_learning_streak(days_ago(0, 1, 5, 6, 7, 8), as_of=NOW)
        assert streak.current == 2
        assert streak.longest == 4

    def test_same_day_counts_once(self) -> None:
        activities = [
            activity(NOW.replace(hour=8)),
            activity(NOW.replace(hour=9), ActivityType.MODULE_COMPLETE),
        ]
        streak = calculate_learning_streak(activities, as_of=NOW)
        assert streak.current == 1
        assert streak.longest == 1

    def test_only_completions_count(self) -> None:
        activities = [
            activity(NOW, ActivityType.NOTE_CREATE),
            activity(NOW - timedelta(days=1), ActivityType.LESSON_START),
        ]
        streak = calculate_learning_streak(activities, as_of=NOW)
        assert streak.current == 0
        assert streak.last_date is None

    def test_future_completions_are_ignored(self) -> None:
        activities = [*days_ago(0), activity(NOW + timedelta(days=1))]
        streak = calculate_learning_streak(activities, as_of=NOW)
        assert streak.current == 1
        assert streak.last_date == date(2025, 3, 12)

    def test_uses_utc_calendar_days(self) -> None:
        """23:30 at UTC-5 on the 11th is already the 12th in UTC."""
        late_evening = datetime(2025, 3, 11, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
        streak = calculate_learning_streak([activity(late_evening)], as_of=NOW)
        assert streak.last_date == date(2025, 3, 12)

    def test_empty_log(self) -> None:
        streak = calculate_learning_streak([], as_of=NOW)
        assert (streak.current, streak.longest, streak.last_date) == (0, 0, None)


class TestProgressAnalytics:
    """Tests for generate_progress_analytics."""

    @pytest.fixture
    def period(self) -> AnalyticsPeriod:
        return AnalyticsPeriod(start=date(2025, 3, 10), end=date(2025, 3, 12), label="weekly")

    @pytest.fixture
    def activities(self) -> list[ActivityRecord]:
        return [
            activity(
                datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
                session_id="s1",
                duration=30,
            ),
            activity(
                datetime(2025, 3, 10, 9, 30, tzinfo=UTC),
                ActivityType.ASSESSMENT_COMPLETE,
                session_id="s1",
                duration=10,
                details={"score": 80},
            ),
            activity(
                datetime(2025, 3, 11, 14, 0, tzinfo=UTC),
                ActivityType.NOTE_CREATE,
                session_id="s2",
                duration=5,
            ),
            activity(
                datetime(2025, 3, 12, 14, 15, tzinfo=UTC),
                session_id="s2",
                duration=20,
            ),
            activity(
                datetime(2025, 3, 12, 14, 45, tzinfo=UTC),
                ActivityType.ASSESSMENT_COMPLETE,
                details={"score": 0},
            ),
            activity(
                datetime(2025, 3, 12, 10, 0, tzinfo=UTC),
                ActivityType.AUDIO_RECORD,
                duration=3,
                details={"action": "download"},
            ),
            # Outside the period
            activity(datetime(2025, 3, 13, 8, 0, tzinfo=UTC), duration=100),
            activity(datetime(2025, 3, 9, 8, 0, tzinfo=UTC), ActivityType.MODULE_COMPLETE),
        ]

    def test_aggregates_period(
        self, activities: list[ActivityRecord], period: AnalyticsPeriod
    ) -> None:
        result = generate_progress_analytics([], [], activities, period)

        assert result.user_id == USER_ID
        assert result.period == "weekly"
        assert result.active_days == 3
        assert result.total_time_spent == 68
        assert result.session_count == 2
        assert result.average_session_duration == 34
        assert result.lessons_completed == 2
        assert result.modules_completed == 0
        assert result.assessments_taken == 2
        assert result.average_score == 40
        assert result.notes_created == 1
        assert result.audio_recorded == 3
        assert result.downloads_count == 1
        assert result.search_queries == 0
        assert result.most_active_hour == 14
        assert result.most_active_day == 3
        assert result.learning_velocity == 2
        assert result.dropoff_points == []
        assert result.risk_level == RiskLevel.MEDIUM

    def test_boolean_scores_are_ignored(self, period: AnalyticsPeriod) -> None:
        activities = [
            activity(
                datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
                ActivityType.ASSESSMENT_COMPLETE,
                details={"score": True},
            ),
            activity(
                datetime(2025, 3, 10, 9, 5, tzinfo=UTC),
                ActivityType.ASSESSMENT_COMPLETE,
                details={"score": 90},
            ),
        ]
        result = generate_progress_analytics([], [], activities, period)
        assert result.assessments_taken == 2
        assert result.average_score == 90

    def test_empty_period(self, period: AnalyticsPeriod) -> None:
        result = generate_progress_analytics([], [], [], period)
        assert result.user_id is None
        assert result.active_days == 0
        assert result.average_session_duration == 0
        assert result.most_active_hour == 0
        assert result.most_active_day == 0
        assert result.risk_level == RiskLevel.HIGH

    def test_user_id_prefers_progress_records(self, period: AnalyticsPeriod) -> None:
        other = uuid4()
        module = ModuleProgress(user_id=other, module_id=uuid4())
        result = generate_progress_analytics([module], [], days_ago(0), period)
        assert result.user_id == other

    @pytest.mark.parametrize(
        "active_days,expected",
        [
            (0, RiskLevel.HIGH),
            (1, RiskLevel.HIGH),
            (2, RiskLevel.MEDIUM),
            (4, RiskLevel.MEDIUM),
            (5, RiskLevel.LOW),
        ],
    )
    def test_risk_level(self, active_days: int, expected: RiskLevel) -> None:
        period = AnalyticsPeriod(start=date(2025, 3, 1), end=date(2025, 3, 12))
        activities = days_ago(*range(active_days))
        result = generate_progress_analytics([], [], activities, period)
        assert result.active_days == active_days
        assert result.risk_level == expected

    def test_period_end_before_start_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            AnalyticsPeriod(start=date(2025, 3, 12), end=date(2025, 3, 1))
