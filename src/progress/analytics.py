"""Learning streaks and period analytics derived from the activity log.

All day boundaries are UTC calendar days.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from uuid import UUID

from src.utils.timestamps import utc_date, utc_now

from .models import (
    RISK_HIGH_ACTIVE_DAYS,
    RISK_MEDIUM_ACTIVE_DAYS,
    STREAK_ACTIVITY_TYPES,
    ActivityType,
    RiskLevel,
)
from .schemas import (
    ActivityRecord,
    AnalyticsPeriod,
    LearningAnalytics,
    LearningStreak,
    LessonProgress,
    ModuleProgress,
)


ONE_DAY = timedelta(days=1)


# ==============================================================================
# Streaks
# ==============================================================================


def _longest_run(dates_desc: list[date]) -> int:
    longest = run = 0
    previous: date | None = None
    for day in dates_desc:
        run = run + 1 if previous is not None and previous - day == ONE_DAY else 1
        longest = max(longest, run)
        previous = day
    return longest


def calculate_learning_streak(
    activities: Iterable[ActivityRecord], as_of: datetime | None = None
) -> LearningStreak:
    """Consecutive days with a lesson or module completion.

    The current streak counts back from the most recent completion day, which
    must be ``as_of``'s day or the day before; it stops at the first missing
    day. The longest streak is taken over the whole history. Completions
    dated after ``as_of`` are ignored.
    """
    today = utc_date(as_of or utc_now())
    completion_days = {
        utc_date(activity.timestamp)
        for activity in activities
        if activity.type in STREAK_ACTIVITY_TYPES
    }
    dates = sorted((d for d in completion_days if d <= today), reverse=True)
    if not dates:
        return LearningStreak()

    current = 0
    if today - dates[0] <= ONE_DAY:
        current = 1
        for newer, older in zip(dates, dates[1:]):
            if newer - older != ONE_DAY:
                break
            current += 1

    return LearningStreak(
        current=current,
        longest=max(current, _longest_run(dates)),
        last_date=dates[0],
    )


# ==============================================================================
# Analytics
# ==============================================================================


def _risk_level(active_days: int) -> RiskLevel:
    if active_days < RISK_HIGH_ACTIVE_DAYS:
        return RiskLevel.HIGH
    if active_days < RISK_MEDIUM_ACTIVE_DAYS:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def _resolve_user_id(
    module_progress: list[ModuleProgress],
    lesson_progress: list[LessonProgress],
    activities: list[ActivityRecord],
) -> UUID | None:
    for records in (module_progress, lesson_progress, activities):
        if records:
            return records[0].user_id
    return None


def _numeric_score(activity: ActivityRecord) -> float | None:
    score = activity.details.get("score")
    if isinstance(score, bool) or not isinstance(score, int | float):
        return None
    return float(score)


def generate_progress_analytics(
    module_progress: list[ModuleProgress],
    lesson_progress: list[LessonProgress],
    activities: list[ActivityRecord],
    period: AnalyticsPeriod,
) -> LearningAnalytics:
    """Aggregate the activity log over ``period`` (inclusive, by UTC date).

    Sessions are the distinct non-null ``session_id`` values. The most active
    hour and weekday (Sunday = 0) are histogram modes, ties going to the
    earliest. Risk is a coarse heuristic on active days: under 2 is high,
    under 5 is medium.
    """
    in_period = [
        a for a in activities if period.start <= utc_date(a.timestamp) <= period.end
    ]

    active_days = len({utc_date(a.timestamp) for a in in_period})
    total_time_spent = sum(a.duration or 0 for a in in_period)
    session_count = len({a.session_id for a in in_period if a.session_id is not None})

    def count(activity_type: ActivityType) -> int:
        return sum(1 for a in in_period if a.type == activity_type)

    lessons_completed = count(ActivityType.LESSON_COMPLETE)

    scores = [
        score
        for a in in_period
        if a.type == ActivityType.ASSESSMENT_COMPLETE
        and (score := _numeric_score(a)) is not None
    ]

    hour_counts = [0] * 24
    day_counts = [0] * 7
    for activity in in_period:
        hour_counts[activity.timestamp.hour] += 1
        day_counts[(activity.timestamp.weekday() + 1) % 7] += 1

    return LearningAnalytics(
        user_id=_resolve_user_id(module_progress, lesson_progress, in_period),
        period=period.label,
        start_date=period.start,
        end_date=period.end,
        active_days=active_days,
        total_time_spent=total_time_spent,
        average_session_duration=(
            total_time_spent / session_count if session_count else 0
        ),
        session_count=session_count,
        lessons_completed=lessons_completed,
        modules_completed=count(ActivityType.MODULE_COMPLETE),
        assessments_taken=count(ActivityType.ASSESSMENT_COMPLETE),
        average_score=sum(scores) / len(scores) if scores else 0,
        notes_created=count(ActivityType.NOTE_CREATE),
        audio_recorded=sum(
            a.duration or 0 for a in in_period if a.type == ActivityType.AUDIO_RECORD
        ),
        downloads_count=sum(
            1 for a in in_period if a.details.get("action") == "download"
        ),
        search_queries=sum(1 for a in in_period if a.details.get("action") == "search"),
        most_active_hour=hour_counts.index(max(hour_counts)),
        most_active_day=day_counts.index(max(day_counts)),
        learning_velocity=lessons_completed / max(1, active_days / 7),
        dropoff_points=[],
        risk_level=_risk_level(active_days),
    )
