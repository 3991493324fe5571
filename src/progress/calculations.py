"""Progress percentage, completion criteria and progress-report merging."""

from datetime import datetime
from decimal import Decimal
from typing import Any, NamedTuple

from src.utils.numbers import round_half_up, to_decimal
from src.utils.timestamps import utc_now

from .exceptions import MalformedProgressError
from .models import DEFAULT_PASSING_SCORE
from .schemas import (
    LessonCompletionCriteria,
    LessonProgress,
    MeetsCriteria,
    ModuleProgress,
    ProgressRecord,
    ProgressUpdate,
    ProgressWeights,
)


HUNDRED = Decimal(100)


class CompletionCheck(NamedTuple):
    """Whether a lesson satisfies its completion criteria."""

    met: bool
    missing: list[str]


def _ratio_percent(done: int, total: int) -> Decimal:
    return min(HUNDRED, to_decimal(done) * HUNDRED / to_decimal(total))


def calculate_progress_percentage(
    record: ProgressRecord, weights: ProgressWeights | None = None
) -> int:
    """Weighted progress over the axes the record has data for.

    Axes:
        content: lessons (module) or content blocks (lesson) completed
        assessments: the lesson's assessment score, when recorded
        interactions: interactions completed out of the lesson total
        time: the lesson's raw ``progress`` position

    An axis with no data (zero total, missing score) is left out and the sum
    is divided by the weights actually used, so absent axes do not drag the
    result down. Returns 0 when no axis applies.
    """
    if not isinstance(record, ProgressRecord):
        msg = f"Expected a progress record, got {type(record).__name__}"
        raise MalformedProgressError(msg)

    weights = weights or ProgressWeights()
    axes: list[tuple[Decimal, float]] = []

    if isinstance(record, ModuleProgress):
        if record.total_lessons > 0:
            axes.append(
                (
                    _ratio_percent(record.lessons_completed, record.total_lessons),
                    weights.content,
                )
            )
    elif isinstance(record, LessonProgress):
        if record.total_content_blocks > 0:
            completed = len(set(record.content_blocks_completed))
            axes.append(
                (
                    _ratio_percent(completed, record.total_content_blocks),
                    weights.content,
                )
            )
        if record.assessment_score is not None:
            axes.append((to_decimal(record.assessment_score), weights.assessments))
        if record.total_interactions > 0:
            axes.append(
                (
                    _ratio_percent(
                        record.interactions_completed, record.total_interactions
                    ),
                    weights.interactions,
                )
            )
        # Position within the lesson stands in for the time axis
        axes.append((to_decimal(record.progress), weights.time))

    total_weight = sum((to_decimal(w) for _, w in axes), Decimal(0))
    if total_weight == 0:
        return 0

    weighted_sum = sum((value * to_decimal(w) for value, w in axes), Decimal(0))
    return max(0, min(100, round_half_up(weighted_sum / total_weight)))


def check_completion_criteria(
    lesson_progress: LessonProgress, criteria: LessonCompletionCriteria
) -> CompletionCheck:
    """Evaluate each criterion independently and list the unmet ones."""
    missing = []

    if (
        criteria.view_all_content
        and len(set(lesson_progress.content_blocks_viewed))
        < lesson_progress.total_content_blocks
    ):
        missing.append("View all content blocks")

    if (
        criteria.pass_assessment
        and lesson_progress.has_assessment
        and not lesson_progress.assessment_passed
    ):
        missing.append("Pass assessment")

    if (
        criteria.minimum_time_spent > 0
        and lesson_progress.time_spent < criteria.minimum_time_spent
    ):
        missing.append(f"Spend at least {criteria.minimum_time_spent:g} minutes")

    if (
        criteria.interaction_required
        and lesson_progress.interactions_completed
        < lesson_progress.total_interactions
    ):
        missing.append("Complete all required interactions")

    return CompletionCheck(not missing, missing)


def derive_meets_criteria(
    lesson_progress: LessonProgress, criteria: LessonCompletionCriteria
) -> MeetsCriteria:
    """Recompute the checklist flags; a criterion that is not required is met."""
    return MeetsCriteria(
        view_all_content=(
            not criteria.view_all_content
            or len(set(lesson_progress.content_blocks_viewed))
            >= lesson_progress.total_content_blocks
        ),
        pass_assessment=(
            not criteria.pass_assessment
            or not lesson_progress.has_assessment
            or lesson_progress.assessment_passed
        ),
        minimum_time_spent=(
            criteria.minimum_time_spent <= 0
            or lesson_progress.time_spent >= criteria.minimum_time_spent
        ),
        interaction_required=(
            not criteria.interaction_required
            or lesson_progress.interactions_completed
            >= lesson_progress.total_interactions
        ),
    )


def _merge_unique(existing: list[str], new: list[str]) -> list[str]:
    merged = list(existing)
    seen = set(existing)
    for item in new:
        if item not in seen:
            merged.append(item)
            seen.add(item)
    return merged


def apply_progress_update(
    record: ProgressRecord,
    update: ProgressUpdate,
    *,
    criteria: LessonCompletionCriteria | None = None,
    passing_score: float = DEFAULT_PASSING_SCORE,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Merge a progress report into a delta for ``record``.

    Time is accumulated, content block lists are unioned, counters and the
    position are replaced with the reported values. When ``criteria`` is
    given for a lesson, ``meets_criteria`` is recomputed from the merged
    state. Status is never changed here; use ``apply_transition``.
    """
    if not isinstance(record, ProgressRecord):
        msg = f"Expected a progress record, got {type(record).__name__}"
        raise MalformedProgressError(msg)

    now = now or utc_now()
    time_spent = record.time_spent + update.time_spent

    delta: dict[str, Any] = {
        "time_spent": time_spent,
        "last_accessed_at": now,
        "updated_at": now,
        "version": record.version + 1,
    }
    if update.completion_rate is not None:
        delta["completion_rate"] = update.completion_rate
    if update.metadata:
        delta["metadata"] = {**record.metadata, **update.metadata}

    if isinstance(record, ModuleProgress):
        delta["access_count"] = record.access_count + 1
        if update.lessons_completed is not None:
            delta["lessons_completed"] = update.lessons_completed
        if update.current_lesson_id is not None:
            delta["current_lesson_id"] = update.current_lesson_id
        if update.progress is not None:
            delta["current_lesson_position"] = update.progress
        return delta

    if isinstance(record, LessonProgress):
        if update.progress is not None:
            delta["progress"] = update.progress
        if update.viewed_content_blocks:
            delta["content_blocks_viewed"] = _merge_unique(
                record.content_blocks_viewed, update.viewed_content_blocks
            )
        if update.completed_content_blocks:
            delta["content_blocks_completed"] = _merge_unique(
                record.content_blocks_completed, update.completed_content_blocks
            )
        if update.interactions_completed is not None:
            delta["interactions_completed"] = update.interactions_completed
        if update.assessment_score is not None:
            delta["assessment_score"] = update.assessment_score
            delta["assessment_attempts"] = record.assessment_attempts + 1
            delta["assessment_passed"] = update.assessment_score >= passing_score

        if update.new_session:
            session_count = record.session_count + 1
            delta["session_count"] = session_count
            delta["average_session_length"] = time_spent / session_count

        if criteria is not None:
            merged = record.model_copy(update=delta)
            delta["meets_criteria"] = derive_meets_criteria(merged, criteria)

    return delta
