"""Progress engine service layer.

Business logic for:
- Progress state transitions with guard checks
- Weighted progress percentage and completion criteria
- Merging progress reports into record deltas
- Learning streaks and period analytics

The engine performs no I/O. Callers load snapshots, ask the engine for a
decision or a delta, and persist the delta themselves (comparing ``version``
to detect concurrent writers).
"""

from collections.abc import Iterable
from datetime import datetime
from typing import Any

import structlog

from src.config.settings import Settings
from src.utils.validation import ValidationOutcome

from .analytics import calculate_learning_streak, generate_progress_analytics
from .calculations import (
    CompletionCheck,
    apply_progress_update,
    calculate_progress_percentage,
    check_completion_criteria,
    derive_meets_criteria,
)
from .exceptions import MalformedProgressError, ProgressError, UnknownRecordKindError
from .models import DEFAULT_PASSING_SCORE, ProgressStatus
from .schemas import (
    ActivityRecord,
    AnalyticsPeriod,
    LearningAnalytics,
    LearningStreak,
    LessonCompletionCriteria,
    LessonProgress,
    MeetsCriteria,
    ModuleProgress,
    ProgressRecord,
    ProgressUpdate,
    ProgressWeights,
    TransitionContext,
)
from .transitions import TransitionResult, allowed_targets, apply_transition
from .validation import validate_progress_data


logger = structlog.get_logger(__name__)


__all__ = [
    "MalformedProgressError",
    "ProgressEngine",
    "ProgressError",
    "UnknownRecordKindError",
]


def _record_kind(record: ProgressRecord) -> str:
    return "lesson" if isinstance(record, LessonProgress) else "module"


# ==============================================================================
# Progress Engine
# ==============================================================================


class ProgressEngine:
    """Stateless rules engine for module and lesson progress."""

    def __init__(
        self,
        passing_score: float = DEFAULT_PASSING_SCORE,
        weights: ProgressWeights | None = None,
    ):
        """Initialize with the defaults applied when a call supplies none."""
        self.passing_score = passing_score
        self.weights = weights or ProgressWeights()

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProgressEngine":
        return cls(passing_score=settings.progress_default_passing_score)

    def _with_defaults(self, context: TransitionContext | None) -> TransitionContext:
        context = context or TransitionContext()
        if context.passing_score is None:
            context = context.model_copy(update={"passing_score": self.passing_score})
        return context

    # --------------------------------------------------------------------------
    # State machine
    # --------------------------------------------------------------------------

    def transition(
        self,
        record: ProgressRecord,
        target: ProgressStatus | str,
        context: TransitionContext | None = None,
        now: datetime | None = None,
    ) -> TransitionResult:
        """Validate a status change and return the delta to persist."""
        result = apply_transition(record, target, self._with_defaults(context), now)

        if result.valid:
            logger.info(
                "progress_transition_applied",
                kind=_record_kind(record),
                record_id=str(record.id),
                from_status=record.status.value,
                to_status=result.updates["status"].value,
            )
        else:
            logger.info(
                "progress_transition_rejected",
                kind=_record_kind(record),
                record_id=str(record.id),
                from_status=record.status.value,
                to_status=str(getattr(target, "value", target)),
                errors=result.errors,
            )
        return result

    def next_statuses(
        self, record: ProgressRecord, context: TransitionContext | None = None
    ) -> list[ProgressStatus]:
        """Statuses the record may move to right now."""
        return allowed_targets(record, self._with_defaults(context))

    # --------------------------------------------------------------------------
    # Calculations
    # --------------------------------------------------------------------------

    def progress_percentage(
        self, record: ProgressRecord, weights: ProgressWeights | None = None
    ) -> int:
        return calculate_progress_percentage(record, weights or self.weights)

    def check_completion(
        self, lesson_progress: LessonProgress, criteria: LessonCompletionCriteria
    ) -> tuple[CompletionCheck, MeetsCriteria]:
        """Evaluate the criteria and the checklist flags they imply."""
        check = check_completion_criteria(lesson_progress, criteria)
        flags = derive_meets_criteria(lesson_progress, criteria)

        logger.debug(
            "lesson_completion_checked",
            lesson_id=str(lesson_progress.lesson_id),
            met=check.met,
            missing=check.missing,
        )
        return check, flags

    def apply_report(
        self,
        record: ModuleProgress | LessonProgress,
        update: ProgressUpdate,
        criteria: LessonCompletionCriteria | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Merge a progress report into a delta; status is left untouched."""
        delta = apply_progress_update(
            record,
            update,
            criteria=criteria,
            passing_score=self.passing_score,
            now=now,
        )

        logger.debug(
            "progress_report_merged",
            kind=_record_kind(record),
            record_id=str(record.id),
            fields=sorted(delta),
        )
        return delta

    # --------------------------------------------------------------------------
    # Analytics
    # --------------------------------------------------------------------------

    def learning_streak(
        self, activities: Iterable[ActivityRecord], as_of: datetime | None = None
    ) -> LearningStreak:
        return calculate_learning_streak(activities, as_of)

    def analytics(
        self,
        module_progress: list[ModuleProgress],
        lesson_progress: list[LessonProgress],
        activities: list[ActivityRecord],
        period: AnalyticsPeriod,
    ) -> LearningAnalytics:
        result = generate_progress_analytics(
            module_progress, lesson_progress, activities, period
        )

        logger.info(
            "progress_analytics_generated",
            user_id=str(result.user_id) if result.user_id else None,
            start_date=period.start.isoformat(),
            end_date=period.end.isoformat(),
            active_days=result.active_days,
            risk_level=result.risk_level.value,
        )
        return result

    # --------------------------------------------------------------------------
    # Validation
    # --------------------------------------------------------------------------

    def validate(self, data: Any, kind: str) -> ValidationOutcome:
        """Validate a raw payload as a module/lesson/assessment/activity."""
        outcome = validate_progress_data(data, kind)
        if not outcome.valid:
            logger.info(
                "progress_payload_invalid",
                kind=kind,
                error_count=len(outcome.errors),
            )
        return outcome
