"""Enumerations and constants for workbook progress tracking.

Progress records exist per (user, module) and per (user, lesson). They are
created on first access as ``not_started`` and are never deleted: the
``locked`` and ``expired`` states supersede a record instead.
"""

from enum import Enum


class ProgressStatus(str, Enum):
    """Progress status of a module or lesson."""

    NOT_STARTED = "not_started"  # Created on first access
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"  # Completion rate 100 and all criteria met
    LOCKED = "locked"  # Prerequisites not met
    FAILED = "failed"  # Assessment score below passing score
    EXPIRED = "expired"  # Access window closed (set by storage layer)


class ActivityType(str, Enum):
    """Event types in the append-only activity log."""

    LESSON_START = "lesson_start"
    LESSON_PROGRESS = "lesson_progress"
    LESSON_COMPLETE = "lesson_complete"
    MODULE_START = "module_start"
    MODULE_COMPLETE = "module_complete"
    ASSESSMENT_START = "assessment_start"
    ASSESSMENT_SUBMIT = "assessment_submit"
    ASSESSMENT_COMPLETE = "assessment_complete"
    NOTE_CREATE = "note_create"
    AUDIO_RECORD = "audio_record"
    SESSION_JOIN = "session_join"
    SESSION_LEAVE = "session_leave"


class CompletionReason(str, Enum):
    """Why a module was marked complete."""

    CONTENT_VIEWED = "content_viewed"
    TIME_REQUIREMENT_MET = "time_requirement_met"
    ASSESSMENT_PASSED = "assessment_passed"
    INTERACTION_COMPLETED = "interaction_completed"
    MANUAL_COMPLETION = "manual_completion"
    AUTOMATIC_COMPLETION = "automatic_completion"


class AssessmentStatus(str, Enum):
    """Status of a single assessment attempt."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    GRADED = "graded"
    PASSED = "passed"
    FAILED = "failed"


class RiskLevel(str, Enum):
    """Risk of a learner not completing the workbook."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# Assessments without an explicit passing score use this one
DEFAULT_PASSING_SCORE = 70

# A record counts as complete only at 100% completion rate
FULL_COMPLETION_RATE = 100

# Activity types that count towards a learning streak
STREAK_ACTIVITY_TYPES = frozenset(
    {ActivityType.LESSON_COMPLETE, ActivityType.MODULE_COMPLETE}
)

# Risk heuristic over the queried period: fewer active days than the
# threshold moves the learner into the level (checked high first)
RISK_HIGH_ACTIVE_DAYS = 2
RISK_MEDIUM_ACTIVE_DAYS = 5
