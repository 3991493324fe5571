"""Pydantic schemas for workbook progress tracking.

Entity snapshots (module, lesson, assessment, activity), engine inputs
(criteria, weights, progress reports) and the request/response models of
the progress API.
"""

from datetime import date
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from src.utils.timestamps import UTCDateTime, utc_now

from .models import (
    ActivityType,
    AssessmentStatus,
    CompletionReason,
    ProgressStatus,
    RiskLevel,
)


# ==============================================================================
# Progress Records
# ==============================================================================


class MeetsCriteria(BaseModel):
    """Completion checklist of a lesson (one flag per criterion)."""

    model_config = ConfigDict(frozen=True)

    view_all_content: bool = False
    pass_assessment: bool = False
    minimum_time_spent: bool = False
    interaction_required: bool = False

    def unmet(self) -> list[str]:
        """Names of the flags that are still false, in declaration order."""
        return [name for name, met in self.model_dump().items() if not met]


class ProgressRecord(BaseModel):
    """Fields shared by module and lesson progress."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    module_id: UUID
    status: ProgressStatus = ProgressStatus.NOT_STARTED

    started_at: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None
    last_accessed_at: UTCDateTime | None = None
    time_spent: float = Field(default=0, ge=0, description="Total minutes")

    completion_rate: float = Field(default=0, ge=0, le=100)
    unlocked_at: UTCDateTime | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)
    version: int = Field(
        default=0, ge=0, description="Optimistic concurrency counter"
    )


class ModuleProgress(ProgressRecord):
    """Progress of one user through one workbook module."""

    lessons_completed: int = Field(default=0, ge=0)
    total_lessons: int = Field(default=0, ge=0)
    current_lesson_id: UUID | None = None
    current_lesson_position: float | None = Field(default=None, ge=0, le=100)

    completion_reason: CompletionReason | None = None

    assessments_completed: int = Field(default=0, ge=0)
    total_assessments: int = Field(default=0, ge=0)
    average_score: float | None = Field(default=None, ge=0, le=100)
    best_score: float | None = Field(default=None, ge=0, le=100)
    attempts: int = Field(default=0, ge=0)

    expires_at: UTCDateTime | None = None
    access_count: int = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list)


class LessonProgress(ProgressRecord):
    """Progress of one user through one lesson."""

    lesson_id: UUID

    progress: float = Field(
        default=0, ge=0, le=100, description="Raw position within the lesson"
    )
    content_blocks_viewed: list[str] = Field(default_factory=list)
    content_blocks_completed: list[str] = Field(default_factory=list)
    total_content_blocks: int = Field(default=0, ge=0)

    interactions_completed: int = Field(default=0, ge=0)
    total_interactions: int = Field(default=0, ge=0)
    downloads_count: int = Field(default=0, ge=0)
    notes_count: int = Field(default=0, ge=0)

    has_assessment: bool = False
    assessment_score: float | None = Field(default=None, ge=0, le=100)
    assessment_attempts: int = Field(default=0, ge=0)
    assessment_passed: bool = False

    meets_criteria: MeetsCriteria = Field(default_factory=MeetsCriteria)
    prerequisites_met: bool = True

    session_count: int = Field(default=0, ge=0)
    average_session_length: float = Field(default=0, ge=0, description="Minutes")


class AssessmentResponse(BaseModel):
    """Answer to a single assessment question."""

    question_id: str
    answer: Any = None
    is_correct: bool | None = None
    points_earned: float = Field(default=0, ge=0)
    time_spent: float = Field(default=0, ge=0, description="Seconds")
    attempts: int = Field(default=1, ge=1)


class AssessmentProgress(BaseModel):
    """One attempt of one user at one assessment."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    module_id: UUID
    lesson_id: UUID | None = None
    assessment_id: UUID

    attempt_number: int = Field(default=1, ge=1)
    max_attempts: int | None = Field(default=None, ge=1)
    status: AssessmentStatus = AssessmentStatus.NOT_STARTED

    started_at: UTCDateTime | None = None
    submitted_at: UTCDateTime | None = None
    completed_at: UTCDateTime | None = None
    time_spent: float = Field(default=0, ge=0, description="Minutes")
    time_limit: float | None = Field(default=None, ge=1, description="Minutes")

    score: float | None = Field(default=None, ge=0, le=100)
    passing_score: float = Field(ge=0, le=100)
    passed: bool = False
    total_questions: int = Field(default=0, ge=0)
    answered_questions: int = Field(default=0, ge=0)
    correct_answers: int = Field(default=0, ge=0)

    responses: list[AssessmentResponse] = Field(default_factory=list)

    feedback: str | None = None
    allow_review: bool = True
    reviewed_at: UTCDateTime | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)

    @field_validator("max_attempts")
    @classmethod
    def validate_attempt_cap(cls, v: int | None, info: ValidationInfo) -> int | None:
        attempt_number = info.data.get("attempt_number")
        if v is not None and attempt_number is not None and attempt_number > v:
            msg = f"attempt_number {attempt_number} exceeds max_attempts {v}"
            raise ValueError(msg)
        return v

    @model_validator(mode="after")
    def validate_passed(self) -> "AssessmentProgress":
        expected = self.score is not None and self.score >= self.passing_score
        if "passed" not in self.model_fields_set:
            self.passed = expected
        elif self.passed != expected:
            msg = f"passed must be {expected} for score {self.score}"
            raise ValueError(msg)
        return self


# ==============================================================================
# Activity Log
# ==============================================================================


class DeviceInfo(BaseModel):
    type: Literal["desktop", "mobile", "tablet"]
    browser: str | None = None
    os: str | None = None


class Location(BaseModel):
    country: str | None = None
    region: str | None = None
    city: str | None = None


class ActivityRecord(BaseModel):
    """Append-only activity event; never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID
    type: ActivityType

    module_id: UUID | None = None
    lesson_id: UUID | None = None
    assessment_id: UUID | None = None
    note_id: UUID | None = None
    audio_id: UUID | None = None
    session_id: str | None = Field(default=None, description="User session ID")

    details: dict[str, Any] = Field(default_factory=dict)
    duration: float | None = Field(default=None, ge=0, description="Minutes")
    result: str | None = None

    timestamp: UTCDateTime
    device_info: DeviceInfo | None = None
    ip_address: str | None = None
    location: Location | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)


# ==============================================================================
# Engine Inputs
# ==============================================================================


class LessonCompletionCriteria(BaseModel):
    """Completion rules of a lesson, owned by the content catalog."""

    view_all_content: bool = False
    pass_assessment: bool = False
    minimum_time_spent: float = Field(
        default=0, ge=0, description="Minutes; 0 means no requirement"
    )
    interaction_required: bool = False


class ProgressWeights(BaseModel):
    """Axis weights for the overall progress percentage.

    ``time`` is applied to the raw ``progress`` position of a lesson, not to
    elapsed time.
    """

    content: float = Field(default=0.4, ge=0)
    time: float = Field(default=0.2, ge=0)
    assessments: float = Field(default=0.3, ge=0)
    interactions: float = Field(default=0.1, ge=0)


class TransitionContext(BaseModel):
    """Guard inputs that live outside the progress record."""

    prerequisites_met: bool | None = Field(
        default=None,
        description="Overrides the record's own flag (modules carry none)",
    )
    passing_score: float | None = Field(default=None, ge=0, le=100)
    max_attempts: int | None = Field(default=None, ge=1)


class ProgressUpdate(BaseModel):
    """A progress report sent while the learner works through content."""

    time_spent: float = Field(default=0, ge=0, description="Minutes since last report")
    progress: float | None = Field(default=None, ge=0, le=100)
    completion_rate: float | None = Field(default=None, ge=0, le=100)
    viewed_content_blocks: list[str] = Field(default_factory=list)
    completed_content_blocks: list[str] = Field(default_factory=list)
    interactions_completed: int | None = Field(default=None, ge=0)
    lessons_completed: int | None = Field(default=None, ge=0)
    current_lesson_id: UUID | None = None
    assessment_score: float | None = Field(default=None, ge=0, le=100)
    new_session: bool = Field(
        default=False, description="First report of a new study session"
    )
    metadata: dict[str, Any] = Field(default_factory=dict)


class AnalyticsPeriod(BaseModel):
    """Inclusive date window for analytics."""

    start: date
    end: date
    label: Literal["daily", "weekly", "monthly", "yearly", "custom"] = "custom"

    @field_validator("end")
    @classmethod
    def validate_end(cls, v: date, info: ValidationInfo) -> date:
        start = info.data.get("start")
        if start is not None and v < start:
            msg = "end must not be before start"
            raise ValueError(msg)
        return v


# ==============================================================================
# Engine Outputs
# ==============================================================================


class LearningStreak(BaseModel):
    """Consecutive days with at least one completion."""

    current: int = 0
    longest: int = 0
    last_date: date | None = None


class LearningAnalytics(BaseModel):
    """Aggregated learning activity over a period."""

    user_id: UUID | None = None
    period: str
    start_date: date
    end_date: date

    active_days: int
    total_time_spent: float
    average_session_duration: float
    session_count: int

    lessons_completed: int
    modules_completed: int
    assessments_taken: int
    average_score: float

    notes_created: int
    audio_recorded: float = Field(description="Minutes")
    downloads_count: int
    search_queries: int

    most_active_hour: int = Field(ge=0, le=23)
    most_active_day: int = Field(ge=0, le=6, description="Sunday = 0")
    learning_velocity: float = Field(description="Lessons per week")
    dropoff_points: list[str] = Field(default_factory=list)
    risk_level: RiskLevel


# ==============================================================================
# API Schemas
# ==============================================================================


class ModuleTransitionRequest(BaseModel):
    record: ModuleProgress
    target_status: ProgressStatus
    context: TransitionContext = Field(default_factory=TransitionContext)


class LessonTransitionRequest(BaseModel):
    record: LessonProgress
    target_status: ProgressStatus
    context: TransitionContext = Field(default_factory=TransitionContext)


class ProgressDeltaResponse(BaseModel):
    """Fields the caller should merge into its stored record."""

    updates: dict[str, Any]


class ModulePercentageRequest(BaseModel):
    record: ModuleProgress
    weights: ProgressWeights | None = None


class LessonPercentageRequest(BaseModel):
    record: LessonProgress
    weights: ProgressWeights | None = None


class PercentageResponse(BaseModel):
    percentage: int = Field(ge=0, le=100)


class CompletionCheckRequest(BaseModel):
    lesson_progress: LessonProgress
    criteria: LessonCompletionCriteria


class CompletionCheckResponse(BaseModel):
    met: bool
    missing: list[str]
    meets_criteria: MeetsCriteria


class LessonReportRequest(BaseModel):
    record: LessonProgress
    update: ProgressUpdate
    criteria: LessonCompletionCriteria | None = None


class ModuleReportRequest(BaseModel):
    record: ModuleProgress
    update: ProgressUpdate


class StreakRequest(BaseModel):
    activities: list[ActivityRecord]
    as_of: UTCDateTime | None = None


class AnalyticsRequest(BaseModel):
    module_progress: list[ModuleProgress] = Field(default_factory=list)
    lesson_progress: list[LessonProgress] = Field(default_factory=list)
    activities: list[ActivityRecord] = Field(default_factory=list)
    period: AnalyticsPeriod
