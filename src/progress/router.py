"""Progress engine API endpoints.

Provides routes for:
- Module and lesson status transitions
- Progress percentage and completion checks
- Progress report merging
- Learning streaks and analytics
- Payload validation

Every request carries full record snapshots; responses are decisions or
deltas for the caller to persist.
"""

from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from src.utils.validation import ValidationResponse

from .dependencies import ProgressEngineDep, handle_progress_error
from .schemas import (
    AnalyticsRequest,
    CompletionCheckRequest,
    CompletionCheckResponse,
    LearningAnalytics,
    LearningStreak,
    LessonPercentageRequest,
    LessonReportRequest,
    LessonTransitionRequest,
    ModulePercentageRequest,
    ModuleReportRequest,
    ModuleTransitionRequest,
    PercentageResponse,
    ProgressDeltaResponse,
    StreakRequest,
)
from .service import ProgressError
from .transitions import TransitionResult


router = APIRouter(prefix="/v1/progress", tags=["progress"])


def _transition_response(result: TransitionResult) -> ProgressDeltaResponse:
    """Turn a rejected transition into a 409 carrying every reason."""
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": "Transition rejected", "errors": result.errors},
        )
    return ProgressDeltaResponse(updates=result.updates)


# ==============================================================================
# Transition Endpoints
# ==============================================================================


@router.post(
    "/modules/transitions",
    response_model=ProgressDeltaResponse,
    summary="Transition module progress",
)
async def transition_module(
    data: ModuleTransitionRequest,
    engine: ProgressEngineDep,
) -> ProgressDeltaResponse:
    """Move a module record to a new status.

    Returns the fields to merge, or 409 with the unmet conditions.
    """
    try:
        result = engine.transition(data.record, data.target_status, data.context)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return _transition_response(result)


@router.post(
    "/lessons/transitions",
    response_model=ProgressDeltaResponse,
    summary="Transition lesson progress",
)
async def transition_lesson(
    data: LessonTransitionRequest,
    engine: ProgressEngineDep,
) -> ProgressDeltaResponse:
    """Move a lesson record to a new status.

    Completion requires a 100% completion rate and every checklist flag.
    """
    try:
        result = engine.transition(data.record, data.target_status, data.context)
    except ProgressError as e:
        raise handle_progress_error(e) from e
    return _transition_response(result)


# ==============================================================================
# Calculation Endpoints
# ==============================================================================


@router.post(
    "/modules/percentage",
    response_model=PercentageResponse,
    summary="Module progress percentage",
)
async def module_percentage(
    data: ModulePercentageRequest,
    engine: ProgressEngineDep,
) -> PercentageResponse:
    return PercentageResponse(
        percentage=engine.progress_percentage(data.record, data.weights)
    )


@router.post(
    "/lessons/percentage",
    response_model=PercentageResponse,
    summary="Lesson progress percentage",
)
async def lesson_percentage(
    data: LessonPercentageRequest,
    engine: ProgressEngineDep,
) -> PercentageResponse:
    return PercentageResponse(
        percentage=engine.progress_percentage(data.record, data.weights)
    )


@router.post(
    "/lessons/completion-check",
    response_model=CompletionCheckResponse,
    summary="Check lesson completion criteria",
)
async def lesson_completion_check(
    data: CompletionCheckRequest,
    engine: ProgressEngineDep,
) -> CompletionCheckResponse:
    """Evaluate a lesson against its catalog criteria.

    ``meets_criteria`` holds the recomputed checklist to store on the lesson.
    """
    check, flags = engine.check_completion(data.lesson_progress, data.criteria)
    return CompletionCheckResponse(
        met=check.met, missing=check.missing, meets_criteria=flags
    )


# ==============================================================================
# Progress Report Endpoints
# ==============================================================================


@router.post(
    "/lessons/report",
    response_model=ProgressDeltaResponse,
    summary="Merge a lesson progress report",
)
async def report_lesson_progress(
    data: LessonReportRequest,
    engine: ProgressEngineDep,
) -> ProgressDeltaResponse:
    """Merge a lesson report; with ``criteria`` the checklist is recomputed."""
    return ProgressDeltaResponse(
        updates=engine.apply_report(data.record, data.update, data.criteria)
    )


@router.post(
    "/modules/report",
    response_model=ProgressDeltaResponse,
    summary="Merge a module progress report",
)
async def report_module_progress(
    data: ModuleReportRequest,
    engine: ProgressEngineDep,
) -> ProgressDeltaResponse:
    return ProgressDeltaResponse(updates=engine.apply_report(data.record, data.update))


# ==============================================================================
# Analytics Endpoints
# ==============================================================================


@router.post(
    "/streak",
    response_model=LearningStreak,
    summary="Learning streak",
)
async def learning_streak(
    data: StreakRequest,
    engine: ProgressEngineDep,
) -> LearningStreak:
    """Consecutive UTC days with a lesson or module completion."""
    return engine.learning_streak(data.activities, data.as_of)


@router.post(
    "/analytics",
    response_model=LearningAnalytics,
    summary="Learning analytics for a period",
)
async def learning_analytics(
    data: AnalyticsRequest,
    engine: ProgressEngineDep,
) -> LearningAnalytics:
    return engine.analytics(
        data.module_progress, data.lesson_progress, data.activities, data.period
    )


# ==============================================================================
# Validation Endpoints
# ==============================================================================


@router.post(
    "/validate/{kind}",
    response_model=ValidationResponse,
    summary="Validate a progress payload",
)
async def validate_progress_payload(
    kind: str,
    engine: ProgressEngineDep,
    payload: Any = Body(...),
) -> ValidationResponse:
    """Validate a module, lesson, assessment or activity payload.

    Returns 400 with ``field: message`` errors when the shape is wrong.
    """
    try:
        outcome = engine.validate(payload, kind)
    except ProgressError as e:
        raise handle_progress_error(e) from e

    if not outcome.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid payload", "errors": outcome.errors},
        )
    return ValidationResponse(valid=True)
