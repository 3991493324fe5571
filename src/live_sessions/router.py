"""Live-session API endpoints.

Provides routes for:
- Role permissions and role changes
- Join eligibility checks
- Schedule validation
- Engagement scores and session summaries
- Join links and embed snippets
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, HTTPException, Query, status

from src.utils.validation import ValidationResponse

from .dependencies import SessionEngineDep, handle_session_error
from .models import DEFAULT_EMBED_HEIGHT, DEFAULT_EMBED_WIDTH, ParticipantRole
from .permissions import ParticipantPermissions
from .schemas import (
    EngagementResponse,
    JoinCheckRequest,
    JoinCheckResponse,
    LiveSession,
    RankedParticipant,
    RoleChangeRequest,
    SessionLinksResponse,
    SessionParticipant,
    SessionSummaryResponse,
    TimingRequest,
    TimingResponse,
)
from .service import SessionError


router = APIRouter(prefix="/v1/live-sessions", tags=["live-sessions"])


# ==============================================================================
# Role Endpoints
# ==============================================================================


@router.get(
    "/roles/{role}/permissions",
    response_model=ParticipantPermissions,
    summary="Permissions of a role",
)
async def role_permissions(
    role: ParticipantRole,
    engine: SessionEngineDep,
) -> ParticipantPermissions:
    return engine.permissions_for_role(role)


@router.post(
    "/participants/role",
    response_model=SessionParticipant,
    summary="Change a participant's role",
)
async def change_participant_role(
    data: RoleChangeRequest,
    engine: SessionEngineDep,
) -> SessionParticipant:
    """Return the participant with the new role and its full permission set."""
    try:
        return engine.change_role(data.participant, data.role)
    except SessionError as e:
        raise handle_session_error(e) from e


# ==============================================================================
# Join Endpoints
# ==============================================================================


@router.post(
    "/join-check",
    response_model=JoinCheckResponse,
    summary="Check whether a user may join",
)
async def join_check(
    data: JoinCheckRequest,
    engine: SessionEngineDep,
) -> JoinCheckResponse:
    """Evaluate join eligibility.

    Returns 403 with the denial reason when the user may not join.
    """
    decision = engine.check_join(data.session, data.user_id, data.user_role)
    if not decision.can_join:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=decision.reason,
        )
    return JoinCheckResponse(can_join=True)


@router.get(
    "/{session_id}/links",
    response_model=SessionLinksResponse,
    summary="Join URL and embed code",
)
async def session_links(
    session_id: UUID,
    engine: SessionEngineDep,
    width: int = Query(DEFAULT_EMBED_WIDTH, ge=1),
    height: int = Query(DEFAULT_EMBED_HEIGHT, ge=1),
    autoplay: bool = Query(False),
    controls: bool = Query(True),
) -> SessionLinksResponse:
    return SessionLinksResponse(
        join_url=engine.join_url(session_id),
        embed_code=engine.embed_code(
            session_id,
            width=width,
            height=height,
            autoplay=autoplay,
            controls=controls,
        ),
    )


# ==============================================================================
# Scheduling Endpoints
# ==============================================================================


@router.post(
    "/timing/validate",
    response_model=TimingResponse,
    summary="Validate a session schedule",
)
async def validate_timing(
    data: TimingRequest,
    engine: SessionEngineDep,
) -> TimingResponse:
    """Check start, end and duration bounds.

    Returns 400 with every violated rule.
    """
    result = engine.validate_timing(data.scheduled_start, data.scheduled_end)
    if not result.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid session timing", "errors": result.errors},
        )
    duration = data.scheduled_end - data.scheduled_start
    return TimingResponse(valid=True, duration_minutes=duration.total_seconds() / 60)


# ==============================================================================
# Engagement Endpoints
# ==============================================================================


@router.post(
    "/participants/engagement",
    response_model=EngagementResponse,
    summary="Participant engagement score",
)
async def participant_engagement(
    participant: SessionParticipant,
    engine: SessionEngineDep,
) -> EngagementResponse:
    return EngagementResponse(score=engine.engagement_score(participant))


@router.post(
    "/summary",
    response_model=SessionSummaryResponse,
    summary="Session recap",
)
async def session_summary(
    session: LiveSession,
    engine: SessionEngineDep,
    top: int = Query(5, ge=1, le=50),
) -> SessionSummaryResponse:
    """Recap text plus the most engaged participants."""
    resolved = engine.resolve_status(session)
    summary, ranked = engine.summarize(session, top=top, status=resolved)
    return SessionSummaryResponse(
        status=resolved,
        summary=summary,
        top_participants=[
            RankedParticipant(
                participant_id=participant.id,
                user_id=participant.user_id,
                display_name=participant.display_name,
                score=score,
            )
            for participant, score in ranked
        ],
    )


# ==============================================================================
# Validation Endpoints
# ==============================================================================


@router.post(
    "/validate/{kind}",
    response_model=ValidationResponse,
    summary="Validate a live-session payload",
)
async def validate_session_payload(
    kind: str,
    engine: SessionEngineDep,
    payload: Any = Body(...),
) -> ValidationResponse:
    """Validate a session, participant, poll, question, room or recording."""
    try:
        outcome = engine.validate(payload, kind)
    except SessionError as e:
        raise handle_session_error(e) from e

    if not outcome.valid:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Invalid payload", "errors": outcome.errors},
        )
    return ValidationResponse(valid=True)
