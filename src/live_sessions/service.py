"""Live-session participant engine.

Business logic for:
- Role-derived participant permissions and role changes
- Join eligibility (status, lock, capacity, access)
- Schedule validation
- Engagement scoring and session summaries
- Join URLs and embed snippets
"""

from datetime import datetime
from typing import Any
from urllib.parse import urlencode
from uuid import UUID

import structlog

from src.config.settings import Settings
from src.utils.timestamps import utc_now
from src.utils.validation import ValidationOutcome

from .engagement import (
    calculate_engagement_score,
    generate_session_summary,
    rank_participants_by_engagement,
)
from .exceptions import MalformedSessionError, SessionError, UnknownSessionKindError
from .models import (
    DEFAULT_EMBED_HEIGHT,
    DEFAULT_EMBED_WIDTH,
    MAX_SESSION_DURATION_MINUTES,
    MIN_SESSION_DURATION_MINUTES,
    ParticipantRole,
    SessionStatus,
)
from .permissions import ParticipantPermissions, get_permissions_for_role
from .rules import (
    JoinDecision,
    TimingValidation,
    can_user_join_session,
    resolve_session_status,
    validate_session_timing,
)
from .schemas import LiveSession, SessionParticipant
from .validation import validate_session_data


logger = structlog.get_logger(__name__)

DEFAULT_BASE_URL = "https://app.example.com"


__all__ = [
    "MalformedSessionError",
    "SessionError",
    "SessionParticipantEngine",
    "UnknownSessionKindError",
    "generate_embed_code",
    "generate_join_url",
]


# ==============================================================================
# Links
# ==============================================================================


def generate_join_url(session_id: UUID | str, base_url: str = DEFAULT_BASE_URL) -> str:
    """Public join URL of a session."""
    return f"{base_url.rstrip('/')}/sessions/{session_id}/join"


def generate_embed_code(
    session_id: UUID | str,
    base_url: str = DEFAULT_BASE_URL,
    width: int = DEFAULT_EMBED_WIDTH,
    height: int = DEFAULT_EMBED_HEIGHT,
    autoplay: bool = False,
    controls: bool = True,
) -> str:
    """HTML iframe snippet that embeds the session's join page."""
    query = urlencode(
        {
            "embed": "true",
            "autoplay": str(autoplay).lower(),
            "controls": str(controls).lower(),
        }
    )
    src = f"{generate_join_url(session_id, base_url)}?{query}"
    return (
        f'<iframe src="{src}" width="{width}" height="{height}" '
        'frameborder="0" allowfullscreen '
        'allow="camera; microphone; display-capture"></iframe>'
    )


# ==============================================================================
# Session Participant Engine
# ==============================================================================


class SessionParticipantEngine:
    """Stateless rules engine for live-session participants."""

    def __init__(
        self,
        min_duration_minutes: int = MIN_SESSION_DURATION_MINUTES,
        max_duration_minutes: int = MAX_SESSION_DURATION_MINUTES,
        public_base_url: str = DEFAULT_BASE_URL,
    ):
        self.min_duration_minutes = min_duration_minutes
        self.max_duration_minutes = max_duration_minutes
        self.public_base_url = public_base_url

    @classmethod
    def from_settings(cls, settings: Settings) -> "SessionParticipantEngine":
        return cls(
            min_duration_minutes=settings.session_min_duration_minutes,
            max_duration_minutes=settings.session_max_duration_minutes,
            public_base_url=settings.public_base_url,
        )

    # --------------------------------------------------------------------------
    # Roles
    # --------------------------------------------------------------------------

    def permissions_for_role(self, role: ParticipantRole) -> ParticipantPermissions:
        return get_permissions_for_role(role)

    def change_role(
        self,
        participant: SessionParticipant,
        role: ParticipantRole | str,
        now: datetime | None = None,
    ) -> SessionParticipant:
        """Return a copy of ``participant`` with a new role.

        The permission set follows the new role in full; nothing carries
        over from the old one.
        """
        try:
            role = ParticipantRole(role)
        except ValueError as e:
            msg = f"Unknown participant role: {role!r}"
            raise MalformedSessionError(msg) from e

        updated = participant.model_copy(
            update={"role": role, "updated_at": now or utc_now()}
        )

        logger.info(
            "participant_role_changed",
            session_id=str(participant.session_id),
            participant_id=str(participant.id),
            from_role=participant.role.value,
            to_role=role.value,
        )
        return updated

    # --------------------------------------------------------------------------
    # Joining
    # --------------------------------------------------------------------------

    def check_join(
        self,
        session: LiveSession,
        user_id: UUID,
        user_role: ParticipantRole | None = None,
        now: datetime | None = None,
    ) -> JoinDecision:
        decision = can_user_join_session(session, user_id, user_role, now)

        if decision.can_join:
            logger.info(
                "session_join_allowed",
                session_id=str(session.id),
                user_id=str(user_id),
                user_role=user_role.value if user_role else None,
            )
        else:
            logger.info(
                "session_join_denied",
                session_id=str(session.id),
                user_id=str(user_id),
                reason=decision.reason,
            )
        return decision

    def resolve_status(
        self, session: LiveSession, now: datetime | None = None
    ) -> SessionStatus:
        return resolve_session_status(session, now)

    # --------------------------------------------------------------------------
    # Scheduling
    # --------------------------------------------------------------------------

    def validate_timing(
        self,
        scheduled_start: datetime,
        scheduled_end: datetime,
        now: datetime | None = None,
    ) -> TimingValidation:
        """Check a schedule against the configured duration bounds."""
        result = validate_session_timing(
            scheduled_start,
            scheduled_end,
            now,
            min_minutes=self.min_duration_minutes,
            max_minutes=self.max_duration_minutes,
        )
        if not result.valid:
            logger.info("session_timing_invalid", errors=result.errors)
        return result

    # --------------------------------------------------------------------------
    # Engagement
    # --------------------------------------------------------------------------

    def engagement_score(self, participant: SessionParticipant) -> int:
        return calculate_engagement_score(participant)

    def summarize(
        self,
        session: LiveSession,
        top: int = 5,
        status: SessionStatus | None = None,
    ) -> tuple[str, list[tuple[SessionParticipant, int]]]:
        """Session recap text and the most engaged participants."""
        summary = generate_session_summary(session, status)
        ranked = rank_participants_by_engagement(session, limit=top)

        logger.info(
            "session_summary_generated",
            session_id=str(session.id),
            participant_count=len(session.participants),
        )
        return summary, ranked

    # --------------------------------------------------------------------------
    # Links
    # --------------------------------------------------------------------------

    def join_url(self, session_id: UUID) -> str:
        return generate_join_url(session_id, self.public_base_url)

    def embed_code(self, session_id: UUID, **options: Any) -> str:
        return generate_embed_code(session_id, self.public_base_url, **options)

    # --------------------------------------------------------------------------
    # Validation
    # --------------------------------------------------------------------------

    def validate(self, data: Any, kind: str) -> ValidationOutcome:
        """Validate a raw session/participant/poll/question/room/recording."""
        outcome = validate_session_data(data, kind)
        if not outcome.valid:
            logger.info(
                "session_payload_invalid",
                kind=kind,
                error_count=len(outcome.errors),
            )
        return outcome
