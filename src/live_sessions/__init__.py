"""Live-session participant module.

Provides:
- Role-derived participant permissions
- Join eligibility and schedule validation
- Engagement scoring and session summaries
"""

from .models import ParticipantRole, SessionStatus
from .permissions import ParticipantPermissions, get_permissions_for_role
from .schemas import LiveSession, SessionParticipant
from .service import SessionError, SessionParticipantEngine


__all__ = [
    "LiveSession",
    "ParticipantPermissions",
    "ParticipantRole",
    "SessionError",
    "SessionParticipant",
    "SessionParticipantEngine",
    "SessionStatus",
    "get_permissions_for_role",
]
