"""Enumerations and tunable constants for live sessions."""

from decimal import Decimal
from enum import Enum


class SessionStatus(str, Enum):
    """Lifecycle status of a live session."""

    SCHEDULED = "scheduled"
    WAITING = "waiting"  # Start time reached, host not live yet
    LIVE = "live"
    PAUSED = "paused"
    ENDED = "ended"
    CANCELLED = "cancelled"


class SessionType(str, Enum):
    WORKSHOP = "workshop"
    LECTURE = "lecture"
    DISCUSSION = "discussion"
    Q_AND_A = "q_and_a"
    OFFICE_HOURS = "office_hours"
    COLLABORATION = "collaboration"
    PRESENTATION = "presentation"
    TRAINING = "training"


class ParticipantRole(str, Enum):
    """Participant roles, most privileged first."""

    HOST = "host"
    CO_HOST = "co_host"
    PRESENTER = "presenter"
    MODERATOR = "moderator"
    PARTICIPANT = "participant"
    OBSERVER = "observer"


class ParticipantStatus(str, Enum):
    INVITED = "invited"
    JOINED = "joined"
    LEFT = "left"
    KICKED = "kicked"
    BANNED = "banned"


class ConnectionStatus(str, Enum):
    CONNECTING = "connecting"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    DISCONNECTED = "disconnected"
    FAILED = "failed"


class InvitationStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    EXPIRED = "expired"


# Sessions in these states accept no one and never change again
TERMINAL_STATUSES = frozenset({SessionStatus.ENDED, SessionStatus.CANCELLED})


# ==============================================================================
# Engagement Scoring
# ==============================================================================

# Counter values at which each engagement axis saturates. Heuristic
# ceilings, not limits on the counters themselves.
ENGAGEMENT_CAPS: dict[str, Decimal] = {
    "messages": Decimal(50),
    "reactions": Decimal(20),
    "polls": Decimal(10),
    "hand_raises": Decimal(5),
    "speaking_minutes": Decimal(30),
}

# Sum to 1
ENGAGEMENT_WEIGHTS: dict[str, Decimal] = {
    "messages": Decimal("0.30"),
    "reactions": Decimal("0.20"),
    "polls": Decimal("0.25"),
    "hand_raises": Decimal("0.15"),
    "speaking_minutes": Decimal("0.10"),
}


# ==============================================================================
# Scheduling
# ==============================================================================

MIN_SESSION_DURATION_MINUTES = 5
MAX_SESSION_DURATION_MINUTES = 480  # 8 hours

DEFAULT_EMBED_WIDTH = 800
DEFAULT_EMBED_HEIGHT = 600
