"""Pydantic schemas for live sessions.

Session snapshots with their participants and interactive features, plus
the request/response models of the live-session API.
"""

from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    ValidationInfo,
    computed_field,
    field_validator,
)

from src.utils.timestamps import UTCDateTime, utc_now

from .models import (
    ConnectionStatus,
    InvitationStatus,
    ParticipantRole,
    ParticipantStatus,
    SessionStatus,
    SessionType,
)
from .permissions import ParticipantPermissions, get_permissions_for_role


# ==============================================================================
# Participants
# ==============================================================================


class MediaState(BaseModel):
    audio_enabled: bool = False
    video_enabled: bool = False
    screen_sharing: bool = False
    is_muted: bool = Field(default=False, description="Muted by a moderator")
    is_speaking: bool = False
    hand_raised: bool = False
    last_spoke_at: UTCDateTime | None = None


class ParticipantDevice(BaseModel):
    type: Literal["desktop", "mobile", "tablet"]
    os: str
    browser: str


class ParticipantEngagement(BaseModel):
    """Counters accumulated while the participant is in the session."""

    joined_at: UTCDateTime | None = None
    left_at: UTCDateTime | None = None
    total_time_spent: float = Field(default=0, ge=0, description="Minutes")
    messages_count: int = Field(default=0, ge=0)
    reactions_count: int = Field(default=0, ge=0)
    polls_participated: int = Field(default=0, ge=0)
    hand_raised_count: int = Field(default=0, ge=0)
    speaking_time: float = Field(default=0, ge=0, description="Minutes")


class SessionParticipant(BaseModel):
    """One user in one session.

    ``permissions`` is derived from ``role`` on every read and is ignored on
    input, so it can never drift from the role.
    """

    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    user_id: UUID

    display_name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    avatar: str | None = None
    role: ParticipantRole = ParticipantRole.PARTICIPANT
    status: ParticipantStatus = ParticipantStatus.INVITED

    media_state: MediaState = Field(default_factory=MediaState)

    connection_id: str | None = None
    connection_status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    device_info: ParticipantDevice | None = None

    engagement: ParticipantEngagement = Field(default_factory=ParticipantEngagement)
    breakout_room_id: UUID | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    invited_at: UTCDateTime = Field(default_factory=utc_now)
    joined_at: UTCDateTime | None = None
    updated_at: UTCDateTime = Field(default_factory=utc_now)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def permissions(self) -> ParticipantPermissions:
        return get_permissions_for_role(self.role)


class ParticipantInvitation(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    inviter_id: UUID

    email: EmailStr | None = None
    user_id: UUID | None = None
    role: ParticipantRole = ParticipantRole.PARTICIPANT
    custom_message: str | None = None

    status: InvitationStatus = InvitationStatus.PENDING
    expires_at: UTCDateTime | None = None
    responded_at: UTCDateTime | None = None
    joined_at: UTCDateTime | None = None

    invitation_token: str
    invitation_url: str
    requires_registration: bool = False

    sent_at: UTCDateTime = Field(default_factory=utc_now)
    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)


# ==============================================================================
# Interactive Features
# ==============================================================================


class PollOption(BaseModel):
    id: str
    text: str
    color: str | None = None
    image: str | None = None


class PollSettings(BaseModel):
    allow_multiple_answers: bool = False
    allow_text_response: bool = False
    show_results: Literal["never", "after_vote", "after_close", "live"] = "after_vote"
    anonymous_voting: bool = False
    time_limit: int | None = Field(default=None, ge=1, description="Seconds")
    correct_answers: list[str] | None = None


class PollResponse(BaseModel):
    participant_id: UUID
    selected_options: list[str] | None = None
    text_response: str | None = None
    submitted_at: UTCDateTime


class PollOptionResult(BaseModel):
    option_id: str
    votes: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100)


class PollAnalytics(BaseModel):
    total_votes: int = Field(default=0, ge=0)
    participation_rate: float = Field(default=0, ge=0, le=100)
    option_results: list[PollOptionResult] | None = None
    text_responses: list[str] | None = None
    average_rating: float | None = Field(default=None, ge=0, le=10)


class SessionPoll(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    created_by: UUID

    question: str = Field(min_length=1, max_length=500)
    description: str | None = Field(default=None, max_length=1000)
    type: Literal["multiple_choice", "single_choice", "text", "rating", "yes_no"]
    options: list[PollOption] | None = None
    settings: PollSettings = Field(default_factory=PollSettings)

    status: Literal["draft", "active", "closed"] = "draft"
    started_at: UTCDateTime | None = None
    closed_at: UTCDateTime | None = None
    time_remaining: int | None = Field(default=None, ge=0, description="Seconds")

    responses: list[PollResponse] = Field(default_factory=list)
    analytics: PollAnalytics = Field(default_factory=PollAnalytics)

    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)


class Attachment(BaseModel):
    type: Literal["image", "file", "link"]
    url: str
    filename: str | None = None


class QAAnswer(BaseModel):
    content: str
    answered_by: UUID
    answered_at: UTCDateTime
    format: Literal["text", "markdown", "audio", "video"] = "text"
    attachments: list[Attachment] | None = None


class QAVote(BaseModel):
    participant_id: UUID
    type: Literal["up", "down"]
    voted_at: UTCDateTime


class QAQuestion(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    asked_by: UUID

    question: str = Field(min_length=1, max_length=1000)
    details: str | None = Field(default=None, max_length=2000)
    category: str | None = Field(default=None, max_length=50)
    is_anonymous: bool = False

    status: Literal["pending", "answered", "dismissed"] = "pending"
    priority: Literal["low", "normal", "high"] = "normal"
    upvotes: int = Field(default=0, ge=0)
    downvotes: int = Field(default=0, ge=0)

    answer: QAAnswer | None = None
    votes: list[QAVote] = Field(default_factory=list)

    asked_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)


class BreakoutRoomSettings(BaseModel):
    allow_join_after_start: bool = True
    auto_assignment: bool = False
    allow_participant_exchange: bool = False
    time_limit: int | None = Field(default=None, ge=1, description="Minutes")
    record_session: bool = False


class BreakoutRoomFeatures(BaseModel):
    has_whiteboard: bool = False
    has_file_sharing: bool = False
    has_screen_sharing: bool = False
    has_chat: bool = True


class BreakoutRoomActivity(BaseModel):
    message_count: int = Field(default=0, ge=0)
    speaking_time: dict[str, float] = Field(
        default_factory=dict, description="Minutes per participant id"
    )
    last_activity: UTCDateTime = Field(default_factory=utc_now)

    @field_validator("speaking_time")
    @classmethod
    def validate_speaking_time(cls, v: dict[str, float]) -> dict[str, float]:
        if any(minutes < 0 for minutes in v.values()):
            msg = "speaking time must not be negative"
            raise ValueError(msg)
        return v


class BreakoutRoom(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    created_by: UUID

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    capacity: int = Field(ge=2, le=50)
    is_active: bool = False

    participants: list[UUID] = Field(default_factory=list)
    host_id: UUID | None = None

    settings: BreakoutRoomSettings = Field(default_factory=BreakoutRoomSettings)
    features: BreakoutRoomFeatures = Field(default_factory=BreakoutRoomFeatures)
    activity: BreakoutRoomActivity = Field(default_factory=BreakoutRoomActivity)

    created_at: UTCDateTime = Field(default_factory=utc_now)
    started_at: UTCDateTime | None = None
    ended_at: UTCDateTime | None = None
    updated_at: UTCDateTime = Field(default_factory=utc_now)


class SessionMessage(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    sender_id: UUID
    content: str
    type: Literal["text", "file", "system"] = "text"
    timestamp: UTCDateTime
    is_private: bool = False
    recipient_id: UUID | None = None
    is_deleted: bool = False


# ==============================================================================
# Recordings
# ==============================================================================


class RecordingFile(BaseModel):
    type: Literal["video", "audio", "screen", "chat", "whiteboard"]
    url: str
    format: str
    file_size: int = Field(ge=0, description="Bytes")
    duration: float | None = Field(default=None, ge=0, description="Seconds")
    quality: Literal["low", "medium", "high"] = "medium"


class RecordingSettings(BaseModel):
    record_audio: bool = True
    record_video: bool = True
    record_screen: bool = False
    record_chat: bool = False
    record_whiteboard: bool = False
    record_breakout_rooms: bool = False


class RecordingProcessing(BaseModel):
    started_at: UTCDateTime
    completed_at: UTCDateTime | None = None
    progress: float = Field(default=0, ge=0, le=100)
    error: str | None = None


class SessionRecording(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: UUID
    recorded_by: UUID

    title: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    status: Literal["recording", "processing", "ready", "failed"] = "recording"

    files: list[RecordingFile] = Field(default_factory=list)
    settings: RecordingSettings = Field(default_factory=RecordingSettings)
    processing: RecordingProcessing

    is_public: bool = False
    share_url: str | None = None
    download_count: int = Field(default=0, ge=0)
    view_count: int = Field(default=0, ge=0)

    started_at: UTCDateTime
    ended_at: UTCDateTime | None = None
    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)


# ==============================================================================
# Live Session
# ==============================================================================


class SessionCapacity(BaseModel):
    maximum: int = Field(ge=1)
    waiting_room: int = Field(default=0, ge=0)
    breakout_rooms: int = Field(default=0, ge=0)


class SessionSettings(BaseModel):
    """Entry, media, interaction, recording and security toggles."""

    # Entry
    require_approval: bool = False
    allow_guests: bool = False
    require_password: bool = False
    password: str | None = None
    enable_waiting_room: bool = False

    # Media
    mute_on_entry: bool = True
    camera_on_entry: bool = False
    allow_unmute: bool = True
    allow_video: bool = True
    allow_screen_share: bool = False

    # Interaction
    allow_chat: bool = True
    allow_private_chat: bool = False
    allow_reactions: bool = True
    allow_polls: bool = True
    allow_qa: bool = True
    allow_hand_raise: bool = True

    # Recording
    auto_record: bool = False
    recording_consent: bool = False
    recording_notification: bool = True

    # Security
    enable_encryption: bool = False
    restrict_copy_paste: bool = False
    prevent_screen_capture: bool = False
    session_lock: bool = False


class SharedScreen(BaseModel):
    participant_id: UUID
    type: Literal["screen", "window", "tab"]
    started_at: UTCDateTime


class SessionState(BaseModel):
    current_slide: int | None = Field(default=None, ge=0)
    shared_screen: SharedScreen | None = None
    active_poll: UUID | None = None
    waiting_room_count: int = Field(default=0, ge=0)
    locked_until: UTCDateTime | None = None


class LiveSession(BaseModel):
    """Snapshot of a scheduled or running session."""

    id: UUID = Field(default_factory=uuid4)
    host_id: UUID

    module_id: UUID | None = None
    lesson_id: UUID | None = None
    course_id: UUID | None = None
    organization_id: UUID | None = None

    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    type: SessionType = SessionType.WORKSHOP
    status: SessionStatus = SessionStatus.SCHEDULED

    scheduled_start: UTCDateTime
    scheduled_end: UTCDateTime
    actual_start: UTCDateTime | None = None
    actual_end: UTCDateTime | None = None
    timezone: str = "UTC"
    duration: int = Field(ge=1, description="Planned minutes")

    capacity: SessionCapacity
    settings: SessionSettings = Field(default_factory=SessionSettings)

    participants: list[SessionParticipant] = Field(default_factory=list)
    current_participant_count: int = Field(default=0, ge=0)
    peak_participant_count: int = Field(default=0, ge=0)

    polls: list[SessionPoll] = Field(default_factory=list)
    questions: list[QAQuestion] = Field(default_factory=list)
    breakout_rooms: list[BreakoutRoom] = Field(default_factory=list)
    messages: list[SessionMessage] = Field(default_factory=list)

    recordings: list[SessionRecording] = Field(default_factory=list)
    is_recording: bool = False
    recording_started_at: UTCDateTime | None = None

    state: SessionState = Field(default_factory=SessionState)

    invitations: list[ParticipantInvitation] = Field(default_factory=list)
    join_url: str | None = None
    embed_code: str | None = None
    is_public: bool = False
    public_join_enabled: bool = False

    metadata: dict[str, Any] = Field(default_factory=dict)
    tags: list[str] = Field(default_factory=list)

    created_at: UTCDateTime = Field(default_factory=utc_now)
    updated_at: UTCDateTime = Field(default_factory=utc_now)
    deleted_at: UTCDateTime | None = None

    @field_validator("current_participant_count")
    @classmethod
    def validate_participant_count(cls, v: int, info: ValidationInfo) -> int:
        capacity = info.data.get("capacity")
        if capacity is not None and v > capacity.maximum:
            msg = f"current_participant_count {v} exceeds capacity {capacity.maximum}"
            raise ValueError(msg)
        return v


# ==============================================================================
# API Schemas
# ==============================================================================


class JoinCheckRequest(BaseModel):
    session: LiveSession
    user_id: UUID
    user_role: ParticipantRole | None = None


class JoinCheckResponse(BaseModel):
    can_join: bool


class TimingRequest(BaseModel):
    scheduled_start: UTCDateTime
    scheduled_end: UTCDateTime


class TimingResponse(BaseModel):
    valid: bool
    duration_minutes: float


class EngagementResponse(BaseModel):
    score: int = Field(ge=0, le=100)


class RoleChangeRequest(BaseModel):
    participant: SessionParticipant
    role: ParticipantRole


class RankedParticipant(BaseModel):
    participant_id: UUID
    user_id: UUID
    display_name: str
    score: int = Field(ge=0, le=100)


class SessionSummaryResponse(BaseModel):
    status: SessionStatus
    summary: str
    top_participants: list[RankedParticipant]


class SessionLinksResponse(BaseModel):
    join_url: str
    embed_code: str
