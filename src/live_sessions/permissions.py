"""Role-based permissions for live-session participants.

Each role maps to a complete, fixed set of ten flags:
- HOST: everything
- CO_HOST: everything except kicking
- PRESENTER: speak, video, screen share, chat, polls
- MODERATOR: speak, video, chat, moderate, mute
- PARTICIPANT: speak, video, chat
- OBSERVER: nothing

Permissions are never stored independently of the role. A role change
replaces the whole set, so a demoted participant keeps no elevated flag.
"""

from pydantic import BaseModel, ConfigDict

from .exceptions import MalformedSessionError
from .models import ParticipantRole


class ParticipantPermissions(BaseModel):
    """What a participant may do in a session."""

    model_config = ConfigDict(frozen=True)

    can_speak: bool = False
    can_video: bool = False
    can_screen: bool = False
    can_chat: bool = False
    can_poll: bool = False
    can_moderate: bool = False
    can_record: bool = False
    can_invite: bool = False
    can_kick: bool = False
    can_mute: bool = False


PERMISSION_FLAGS: tuple[str, ...] = tuple(ParticipantPermissions.model_fields)

NO_PERMISSIONS = ParticipantPermissions()


# Role -> permission set mapping
ROLE_PERMISSIONS: dict[ParticipantRole, ParticipantPermissions] = {
    ParticipantRole.HOST: ParticipantPermissions(
        **dict.fromkeys(PERMISSION_FLAGS, True)
    ),
    ParticipantRole.CO_HOST: ParticipantPermissions(
        can_speak=True,
        can_video=True,
        can_screen=True,
        can_chat=True,
        can_poll=True,
        can_moderate=True,
        can_record=True,
        can_invite=True,
        can_mute=True,
    ),
    ParticipantRole.PRESENTER: ParticipantPermissions(
        can_speak=True,
        can_video=True,
        can_screen=True,
        can_chat=True,
        can_poll=True,
    ),
    ParticipantRole.MODERATOR: ParticipantPermissions(
        can_speak=True,
        can_video=True,
        can_chat=True,
        can_moderate=True,
        can_mute=True,
    ),
    ParticipantRole.PARTICIPANT: ParticipantPermissions(
        can_speak=True,
        can_video=True,
        can_chat=True,
    ),
    ParticipantRole.OBSERVER: NO_PERMISSIONS,
}


def get_permissions_for_role(role: ParticipantRole | str) -> ParticipantPermissions:
    """Get the permission set for a role.

    Args:
        role: ParticipantRole enum or string representation

    Returns:
        The shared, immutable permission set; unknown roles get no permissions

    Examples:
        >>> get_permissions_for_role(ParticipantRole.HOST).can_kick
        True
        >>> get_permissions_for_role("co_host").can_kick
        False
    """
    if isinstance(role, str):
        try:
            role = ParticipantRole(role)
        except ValueError:
            return NO_PERMISSIONS
    return ROLE_PERMISSIONS.get(role, NO_PERMISSIONS)


def has_session_permission(role: ParticipantRole | str, flag: str) -> bool:
    """Check a single permission flag for a role.

    Examples:
        >>> has_session_permission("moderator", "can_mute")
        True
        >>> has_session_permission("participant", "can_screen")
        False
    """
    if flag not in PERMISSION_FLAGS:
        msg = f"Unknown permission flag: {flag}"
        raise MalformedSessionError(msg)
    return getattr(get_permissions_for_role(role), flag)
