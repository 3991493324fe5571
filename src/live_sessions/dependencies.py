"""FastAPI dependencies for live sessions."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import SessionError, SessionParticipantEngine


async def get_session_engine(request: Request) -> SessionParticipantEngine:
    """Get the session participant engine from app state."""
    app_state = request.app.state
    if not hasattr(app_state, "session_engine") or not app_state.session_engine:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Live session engine not available",
        )
    return app_state.session_engine


# Type alias for dependency injection
SessionEngineDep = Annotated[SessionParticipantEngine, Depends(get_session_engine)]


def handle_session_error(error: SessionError) -> HTTPException:
    """Convert session errors to HTTP exceptions."""
    status_map = {
        "malformed_session": status.HTTP_400_BAD_REQUEST,
        "unknown_kind": status.HTTP_404_NOT_FOUND,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
