"""FastAPI dependencies for progress tracking.

Provides dependency injection for:
- Progress engine
- Error handlers
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from .service import (
    ProgressEngine,
    ProgressError,
)


async def get_progress_engine(request: Request) -> ProgressEngine:
    """Get progress engine from app state.

    Args:
        request: FastAPI request

    Returns:
        ProgressEngine instance
    """
    app_state = request.app.state
    if not hasattr(app_state, "progress_engine") or not app_state.progress_engine:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Progress engine not available",
        )
    return app_state.progress_engine


# Type alias for dependency injection
ProgressEngineDep = Annotated[ProgressEngine, Depends(get_progress_engine)]


def handle_progress_error(error: ProgressError) -> HTTPException:
    """Convert progress errors to HTTP exceptions.

    Args:
        error: Progress error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "malformed_progress": status.HTTP_400_BAD_REQUEST,
        "unknown_kind": status.HTTP_404_NOT_FOUND,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
