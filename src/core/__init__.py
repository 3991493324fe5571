"""Request context, structured logging and the context middleware."""

from src.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_request_id,
    set_request_id,
    set_user_id,
)
from src.core.logging import configure_structlog, get_logger
from src.core.middleware import RequestContextMiddleware, extract_traceparent


__all__ = [
    "RequestContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "extract_traceparent",
    "get_context",
    "get_logger",
    "get_request_id",
    "set_request_id",
    "set_user_id",
]
