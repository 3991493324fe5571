"""Live-session engine exceptions.

Join denials and timing violations are returned as values; these are only
raised for input the engine cannot interpret.
"""


class SessionError(Exception):
    """Base live-session error."""

    def __init__(self, message: str, code: str = "session_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class MalformedSessionError(SessionError):
    """Input of the wrong type or outside the known value set."""

    def __init__(self, message: str = "Malformed session input"):
        super().__init__(message, "malformed_session")


class UnknownSessionKindError(SessionError):
    """Validation requested for a payload kind the engine does not know."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown session payload kind: {kind}", "unknown_kind")
