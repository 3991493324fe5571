"""Progress engine exceptions.

Business-rule rejections are returned as values (see ``TransitionResult``);
these exceptions are reserved for malformed input that reached the engine
despite upstream validation.
"""


class ProgressError(Exception):
    """Base progress error."""

    def __init__(self, message: str, code: str = "progress_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class MalformedProgressError(ProgressError):
    """Input of the wrong type or outside the known value set."""

    def __init__(self, message: str = "Malformed progress input"):
        super().__init__(message, "malformed_progress")


class UnknownRecordKindError(ProgressError):
    """Validation requested for a record kind the engine does not know."""

    def __init__(self, kind: str):
        super().__init__(f"Unknown progress record kind: {kind}", "unknown_kind")
