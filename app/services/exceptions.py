"""Expected moderation failures.

Services raise these for validation and precondition failures; the HTTP layer
turns them into ``{"success": false, "message": ...}`` bodies.
"""


class ModerationError(Exception):
    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(ModerationError):
    status_code = 400


class NotFound(ModerationError):
    status_code = 404


class PreconditionFailed(ModerationError):
    status_code = 409


class OperationFailed(ModerationError):
    """An unexpected error, surfaced with its underlying message for admins."""

    status_code = 500

    def __init__(self, message: str, error: str = ""):
        super().__init__(message)
        self.error = error
