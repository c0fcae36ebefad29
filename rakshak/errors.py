"""
Error taxonomy for the decision service.

Only ValidationError is ever shown to the caller. Everything raised by the
reasoning service or the notification gateway is recovered locally.
"""


class RakshakError(Exception):
    """Base class for all service errors."""
    pass


class ValidationError(RakshakError, ValueError):
    """Raised when a raw sensor payload cannot become a Reading."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class ReasoningClientError(RakshakError):
    """Raised by a reasoning client when the remote call fails."""
    pass


class ReasoningUnavailable(RakshakError):
    """Primary tier failed or produced content that is not a valid Verdict."""

    def __init__(self, message: str, reason: str = "error"):
        super().__init__(message)
        self.reason = reason


class NotificationFailed(RakshakError):
    """Raised by a notification gateway when a send does not go through."""
    pass
