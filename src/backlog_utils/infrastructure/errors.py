"""Exceptions raised by the Backlog client"""


class BacklogError(Exception):
    """Base class for Backlog client errors."""

    pass


class MaxRetryAttemptsExceeded(BacklogError):
    """Raised when rate limiting outlasts the configured retry budget."""

    def __init__(self, max_attempts: int):
        self.max_attempts = max_attempts
        super().__init__(f"max retry attempts exceeded: {max_attempts}")


class RateLimitDrainError(BacklogError):
    """Raised when the body of a 429 response cannot be discarded."""

    pass


class BacklogAPIError(BacklogError):
    """Non-success response from a Backlog API operation."""

    def __init__(self, action: str, status_code: int, message: str = ""):
        self.action = action
        self.status_code = status_code
        self.message = message
        super().__init__(f"{action}: {status_code}: {message}")
