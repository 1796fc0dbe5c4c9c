"""Custom exception classes for the task board.

Every error carries a human readable ``message`` and a stable ``code`` naming
the rule that rejected the operation (e.g. ``task.completed_locked``). The HTTP
layer maps classes to status codes; nothing in here knows about transport.
"""


class TaskBoardError(Exception):
    """Base exception for the task board."""

    default_code = "error"

    def __init__(self, message: str = "An error occurred", code: str = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(self.message)


class NotFoundError(TaskBoardError):
    """Raised when a referenced user, board or task does not exist."""
    default_code = "not_found"


class ForbiddenError(TaskBoardError):
    """Raised when the authorization policy denies an action."""
    default_code = "forbidden"


class ValidationError(TaskBoardError):
    """Raised when input or a business rule is violated."""
    default_code = "validation"


class ConflictError(TaskBoardError):
    """Raised when a uniqueness constraint would be violated."""
    default_code = "conflict"


class AuthenticationError(TaskBoardError):
    """Raised when login credentials are rejected."""
    default_code = "authentication"
