"""
Client-side failure taxonomy.

Every exception raised while talking to the service is one of these. The
coordinator catches them at the operation boundary and reports them; none of
them is fatal.
"""


class TaskboardError(Exception):
    """Base exception for all client errors."""

    user_message = "Something went wrong"

    def __init__(self, message: str = ""):
        super().__init__(message or self.user_message)


class AuthenticationFailure(TaskboardError):
    """Credential missing, invalid or expired. The session must log in again."""

    user_message = "Your session has expired. Please sign in again."


class ValidationFailure(TaskboardError):
    """Payload rejected before or by the service (e.g. empty title)."""

    user_message = "Invalid input"


class NotFoundOrUnauthorized(TaskboardError):
    """Entity does not exist or belongs to someone else."""

    user_message = "Not found"


class TransientFailure(TaskboardError):
    """Network error, timeout or server error. Not retried."""

    user_message = "Could not reach the server"


class TaskBlocked(ValidationFailure):
    """Completion refused locally because an open task blocks this one."""

    user_message = "This task is blocked by another task!"
