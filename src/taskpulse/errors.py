"""Domain exceptions and their HTTP mapping.

Services raise these; main.py registers one handler that renders every
TaskPulseError as {"message": ...} with the class's status code. Tenant
mismatches and missing records share NotFoundOrForbidden on purpose, so
callers can't probe other workspaces.
"""


class TaskPulseError(Exception):
    """Base exception for TaskPulse business-rule failures."""

    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None):
        self.message = message or self.message
        super().__init__(self.message)


# ─── 400 ─────────────────────────────────────────────────


class ValidationError(TaskPulseError):
    status_code = 400
    message = "Invalid request"


class ConflictError(TaskPulseError):
    status_code = 400
    message = "Conflict"


class EmailTakenError(ConflictError):
    message = "User already exists"


class WorkspaceTakenError(ConflictError):
    message = "This Workspace name is already taken. Please choose a unique name."


# ─── 401 ─────────────────────────────────────────────────


class AuthError(TaskPulseError):
    status_code = 401
    message = "Unauthorized"


class UnauthorizedError(AuthError):
    message = "Unauthorized"


class InvalidTokenError(AuthError):
    message = "Invalid token"


class InvalidCredentialsError(AuthError):
    message = "Invalid credentials"


# ─── 404 ─────────────────────────────────────────────────


class NotFoundOrForbidden(TaskPulseError):
    status_code = 404
    message = "Not found"


class WorkspaceNotFoundError(NotFoundOrForbidden):
    message = "Workspace name not found. Please ask your Admin for the exact ID."


class AssigneeNotFoundError(NotFoundOrForbidden):
    message = "Assignee not found"


class TaskNotFoundError(NotFoundOrForbidden):
    message = "Task not found or unauthorized"


class UserNotFoundError(NotFoundOrForbidden):
    message = "User not found"


# ─── 500 ─────────────────────────────────────────────────


class InternalError(TaskPulseError):
    status_code = 500
    message = "Internal server error"


class NotifierError(Exception):
    """Outbound notification failed. Never leaves the notifier."""
