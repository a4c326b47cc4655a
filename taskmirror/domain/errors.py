from __future__ import annotations


class TaskManagerError(RuntimeError):
    """Base error for every failure reported to callers."""


class InvalidInput(TaskManagerError):
    """Raised when a caller supplies a malformed id, date or enum value."""


class TaskNotFound(TaskManagerError):
    """Raised when a by-id task operation matches no rows."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class NotConnected(TaskManagerError):
    """Raised when no calendar credential is stored."""

    def __init__(self) -> None:
        super().__init__("Google Calendar is not connected")


class AuthRefreshFailed(TaskManagerError):
    """Raised when the refresh-token exchange fails."""


class RemoteFailure(TaskManagerError):
    """Raised on transport errors and non-2xx responses other than 404/410."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(message)
        else:
            super().__init__(f"{message} ({status_code})")


class EventNotFound(TaskManagerError):
    """Raised when the calendar API answers 404/410 for an event update."""

    def __init__(self, event_id: str) -> None:
        self.event_id = event_id
        super().__init__(f"Calendar event not found: {event_id}")
