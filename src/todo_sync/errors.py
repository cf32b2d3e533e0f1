"""Error types raised by the todo synchronizer."""

from typing import Any


class TodoSyncError(Exception):
    """Base class for all synchronizer errors."""


class NotFoundError(TodoSyncError):
    """A local entity does not exist."""

    def __init__(self, kind: str, entity_id: str) -> None:
        super().__init__(f"Could not find the {kind} with id: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class IntegrityError(TodoSyncError):
    """Remote-id uniqueness or identity stability was violated."""


class InvalidEventError(TodoSyncError):
    """Webhook payload is malformed or its signature does not match."""


class RemoteError(TodoSyncError):
    """Base class for failures talking to Todoist."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteNotFoundError(RemoteError):
    """The remote task does not exist (HTTP 404)."""


class RemoteTransientError(RemoteError):
    """Network failure, timeout, throttling or 5xx. Safe to retry."""


class RemoteRejectedError(RemoteError):
    """Todoist refused the request (4xx other than 404). Not retried."""


class RemoteUnavailableError(TodoSyncError):
    """An outbound mirror operation could not be completed remotely."""


class RemoteCloseError(TodoSyncError):
    """Closing the remote task failed after the content update succeeded.

    The local task has already been saved as completed; ``task`` holds it so
    the caller can re-drive only the close step.
    """

    def __init__(self, task: Any, cause: Exception) -> None:
        super().__init__(f"Task {task.id} was updated but closing remote task {task.remote_id} failed: {cause}")
        self.task = task
