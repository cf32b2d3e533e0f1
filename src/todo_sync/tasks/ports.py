"""Remote capability consumed by the task service."""

from typing import Protocol

from todo_sync.todoist.models import TodoistTask


class RemoteMirror(Protocol):
    """Outbound remote writes used by the task service."""

    def create(self, content: str) -> TodoistTask: ...

    def update(self, remote_id: str, content: str) -> TodoistTask: ...

    def close(self, remote_id: str) -> None: ...
